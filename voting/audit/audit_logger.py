# voting/audit/audit_logger.py

import os
import json
import hashlib
import base64
import logging
from datetime import datetime
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives import serialization

# Append-only audit trail of store events with hash chaining and Ed25519 signatures

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, log_dir='logs'):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, 'audit.log')
        self.key_file = os.path.join(log_dir, 'audit_signing.key')
        self.previous_hash = None

        os.makedirs(log_dir, exist_ok=True)

        self.signing_key = self._load_signing_key()
        self._load_previous_hash()

    def _load_signing_key(self):
        # Key is kept beside the log so entries from earlier runs still verify
        if os.path.exists(self.key_file):
            with open(self.key_file, 'rb') as f:
                return Ed25519PrivateKey.from_private_bytes(f.read())
        key = Ed25519PrivateKey.generate()
        raw = key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        with open(self.key_file, 'wb') as f:
            f.write(raw)
        os.chmod(self.key_file, 0o600)
        return key

    def _load_previous_hash(self):
        if os.path.exists(self.log_file):
            with open(self.log_file, 'r') as f:
                lines = [line for line in f.readlines() if line.strip()]
                if lines:
                    try:
                        last_entry = json.loads(lines[-1])
                        if isinstance(last_entry, dict):
                            self.previous_hash = last_entry.get('hash')
                    except ValueError:
                        self.previous_hash = None

    @staticmethod
    def _canonical(entry):
        return json.dumps(entry, sort_keys=True).encode()

    def log_event(self, event_type, data, user_id=None):
        """Append one signed entry. Failures are reported, never raised."""
        try:
            log_entry = {
                "timestamp": datetime.now().isoformat(),
                "event_type": event_type,
                "data": data,
                "user_id": user_id,
                "previous_hash": self.previous_hash,
            }
            entry_json = self._canonical(log_entry)
            entry_hash = hashlib.sha256(entry_json).hexdigest()
            signature = self.signing_key.sign(entry_json)
            log_entry['hash'] = entry_hash
            log_entry['signature'] = base64.b64encode(signature).decode()

            with open(self.log_file, 'a') as f:
                f.write(json.dumps(log_entry) + "\n")

            self.previous_hash = entry_hash
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Audit log error: {str(e)}")

    def verify_log_integrity(self):
        """Check chaining, hashes and signatures of every entry in the log."""
        if not os.path.exists(self.log_file):
            return True
        public_key = self.signing_key.public_key()
        previous_hash = None
        try:
            with open(self.log_file, 'r') as f:
                for line in f:
                    if not line.strip():
                        continue
                    log_entry = json.loads(line)
                    if not isinstance(log_entry, dict):
                        return False
                    if log_entry.get('previous_hash') != previous_hash:
                        return False
                    entry_copy = dict(log_entry)
                    signature = base64.b64decode(entry_copy.pop('signature'))
                    entry_hash = entry_copy.pop('hash')
                    entry_json = self._canonical(entry_copy)
                    if hashlib.sha256(entry_json).hexdigest() != entry_hash:
                        return False
                    public_key.verify(signature, entry_json)
                    previous_hash = entry_hash
        except (OSError, ValueError, KeyError, AttributeError, InvalidSignature):
            return False
        return True
