# voting/store.py

# Voting store: users, candidates and one vote per user.
# Each operation is a one-shot request against the database and reports its
# outcome as a Status; only opening the store and creating the schema raise.
#
# The duplicate-user and duplicate-vote checks run as separate statements
# before the insert, so two concurrent callers can both pass them. Nothing
# here is safe for concurrent use.

import logging
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import func, text
from sqlalchemy.exc import OperationalError, ProgrammingError, SQLAlchemyError

from voting.audit.audit_logger import AuditLogger
from voting.database.models import User, Candidate, Vote
from voting.errors import Status, StorageUnavailable, SchemaCreationFailed

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# SQLite result codes that can only come from running a statement, never from
# compiling it. Available on sqlite3 errors from Python 3.11 on.
EXECUTION_ERROR_NAMES = (
    "SQLITE_BUSY", "SQLITE_LOCKED", "SQLITE_IOERR", "SQLITE_FULL",
    "SQLITE_READONLY", "SQLITE_CANTOPEN", "SQLITE_CORRUPT", "SQLITE_NOTADB",
    "SQLITE_INTERRUPT", "SQLITE_ABORT", "SQLITE_PROTOCOL",
)


def failure_status(exc: SQLAlchemyError) -> Status:
    """Map a driver error to a status: rejected statements vs. failed execution."""
    if isinstance(exc, ProgrammingError):
        return Status.QUERY_PREPARATION_FAILED
    if isinstance(exc, OperationalError):
        error_name = getattr(getattr(exc, 'orig', None), 'sqlite_errorname', None) or ""
        if error_name.startswith(EXECUTION_ERROR_NAMES):
            return Status.EXECUTION_FAILED
        return Status.QUERY_PREPARATION_FAILED
    return Status.EXECUTION_FAILED


class VotingStore:
    def __init__(self, db, audit_logger=None):
        """
        db: the Flask-SQLAlchemy extension; its session is bound to the
            current application context, so the store must be used inside one.
        audit_logger: optional AuditLogger receiving an entry per store event.
        """
        self.db = db
        self.audit = audit_logger

    @property
    def session(self):
        return self.db.session

    # ------------------------------ lifecycle ------------------------------ #

    def check_connection(self) -> None:
        try:
            self.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageUnavailable(self._message(e)) from e

    def create_tables(self) -> None:
        try:
            self.db.create_all()
        except SQLAlchemyError as e:
            raise SchemaCreationFailed(self._message(e)) from e

    def clear_all(self) -> Status:
        """Delete every vote, user and candidate; candidate ids restart at 1."""
        try:
            self.session.query(Vote).delete()
            self.session.query(User).delete()
            self.session.query(Candidate).delete()
            if self.session.get_bind().dialect.name == 'sqlite':
                self.session.execute(text("DELETE FROM sqlite_sequence WHERE name = 'candidates'"))
            self.session.commit()
        except SQLAlchemyError as e:
            return self._failure(e, "clearing tables")
        self._audit('store_cleared', {})
        return Status.SUCCESS

    def close(self) -> None:
        self.session.remove()

    # --------------------------- existence checks -------------------------- #
    # These raise SQLAlchemyError; the calling operation turns it into a Status.

    def user_exists(self, username: str) -> bool:
        return self.session.query(User.id).filter_by(username=username).first() is not None

    def has_voted(self, user_id: int) -> bool:
        return self.session.query(Vote.id).filter_by(user_id=user_id).first() is not None

    def candidate_exists(self, candidate_id: int) -> bool:
        return self.session.query(Candidate.id).filter_by(id=candidate_id).first() is not None

    # ------------------------------ operations ----------------------------- #

    def register_user(self, username: str, password_hash: str) -> Status:
        try:
            if self.user_exists(username):
                logger.warning(f"User {username} already exists!")
                self._audit('duplicate_user_attempt', {'username': username})
                return Status.ALREADY_EXISTS
            user = User(username=username, password_hash=password_hash)
            self.session.add(user)
            self.session.commit()
            user_id = user.id
        except SQLAlchemyError as e:
            return self._failure(e, f"registering user {username}")
        logger.info(f"User {username} successfully registered!")
        self._audit('user_registered', {'username': username}, user_id=user_id)
        return Status.SUCCESS

    def add_candidate(self, name: str) -> Status:
        # Duplicate names are allowed
        try:
            candidate = Candidate(name=name)
            self.session.add(candidate)
            self.session.commit()
            candidate_id = candidate.id
        except SQLAlchemyError as e:
            return self._failure(e, f"adding candidate {name}")
        logger.info(f"Candidate {name} successfully added!")
        self._audit('candidate_added', {'candidate_id': candidate_id, 'name': name})
        return Status.SUCCESS

    def cast_vote(self, user_id: int, candidate_id: int) -> Status:
        try:
            if self.has_voted(user_id):
                logger.warning(f"Error: user {user_id} has already voted!")
                self._audit('duplicate_vote_attempt', {'candidate_id': candidate_id}, user_id=user_id)
                return Status.ALREADY_VOTED

            if not self.candidate_exists(candidate_id):
                logger.warning(f"Error: candidate with ID {candidate_id} does not exist!")
                self._audit('unknown_candidate_vote_attempt', {'candidate_id': candidate_id}, user_id=user_id)
                return Status.CANDIDATE_NOT_FOUND

            timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
            vote = Vote(user_id=user_id, candidate_id=candidate_id, timestamp=timestamp)
            self.session.add(vote)
            self.session.commit()
            vote_id = vote.id
        except SQLAlchemyError as e:
            return self._failure(e, f"casting vote for user {user_id}")
        logger.info(f"Vote {vote_id} registered for candidate {candidate_id}")
        self._audit('vote_cast', {'vote_id': vote_id, 'candidate_id': candidate_id,
                                  'timestamp': timestamp}, user_id=user_id)
        return Status.SUCCESS

    def list_candidates(self) -> Iterator[Tuple[int, str]]:
        """
        Yield (id, name) for every candidate in the order the engine returns
        them. The query runs on first iteration; call again to restart.
        """
        query = self.session.query(Candidate.id, Candidate.name)
        try:
            for candidate_id, name in query:
                yield candidate_id, name
        except SQLAlchemyError as e:
            self._failure(e, "listing candidates")

    def tally(self) -> List[Tuple[int, str, int]]:
        """Return (id, name, votes) per candidate ordered by id, zero-vote candidates included."""
        try:
            rows = (
                self.session.query(Candidate.id, Candidate.name, func.count(Vote.id))
                .outerjoin(Vote, Vote.candidate_id == Candidate.id)
                .group_by(Candidate.id, Candidate.name)
                .order_by(Candidate.id)
                .all()
            )
        except SQLAlchemyError as e:
            self._failure(e, "tallying votes")
            return []
        return [(candidate_id, name, count) for candidate_id, name, count in rows]

    # ------------------------------- helpers ------------------------------- #

    @staticmethod
    def _message(exc: SQLAlchemyError) -> str:
        return str(getattr(exc, 'orig', None) or exc)

    def _failure(self, exc: SQLAlchemyError, action: str) -> Status:
        self.session.rollback()
        status = failure_status(exc)
        logger.error(f"Error {action}: {self._message(exc)}")
        return status

    def _audit(self, event_type, data, user_id=None):
        if self.audit is not None:
            self.audit.log_event(event_type, data, user_id=user_id)


def build_store(app, db) -> VotingStore:
    """
    Store wired with the audit trail configured on `app`. No trail when
    AUDIT_LOG_DIR is empty or the trail cannot be set up.
    """
    log_dir: Optional[str] = app.config.get('AUDIT_LOG_DIR')
    audit_logger = None
    if log_dir:
        try:
            audit_logger = AuditLogger(log_dir=log_dir)
        except (OSError, ValueError) as e:
            logger.error(f"Audit trail disabled, cannot use {log_dir}: {e}")
    return VotingStore(db, audit_logger=audit_logger)
