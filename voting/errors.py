# voting/errors.py

from enum import Enum


class Status(Enum):
    """
    Outcome of a store operation. Only SUCCESS means the write took effect.

    QUERY_PREPARATION_FAILED: the engine rejected the statement (ProgrammingError,
    or an OperationalError such as a missing table or bad SQL).
    EXECUTION_FAILED: the statement ran and failed (IntegrityError, or an
    OperationalError whose SQLite code is busy/locked/I-O/full/read-only).
    Drivers that do not report an SQLite error name put every
    OperationalError under QUERY_PREPARATION_FAILED.
    """
    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"
    ALREADY_VOTED = "already_voted"
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    QUERY_PREPARATION_FAILED = "query_preparation_failed"
    EXECUTION_FAILED = "execution_failed"

    @property
    def ok(self) -> bool:
        return self is Status.SUCCESS


class VotingStoreError(Exception):
    """Base class for fatal storage errors."""


class StorageUnavailable(VotingStoreError):
    """The database could not be opened or connected to."""


class SchemaCreationFailed(VotingStoreError):
    """The users/candidates/votes tables could not be created."""
