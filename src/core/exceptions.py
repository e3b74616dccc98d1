"""
Custom exceptions.

Raised inside the process only. The service layer catches them and turns them into Outcome values,
so none of these ever cross the store boundary or escape OptimisticSyncController.submit.
"""

from src.core.shared_types import ErrorKind


class CounterBoardError(Exception):
    """Top-level exception for anything the counter board raises on purpose."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST


class NotFoundError(CounterBoardError):
    """Game or player identifier does not resolve."""

    kind = ErrorKind.NOT_FOUND


class CapacityError(CounterBoardError):
    """Game already holds the maximum number of players."""

    kind = ErrorKind.CAPACITY


class PasswordMismatchError(CounterBoardError):
    kind = ErrorKind.PASSWORD_MISMATCH


class InvalidRequestError(CounterBoardError):
    """Request / intent is structurally fine but makes no sense for this game."""

    kind = ErrorKind.INVALID_REQUEST


class UnknownEffectError(InvalidRequestError):
    """Effect name is not in the effect registry."""


class InvalidPathError(InvalidRequestError):
    """A path-update map cannot be applied to the document."""
