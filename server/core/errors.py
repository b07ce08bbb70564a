"""Errors raised by the state service, each tied to a response error code."""

from shared.schemas import ErrorCode


class StateServiceError(Exception):
    """Base class for errors reported in a response header."""

    code = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(StateServiceError):
    """Requested item does not exist in the current snapshot."""

    code = ErrorCode.NOT_FOUND


class MalformedError(StateServiceError):
    """Request could not be decoded or failed validation."""

    code = ErrorCode.MALFORMED


class UnavailableError(StateServiceError):
    """Nothing has been published yet."""

    code = ErrorCode.UNAVAILABLE
