"""
Domain errors raised by the service layer.

Each error carries an HTTP status, a stable machine-readable ``error_code``
and a human message. The FastAPI handler in ``chainvote.core.exception``
turns them into JSON responses.
"""

from typing import Any, Dict, Optional

from chainvote.core.constants import ErrorCodes, ErrorMessages


class ChainVoteError(Exception):
    status_code = 400
    default_code = ErrorCodes.BUSINESS_RULE_VIOLATION

    def __init__(self, message: str, error_code: Optional[str] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "error_code": self.error_code, **self.details}


class ValidationError(ChainVoteError):
    """Malformed input or policy violation."""
    status_code = 400
    default_code = ErrorCodes.VALIDATION_ERROR


class AuthenticationError(ChainVoteError):
    """Bad, missing or expired credential. Never says which part was wrong."""
    status_code = 401
    default_code = ErrorCodes.INVALID_CREDENTIALS

    def __init__(self, message: str = ErrorMessages.INVALID_CREDENTIALS, error_code: Optional[str] = None, **details: Any):
        super().__init__(message, error_code, **details)


class AuthorizationError(ChainVoteError):
    """Wrong role or not the owner of the resource."""
    status_code = 403
    default_code = ErrorCodes.INSUFFICIENT_PERMISSIONS


class ForbiddenError(ChainVoteError):
    """Access refused for a business reason, e.g. a missing voting token."""
    status_code = 403
    default_code = ErrorCodes.NO_TOKEN


class NotFoundError(ChainVoteError):
    status_code = 404
    default_code = ErrorCodes.RESOURCE_NOT_FOUND


class ConflictError(ChainVoteError):
    """Uniqueness violation: duplicate registration, vote or signature."""
    status_code = 409
    default_code = ErrorCodes.DUPLICATE_RESOURCE


class PreconditionError(ChainVoteError):
    """Operation attempted outside its allowed time window or state."""
    status_code = 400
    default_code = ErrorCodes.BUSINESS_RULE_VIOLATION


class ExternalServiceError(ChainVoteError):
    """Blockchain RPC unreachable or returned an error."""
    status_code = 502
    default_code = ErrorCodes.BLOCKCHAIN_ERROR
