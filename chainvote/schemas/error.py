from pydantic import BaseModel, ConfigDict
from typing import Optional, Any, Dict, List


class ErrorDetail(BaseModel):
    """Individual error detail for validation errors"""
    loc: List[Any]  # Location of the error (field path)
    msg: str        # Error message
    type: str       # Error type
    ctx: Optional[Dict[str, Any]] = None  # Additional context


class ErrorResponse(BaseModel):
    """Response schema for domain errors (400, 401, 403, 404, 409, 502)"""
    message: str
    error_code: str
    timestamp: str
    path: str
    request_id: Optional[str] = None

    # Domain errors may add context such as poll_id or field
    model_config = ConfigDict(extra="allow")


class ValidationErrorResponse(BaseModel):
    """Response schema for request validation errors (422)"""
    message: str = "Validation failed"
    error_code: str = "VALIDATION_ERROR"
    errors: List[ErrorDetail]
    timestamp: str
    path: str
    request_id: Optional[str] = None


class ServerErrorResponse(BaseModel):
    """Response schema for internal server errors (500)"""
    message: str = "An unexpected error occurred"
    error_code: str = "INTERNAL_ERROR"
    hint: Optional[str] = None
    request_id: Optional[str] = None  # For tracking
    timestamp: str
    path: str
