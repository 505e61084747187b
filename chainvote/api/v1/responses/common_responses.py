"""
Common reusable response definitions for FastAPI endpoints.

This module contains response configurations that are shared across multiple endpoints,
promoting consistency and reducing duplication in OpenAPI documentation.
"""

from typing import Any, Dict

from chainvote.schemas.error import (
    ErrorResponse,
    ValidationErrorResponse,
    ServerErrorResponse
)

# Constants for common values
CONTENT_TYPE_JSON = "application/json"
EXAMPLE_TIMESTAMP = "2024-01-01T12:00:00+00:00"
EXAMPLE_REQUEST_ID = "a1b2c3d4"
EXAMPLE_API_PATH = "/api/v1/endpoint"
VALIDATION_FAILED_MESSAGE = "Validation failed"
VALIDATION_ERROR_CODE = "VALIDATION_ERROR"


def error_example(message: str, error_code: str, path: str = EXAMPLE_API_PATH, **extra: Any) -> Dict[str, Any]:
    """Build an error body example in the shape the exception handlers emit."""
    return {
        "message": message,
        "error_code": error_code,
        **extra,
        "timestamp": EXAMPLE_TIMESTAMP,
        "path": path,
        "request_id": EXAMPLE_REQUEST_ID
    }


def error_response(description: str, examples: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Build an OpenAPI response entry for a domain error status.

    Args:
        description: Human description of the status
        examples: Mapping of example name to (summary, body) as produced by ``named_example``
    """
    return {
        "description": description,
        "model": ErrorResponse,
        "content": {
            CONTENT_TYPE_JSON: {
                "examples": examples
            }
        }
    }


def named_example(summary: str, value: Dict[str, Any]) -> Dict[str, Any]:
    return {"summary": summary, "value": value}


# Common authentication error response
def get_auth_error_response(path: str = EXAMPLE_API_PATH):
    return error_response("Authentication required", {
        "missing_token": named_example(
            "No bearer token supplied",
            error_example("Authentication required", "AUTH_ERROR", path)
        ),
        "invalid_token": named_example(
            "Expired or tampered token",
            error_example("Could not validate credentials", "AUTH_ERROR", path)
        )
    })


def get_forbidden_response(message: str, path: str = EXAMPLE_API_PATH, error_code: str = "INSUFFICIENT_PERMISSIONS"):
    return error_response("Insufficient permissions", {
        "forbidden": named_example(message, error_example(message, error_code, path))
    })


def get_not_found_response(message: str, error_code: str, path: str = EXAMPLE_API_PATH, **extra: Any):
    return error_response("Resource not found", {
        "not_found": named_example(message, error_example(message, error_code, path, **extra))
    })


# Common validation error response
def get_validation_error_response(path: str = EXAMPLE_API_PATH):
    """Generate validation error response with context-specific path."""
    return {
        "description": "Validation error",
        "model": ValidationErrorResponse,
        "content": {
            CONTENT_TYPE_JSON: {
                "example": {
                    "message": VALIDATION_FAILED_MESSAGE,
                    "error_code": VALIDATION_ERROR_CODE,
                    "errors": [
                        {
                            "loc": ["body", "field"],
                            "msg": "Field required",
                            "type": "missing"
                        }
                    ],
                    "timestamp": EXAMPLE_TIMESTAMP,
                    "path": path,
                    "request_id": EXAMPLE_REQUEST_ID
                }
            }
        }
    }


# Common server error response
def get_server_error_response(error_code: str = "INTERNAL_ERROR", path: str = EXAMPLE_API_PATH):
    """Generate server error response with context-specific error code and path."""
    return {
        "description": "Internal server error",
        "model": ServerErrorResponse,
        "content": {
            CONTENT_TYPE_JSON: {
                "example": {
                    "message": "An unexpected error occurred",
                    "error_code": error_code,
                    "timestamp": EXAMPLE_TIMESTAMP,
                    "path": path,
                    "request_id": EXAMPLE_REQUEST_ID
                }
            }
        }
    }


# Shorthand references for common responses
AUTH_ERROR_RESPONSE = get_auth_error_response()
VALIDATION_ERROR_RESPONSE = get_validation_error_response()
SERVER_ERROR_RESPONSE = get_server_error_response()
