from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
from typing import Any, Dict
import logging
import traceback
import uuid

from chainvote.core.constants import ErrorCodes, ErrorMessages
from chainvote.core.errors import ChainVoteError

logger = logging.getLogger(__name__)


def _new_request_id() -> str:
    return str(uuid.uuid4())[:8]


def _envelope(request: Request, request_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": str(request.url.path),
        "request_id": request_id
    }


async def validation_exception_handler(request: Request, exc: ValidationError):
    """
    Handler for request body and Pydantic validation errors.

    Registered for both FastAPI's RequestValidationError and bare Pydantic
    ValidationError so every malformed payload gets the same 422 shape.
    """
    request_id = _new_request_id()
    client_ip = request.client.host if request.client else "unknown"
    errors = jsonable_encoder(exc.errors())

    logger.warning(
        f"Validation error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"IP: {client_ip} - "
        f"Errors: {len(errors)}"
    )

    return JSONResponse(
        status_code=422,
        content=_envelope(request, request_id, {
            "message": ErrorMessages.VALIDATION_ERROR,
            "error_code": ErrorCodes.VALIDATION_ERROR,
            "errors": errors
        })
    )


async def domain_exception_handler(request: Request, exc: ChainVoteError):
    """Render service-layer errors with their stable error code."""
    request_id = _new_request_id()
    client_ip = request.client.host if request.client else "unknown"

    if exc.status_code >= 500:
        logger.error(
            f"Upstream error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"Code: {exc.error_code} - "
            f"Detail: {exc.message}"
        )
    else:
        logger.warning(
            f"Client error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip} - "
            f"Code: {exc.error_code}"
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, request_id, jsonable_encoder(exc.to_dict()))
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Enhanced HTTP exception handler

    Dict details are merged into the body; plain string details are wrapped.
    """
    request_id = _new_request_id()
    client_ip = request.client.host if request.client else "unknown"

    # Enhanced logging based on error severity
    if exc.status_code >= 500:
        logger.error(
            f"Server error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip} - "
            f"Detail: {exc.detail}"
        )
    elif exc.status_code >= 400:
        logger.warning(
            f"Client error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip}"
        )

    # Format response based on detail type
    if isinstance(exc.detail, dict):
        response_content = dict(exc.detail)
    elif exc.status_code == 401:
        response_content = {
            "message": str(exc.detail),
            "error_code": ErrorCodes.AUTH_ERROR
        }
    else:
        response_content = {
            "message": str(exc.detail),
            "error_code": "HTTP_ERROR"
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, request_id, response_content),
        headers=getattr(exc, "headers", None)
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handler for database-related exceptions"""
    request_id = _new_request_id()

    logger.error(
        f"Database error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__}"
    )

    return JSONResponse(
        status_code=500,
        content=_envelope(request, request_id, {
            "message": ErrorMessages.DATABASE_ERROR,
            "error_code": ErrorCodes.DATABASE_ERROR,
            "hint": "Please try again later or contact support"
        })
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for unexpected errors"""
    request_id = _new_request_id()

    # Get full traceback for debugging
    tb_str = traceback.format_exc()

    logger.critical(
        f"Unexpected error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"Traceback: {tb_str}"
    )

    return JSONResponse(
        status_code=500,
        content=_envelope(request, request_id, {
            "message": ErrorMessages.INTERNAL_ERROR,
            "error_code": ErrorCodes.INTERNAL_ERROR
        })
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChainVoteError, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
