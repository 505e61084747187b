"""
Authentication-specific response definitions for FastAPI endpoints.

This module contains response configurations specific to registration and login,
building upon common responses for maximum reusability.
"""

from .common_responses import (
    CONTENT_TYPE_JSON,
    error_example,
    error_response,
    named_example,
    get_validation_error_response,
    get_server_error_response
)

# Constants for auth paths
AUTH_BASE_PATH = "/api/v1/auth"
REGISTER_PATH = f"{AUTH_BASE_PATH}/register"
LOGIN_PATH = f"{AUTH_BASE_PATH}/login"
TOKEN_PATH = f"{AUTH_BASE_PATH}/token"

# Auth success response examples
ADMIN_AUTH_EXAMPLE = {
    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
    "token_type": "bearer",
    "user": {
        "id": 1,
        "username": "admin",
        "email": "admin@example.com",
        "wallet_address": "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",
        "role": "admin",
        "voter_id": None,
        "is_eligible": None,
        "created_at": "2024-01-01T12:00:00"
    },
    "message": "Registration successful"
}

VOTER_AUTH_EXAMPLE = {
    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
    "token_type": "bearer",
    "user": {
        "id": 1,
        "username": "alice",
        "email": "alice@example.com",
        "wallet_address": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
        "role": "voter",
        "voter_id": "VID-20240101-AB12C",
        "is_eligible": True,
        "created_at": "2024-01-01T12:00:00"
    },
    "message": "Login successful"
}

TOKEN_SUCCESS_EXAMPLE = {
    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
    "token_type": "bearer"
}


def _auth_success(description: str):
    return {
        "description": description,
        "content": {
            CONTENT_TYPE_JSON: {
                "examples": {
                    "admin": named_example("Admin", ADMIN_AUTH_EXAMPLE),
                    "voter": named_example("Voter", VOTER_AUTH_EXAMPLE)
                }
            }
        }
    }


def get_invalid_credentials_response(path: str = LOGIN_PATH):
    return error_response("Invalid credentials", {
        "invalid_credentials": named_example(
            "Unknown account or wrong secret",
            error_example("Invalid credentials", "INVALID_CREDENTIALS", path)
        )
    })


def get_registration_responses():
    """Generate complete response set for the registration endpoint."""
    return {
        201: _auth_success("Account registered successfully"),
        400: error_response("Registration rejected", {
            "weak_password": named_example(
                "Password policy not met",
                error_example(
                    "Password must be at least 8 characters long and contain at least 1 uppercase letter, "
                    "1 lowercase letter, 1 number, and 1 special character (@$!%*?&#)",
                    "VALIDATION_ERROR",
                    REGISTER_PATH,
                    field="password"
                )
            ),
            "invalid_national_id": named_example(
                "Malformed national identifier",
                error_example("National identifier must be 5-20 digits", "VALIDATION_ERROR", REGISTER_PATH, field="national_id")
            )
        }),
        409: error_response("Duplicate registration", {
            "duplicate_email": named_example(
                "Email taken by an admin or voter",
                error_example("Email is already registered", "DUPLICATE_RESOURCE", REGISTER_PATH, email="alice@example.com")
            ),
            "duplicate_wallet": named_example(
                "Wallet taken by an admin or voter",
                error_example(
                    "Wallet address is already registered",
                    "DUPLICATE_RESOURCE",
                    REGISTER_PATH,
                    wallet_address="9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
                )
            ),
            "duplicate_national_id": named_example(
                "National identifier already registered",
                error_example("National identifier is already registered", "DUPLICATE_RESOURCE", REGISTER_PATH)
            )
        }),
        422: get_validation_error_response(REGISTER_PATH),
        500: get_server_error_response("DATABASE_ERROR", REGISTER_PATH)
    }


def get_login_responses():
    """Generate complete response set for the JSON login endpoint."""
    return {
        200: _auth_success("Login successful"),
        401: get_invalid_credentials_response(LOGIN_PATH),
        422: get_validation_error_response(LOGIN_PATH),
        500: get_server_error_response("INTERNAL_ERROR", LOGIN_PATH)
    }


def get_token_responses():
    """Generate complete response set for the OAuth2 token endpoint."""
    return {
        200: {
            "description": "Token issued",
            "content": {
                CONTENT_TYPE_JSON: {
                    "example": TOKEN_SUCCESS_EXAMPLE
                }
            }
        },
        401: get_invalid_credentials_response(TOKEN_PATH),
        422: get_validation_error_response(TOKEN_PATH),
        500: get_server_error_response("INTERNAL_ERROR", TOKEN_PATH)
    }
