"""
User-specific response definitions for FastAPI endpoints.

Covers the profile endpoints shared by admins and voters.
"""

from .common_responses import (
    CONTENT_TYPE_JSON,
    AUTH_ERROR_RESPONSE,
    error_example,
    error_response,
    named_example,
    get_not_found_response,
    get_validation_error_response,
    get_server_error_response
)

# Constants for user paths
USERS_BASE_PATH = "/api/v1/users"
USER_PROFILE_PATH = f"{USERS_BASE_PATH}/me"
USER_PASSWORD_PATH = f"{USERS_BASE_PATH}/me/password"

USER_PROFILE_EXAMPLE = {
    "id": 1,
    "username": "alice",
    "email": "alice@example.com",
    "wallet_address": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
    "role": "voter",
    "voter_id": "VID-20240101-AB12C",
    "is_eligible": True,
    "created_at": "2024-01-01T12:00:00"
}

PASSWORD_CHANGED_EXAMPLE = {
    "message": "Password updated successfully"
}


def get_user_profile_responses():
    """Generate response set for reading the caller's profile."""
    return {
        200: {
            "description": "Profile retrieved successfully",
            "content": {CONTENT_TYPE_JSON: {"example": USER_PROFILE_EXAMPLE}}
        },
        401: AUTH_ERROR_RESPONSE,
        404: get_not_found_response("User not found", "RESOURCE_NOT_FOUND", USER_PROFILE_PATH),
        500: get_server_error_response("DATABASE_ERROR", USER_PROFILE_PATH)
    }


def get_user_update_responses():
    """Generate response set for updating username or wallet."""
    return {
        200: {
            "description": "Profile updated successfully",
            "content": {CONTENT_TYPE_JSON: {"example": USER_PROFILE_EXAMPLE}}
        },
        401: AUTH_ERROR_RESPONSE,
        409: error_response("Duplicate wallet", {
            "duplicate_wallet": named_example(
                "Wallet taken by an admin or voter",
                error_example(
                    "Wallet address is already registered",
                    "DUPLICATE_RESOURCE",
                    USER_PROFILE_PATH,
                    wallet_address="9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
                )
            )
        }),
        422: get_validation_error_response(USER_PROFILE_PATH),
        500: get_server_error_response("DATABASE_ERROR", USER_PROFILE_PATH)
    }


def get_password_change_responses():
    """Generate response set for changing the caller's password."""
    return {
        200: {
            "description": "Password changed",
            "content": {CONTENT_TYPE_JSON: {"example": PASSWORD_CHANGED_EXAMPLE}}
        },
        400: error_response("Password policy not met", {
            "weak_password": named_example(
                "New password too weak",
                error_example(
                    "Password must be at least 8 characters long and contain at least 1 uppercase letter, "
                    "1 lowercase letter, 1 number, and 1 special character (@$!%*?&#)",
                    "VALIDATION_ERROR",
                    USER_PASSWORD_PATH,
                    field="password"
                )
            )
        }),
        401: error_response("Authentication failed", {
            "wrong_current_password": named_example(
                "Current password does not match",
                error_example("Current password is incorrect", "INVALID_CREDENTIALS", USER_PASSWORD_PATH)
            ),
            "missing_token": named_example(
                "No bearer token supplied",
                error_example("Authentication required", "AUTH_ERROR", USER_PASSWORD_PATH)
            )
        }),
        422: get_validation_error_response(USER_PASSWORD_PATH),
        500: get_server_error_response("DATABASE_ERROR", USER_PASSWORD_PATH)
    }
