"""
Response definitions for FastAPI endpoints.

This module provides centralized response configurations for OpenAPI documentation,
promoting reusability and maintainability across all API endpoints.
"""

from .common_responses import (
    AUTH_ERROR_RESPONSE,
    VALIDATION_ERROR_RESPONSE,
    SERVER_ERROR_RESPONSE,
    get_validation_error_response,
    get_server_error_response,
)

from .poll_responses import (
    get_poll_create_responses,
    get_poll_list_responses,
    get_single_poll_responses,
    get_poll_results_responses,
    get_poll_history_responses,
    get_poll_delete_responses,
    get_poll_purge_responses,
    get_poll_vote_responses,
    get_vote_status_responses,
    get_transaction_verify_responses,
)

from .auth_responses import (
    get_registration_responses,
    get_login_responses,
    get_token_responses,
)

from .user_responses import (
    get_user_profile_responses,
    get_user_update_responses,
    get_password_change_responses,
)

from .token_responses import (
    get_mint_responses,
    get_poll_tokens_responses,
    get_my_tokens_responses,
    get_token_status_responses,
)

__all__ = [
    # Common responses
    "AUTH_ERROR_RESPONSE",
    "VALIDATION_ERROR_RESPONSE",
    "SERVER_ERROR_RESPONSE",
    "get_validation_error_response",
    "get_server_error_response",

    # Poll-specific responses
    "get_poll_create_responses",
    "get_poll_list_responses",
    "get_single_poll_responses",
    "get_poll_results_responses",
    "get_poll_history_responses",
    "get_poll_delete_responses",
    "get_poll_purge_responses",
    "get_poll_vote_responses",
    "get_vote_status_responses",
    "get_transaction_verify_responses",

    # Auth-specific responses
    "get_registration_responses",
    "get_login_responses",
    "get_token_responses",

    # User-specific responses
    "get_user_profile_responses",
    "get_user_update_responses",
    "get_password_change_responses",

    # Token-specific responses
    "get_mint_responses",
    "get_poll_tokens_responses",
    "get_my_tokens_responses",
    "get_token_status_responses",
]
