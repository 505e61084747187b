"""
Voting-token response definitions for FastAPI endpoints.
"""

from .common_responses import (
    CONTENT_TYPE_JSON,
    AUTH_ERROR_RESPONSE,
    error_example,
    error_response,
    named_example,
    get_forbidden_response,
    get_not_found_response,
    get_server_error_response
)

TOKENS_BASE_PATH = "/api/v1/tokens"
MINT_PATH = f"{TOKENS_BASE_PATH}/mint/{{poll_id}}"
POLL_TOKENS_PATH = f"{TOKENS_BASE_PATH}/poll/{{poll_id}}"
MY_TOKENS_PATH = f"{TOKENS_BASE_PATH}/my-tokens"
TOKEN_STATUS_PATH = f"{TOKENS_BASE_PATH}/status/{{poll_id}}"

MINT_SUMMARY_EXAMPLE = {
    "message": "Token minting completed",
    "poll_id": 1,
    "total_voters": 3,
    "successful_mints": 2,
    "failed_mints": 1,
    "minted_tokens": [
        {
            "token_id": "VT-poll_1704110400000_k3j9x2m1q-VID-20240101-AB12C-1704120000000",
            "voter_id": "VID-20240101-AB12C",
            "voter_wallet": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
            "transaction_signature": "1704120000000-4f2a9c1d8e7b6a50"
        }
    ],
    "errors": [
        {"voter_id": "VID-20240101-ZZ9Q1", "message": "Token already minted for this poll"}
    ]
}

TOKEN_STATUS_EXAMPLE = {
    "has_token": True,
    "token_id": "VT-poll_1704110400000_k3j9x2m1q-VID-20240101-AB12C-1704120000000",
    "status": "minted",
    "can_vote": True,
    "minted_at": "2024-01-01T14:40:00",
    "used_at": None,
    "transaction_signature": "1704120000000-4f2a9c1d8e7b6a50"
}


def get_mint_responses():
    """Generate response set for minting tokens for a poll."""
    return {
        200: {"description": "Per-voter mint report", "content": {CONTENT_TYPE_JSON: {"example": MINT_SUMMARY_EXAMPLE}}},
        400: error_response("Nothing to mint", {
            "no_voters": named_example(
                "No eligible voters registered",
                error_example("No eligible voters found", "BUSINESS_RULE_VIOLATION", MINT_PATH, poll_id=1)
            )
        }),
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("Only admins can mint tokens", MINT_PATH),
        404: get_not_found_response("Poll not found", "POLL_NOT_FOUND", MINT_PATH, poll_id=999),
        500: get_server_error_response("DATABASE_ERROR", MINT_PATH)
    }


def get_poll_tokens_responses():
    return {
        200: {"description": "Tokens minted for the poll with status counts"},
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("Only admins can view poll tokens", POLL_TOKENS_PATH),
        404: get_not_found_response("Poll not found", "POLL_NOT_FOUND", POLL_TOKENS_PATH, poll_id=999),
        500: get_server_error_response("DATABASE_ERROR", POLL_TOKENS_PATH)
    }


def get_my_tokens_responses():
    return {
        200: {"description": "The caller's tokens across polls"},
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("Only voters can view their tokens", MY_TOKENS_PATH),
        500: get_server_error_response("DATABASE_ERROR", MY_TOKENS_PATH)
    }


def get_token_status_responses():
    return {
        200: {"description": "Token status for one poll", "content": {CONTENT_TYPE_JSON: {"example": TOKEN_STATUS_EXAMPLE}}},
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("Only voters can check token status", TOKEN_STATUS_PATH),
        500: get_server_error_response("DATABASE_ERROR", TOKEN_STATUS_PATH)
    }
