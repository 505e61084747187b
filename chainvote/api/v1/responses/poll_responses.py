"""
Poll-specific response definitions for FastAPI endpoints.

Covers poll creation, listing, detail, deletion, history, results and vote casting.
"""

from .common_responses import (
    CONTENT_TYPE_JSON,
    EXAMPLE_TIMESTAMP,
    AUTH_ERROR_RESPONSE,
    error_example,
    error_response,
    named_example,
    get_forbidden_response,
    get_not_found_response,
    get_validation_error_response,
    get_server_error_response
)

# Constants for poll paths
POLLS_BASE_PATH = "/api/v1/polls/"
POLL_DETAIL_PATH = "/api/v1/polls/{poll_id}"
POLL_RESULTS_PATH = "/api/v1/polls/{poll_id}/results"
POLL_HISTORY_PATH = "/api/v1/polls/history/closed"
POLL_PURGE_PATH = "/api/v1/polls/history/{poll_id}"
VOTE_PATH = "/api/v1/polls/vote"
VOTE_STATUS_PATH = "/api/v1/polls/{poll_id}/vote-status"
VERIFY_PATH = "/api/v1/polls/verify/{signature}"

# Poll success response examples
POLL_EXAMPLE = {
    "id": 1,
    "poll_id": "poll_1704110400000_k3j9x2m1q",
    "title": "Student council election",
    "description": "Choose the next council president",
    "creator_id": 1,
    "blockchain_address": "3Jv1hXQk5mTz1Fj3q9nZt1L7a8Yd2bWc4sR6uP0eXyKo",
    "start_time": "2024-01-02T09:00:00",
    "end_time": "2024-01-03T09:00:00",
    "status": "pending",
    "created_at": "2024-01-01T12:00:00",
    "options": [
        {"option_index": 0, "option_text": "Candidate A", "description": None, "image_url": None},
        {"option_index": 1, "option_text": "Candidate B", "description": None, "image_url": None}
    ]
}

PAGINATED_POLLS_EXAMPLE = {
    "items": [POLL_EXAMPLE],
    "total": 1,
    "page": 1,
    "size": 10,
    "pages": 1,
    "has_next": False,
    "has_prev": False
}

RESULTS_EXAMPLE = {
    "poll": {"id": 1, "title": "Student council election", "description": "", "total_votes": 3},
    "results": [
        {"option_index": 0, "option_text": "Candidate A", "vote_count": 2},
        {"option_index": 1, "option_text": "Candidate B", "vote_count": 1}
    ]
}

HISTORY_EXAMPLE = {
    "history": [
        {
            "id": 1,
            "poll_id": "poll_1704110400000_k3j9x2m1q",
            "title": "Student council election",
            "description": "",
            "creator_id": 1,
            "end_time": "2024-01-03T09:00:00",
            "total_votes": 4,
            "winners": [
                {"option_index": 0, "option_text": "Candidate A", "description": None, "image_url": None, "vote_count": 2},
                {"option_index": 1, "option_text": "Candidate B", "description": None, "image_url": None, "vote_count": 2}
            ],
            "is_tie": True
        }
    ]
}

VOTE_EXAMPLE = {
    "message": "Vote recorded successfully",
    "vote": {
        "id": 1,
        "poll_id": 1,
        "principal_role": "voter",
        "principal_id": 3,
        "option_index": 0,
        "transaction_signature": "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW",
        "wallet_address": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
        "created_at": "2024-01-02T10:00:00"
    },
    "token_collected": True
}

POLL_NOT_FOUND_RESPONSE = get_not_found_response("Poll not found", "POLL_NOT_FOUND", POLL_DETAIL_PATH, poll_id=999)


def _success(description: str, example):
    return {"description": description, "content": {CONTENT_TYPE_JSON: {"example": example}}}


def get_poll_create_responses():
    """Generate complete response set for poll creation endpoint."""
    return {
        201: _success("Poll created successfully", POLL_EXAMPLE),
        400: error_response("Invalid poll definition", {
            "not_enough_options": named_example(
                "Fewer than two options",
                error_example("A poll needs at least 2 options", "VALIDATION_ERROR", POLLS_BASE_PATH, field="options")
            ),
            "invalid_window": named_example(
                "End time not after start time",
                error_example("Poll end time must be after its start time", "VALIDATION_ERROR", POLLS_BASE_PATH, field="end_time")
            )
        }),
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("Only admins can perform this action", POLLS_BASE_PATH),
        422: get_validation_error_response(POLLS_BASE_PATH),
        500: get_server_error_response("DATABASE_ERROR", POLLS_BASE_PATH)
    }


def get_poll_list_responses():
    """Generate response set for the paginated poll listing."""
    return {
        200: _success("Paginated polls, newest first", PAGINATED_POLLS_EXAMPLE),
        422: get_validation_error_response(POLLS_BASE_PATH),
        500: get_server_error_response("DATABASE_ERROR", POLLS_BASE_PATH)
    }


def get_single_poll_responses():
    """Generate response set for the poll detail endpoint."""
    return {
        200: _success("Poll with its vote count", {"poll": POLL_EXAMPLE, "vote_count": 0}),
        404: POLL_NOT_FOUND_RESPONSE,
        500: get_server_error_response("DATABASE_ERROR", POLL_DETAIL_PATH)
    }


def get_poll_results_responses():
    return {
        200: _success("Vote counts per option", RESULTS_EXAMPLE),
        404: get_not_found_response("Poll not found", "POLL_NOT_FOUND", POLL_RESULTS_PATH, poll_id=999),
        500: get_server_error_response("DATABASE_ERROR", POLL_RESULTS_PATH)
    }


def get_poll_history_responses():
    return {
        200: _success("Closed polls with winners", HISTORY_EXAMPLE),
        500: get_server_error_response("DATABASE_ERROR", POLL_HISTORY_PATH)
    }


def get_poll_delete_responses(path: str = POLL_DETAIL_PATH, precondition_message: str = "Cannot delete a poll that has already started"):
    """Generate response set for both deletion endpoints."""
    return {
        200: _success("Poll deleted", {"message": "Poll deleted successfully", "poll_id": 1, "timestamp": EXAMPLE_TIMESTAMP}),
        400: error_response("Deletion not allowed in the current state", {
            "wrong_state": named_example(
                precondition_message,
                error_example(precondition_message, "BUSINESS_RULE_VIOLATION", path, poll_id=1)
            )
        }),
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("You are not authorized to delete this poll", path),
        404: get_not_found_response("Poll not found", "POLL_NOT_FOUND", path, poll_id=999),
        500: get_server_error_response("DATABASE_ERROR", path)
    }


def get_poll_purge_responses():
    return get_poll_delete_responses(POLL_PURGE_PATH, "Can only delete closed polls from history")


def get_poll_vote_responses():
    """Generate complete response set for vote casting endpoint."""
    return {
        201: _success("Vote recorded", VOTE_EXAMPLE),
        400: error_response("Vote rejected", {
            "not_started": named_example(
                "Voting window not open yet",
                error_example("Poll has not started yet", "POLL_NOT_STARTED", VOTE_PATH, poll_id=1)
            ),
            "ended": named_example(
                "Voting window closed",
                error_example("Poll has ended", "POLL_ENDED", VOTE_PATH, poll_id=1)
            ),
            "invalid_option": named_example(
                "Option index not in this poll",
                error_example("Option does not belong to this poll", "VALIDATION_ERROR", VOTE_PATH, field="option_index", option_index=7)
            ),
            "unverified": named_example(
                "Transaction could not be confirmed",
                error_example(
                    "Transaction verification failed: Transaction not signed by claimed wallet",
                    "INVALID_TRANSACTION",
                    VOTE_PATH,
                    verification_status="rejected"
                )
            )
        }),
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response(
            "No valid voting token found. Please contact admin to mint a token for you.",
            VOTE_PATH,
            error_code="NO_TOKEN"
        ),
        404: get_not_found_response("Poll not found", "POLL_NOT_FOUND", VOTE_PATH, poll_id=999),
        409: error_response("Duplicate vote", {
            "already_voted": named_example(
                "Principal already voted",
                error_example("You have already voted in this poll", "ALREADY_VOTED", VOTE_PATH, poll_id=1)
            ),
            "signature_reused": named_example(
                "Signature already recorded",
                error_example("Transaction signature has already been used", "DUPLICATE_SIGNATURE", VOTE_PATH)
            )
        }),
        422: get_validation_error_response(VOTE_PATH),
        500: get_server_error_response("DATABASE_ERROR", VOTE_PATH)
    }


def get_vote_status_responses():
    return {
        200: _success("Whether the caller voted", {"has_voted": False, "vote": None}),
        401: AUTH_ERROR_RESPONSE,
        500: get_server_error_response("DATABASE_ERROR", VOTE_STATUS_PATH)
    }


def get_transaction_verify_responses():
    return {
        200: _success("Transaction details", {
            "signature": VOTE_EXAMPLE["vote"]["transaction_signature"],
            "slot": 245678901,
            "block_time": 1704189600,
            "status": "confirmed",
            "signers": [VOTE_EXAMPLE["vote"]["wallet_address"]],
            "vote_data": {"pollId": 1, "optionIndex": 0}
        }),
        404: get_not_found_response("Transaction not found on blockchain", "RESOURCE_NOT_FOUND", VERIFY_PATH),
        502: error_response("Blockchain unavailable", {
            "rpc_failure": named_example(
                "RPC node unreachable",
                error_example("Failed to reach the blockchain RPC endpoint", "BLOCKCHAIN_ERROR", VERIFY_PATH, rpc_method="getTransaction")
            )
        })
    }
