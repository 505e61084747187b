from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime, timezone
from typing import Optional
import logging

from chainvote.db.database import get_db
from chainvote.models.polls import Poll, PollStatus
from chainvote.schemas.poll import (
    PollCreate,
    PollRead,
    PollDetailResponse,
    PollDeleteResponse,
    PollHistoryResponse,
    PollResultsResponse,
    TransactionVerificationResponse,
    VoteCreate,
    VoteRead,
    VoteResponse,
    VoteStatusResponse
)
from chainvote.schemas.common import PaginatedResponse
from chainvote.schemas.user import PrincipalContext
from chainvote.blockchain.solana_client import BlockchainClient
from chainvote.services import poll_lifecycle, vote_casting
from chainvote.core.constants import ErrorMessages, ErrorCodes
from chainvote.core.errors import ChainVoteError
from chainvote.api.v1.endpoints.dependencies import get_blockchain_client, get_current_principal
from chainvote.api.v1.utils.pagination import (
    PaginationParams,
    get_pagination_params,
    create_paginated_response,
    paginate_query
)
from chainvote.api.v1.responses import (
    get_poll_create_responses,
    get_poll_list_responses,
    get_single_poll_responses,
    get_poll_results_responses,
    get_poll_history_responses,
    get_poll_delete_responses,
    get_poll_purge_responses,
    get_poll_vote_responses,
    get_vote_status_responses,
    get_transaction_verify_responses
)

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/polls", tags=["polls"])


def _database_error(db: Session, action: str, e: Exception) -> HTTPException:
    db.rollback()
    logger.error(f"Database error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "message": ErrorMessages.DATABASE_ERROR,
            "error_code": ErrorCodes.DATABASE_ERROR
        }
    )


def _unexpected_error(db: Session, action: str, e: Exception) -> HTTPException:
    db.rollback()
    logger.error(f"Unexpected error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "message": ErrorMessages.INTERNAL_ERROR,
            "error_code": ErrorCodes.INTERNAL_ERROR
        }
    )


@router.post(
    "/",
    response_model=PollRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new poll",
    description="Create a time-windowed poll with at least two ordered options. Admins only.",
    responses=get_poll_create_responses()
)
def create_poll(
    poll: PollCreate,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """Create a new poll; its status is derived from the time window immediately."""
    try:
        logger.info(f"{principal.role} {principal.id} attempting to create poll: '{poll.title}'")
        return poll_lifecycle.create_poll(
            db,
            principal,
            title=poll.title,
            description=poll.description,
            start_time=poll.start_time,
            end_time=poll.end_time,
            options=poll.options
        )

    except (ChainVoteError, HTTPException):
        raise
    except IntegrityError as e:
        logger.error(f"Database integrity error creating poll: {e}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Data integrity constraint violated",
                "error_code": ErrorCodes.DUPLICATE_RESOURCE,
                "hint": "Retry the request to get a fresh poll identifier"
            }
        )
    except SQLAlchemyError as e:
        raise _database_error(db, "creating poll", e)
    except Exception as e:
        raise _unexpected_error(db, "creating poll", e)


@router.get(
    "/",
    response_model=PaginatedResponse[PollRead],
    summary="Get paginated list of polls",
    description="Retrieve polls newest first, optionally filtered by status or title. Statuses are refreshed before listing.",
    responses=get_poll_list_responses()
)
def get_polls(
    db: Session = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    status_filter: Optional[PollStatus] = Query(None, alias="status", description="Filter by derived status"),
    search: Optional[str] = Query(None, description="Search in poll titles")
):
    """
    Get paginated list of polls.

    - **page**: Page number (starts from 1)
    - **size**: Number of polls per page (1-100)
    - **status**: pending, active or closed
    - **search**: Search text in poll titles (case-insensitive)
    """
    try:
        query = poll_lifecycle.poll_listing_query(db, status_filter)
        polls, total = paginate_query(
            query,
            pagination,
            search_term=search,
            search_fields=[Poll.title] if search else None
        )
        return create_paginated_response(polls, total, pagination)

    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieving polls", e)


@router.get(
    "/history/closed",
    response_model=PollHistoryResponse,
    summary="Closed polls with winners",
    responses=get_poll_history_responses()
)
def get_poll_history(db: Session = Depends(get_db)):
    """Closed polls, most recently ended first. Ties list every top option and set `is_tie`."""
    try:
        return {"history": poll_lifecycle.get_history(db)}
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieving poll history", e)


@router.delete(
    "/history/{poll_id}",
    response_model=PollDeleteResponse,
    summary="Remove a closed poll from history",
    responses=get_poll_purge_responses()
)
def purge_closed_poll(
    poll_id: int,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """Delete a closed poll with its votes, tokens and options. Only its creator may do this."""
    try:
        poll_lifecycle.purge_closed_poll(db, principal, poll_id)
        return PollDeleteResponse(
            message="Poll deleted from history successfully",
            poll_id=poll_id,
            timestamp=datetime.now(timezone.utc).isoformat()
        )
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"purging poll {poll_id}", e)
    except Exception as e:
        raise _unexpected_error(db, f"purging poll {poll_id}", e)


@router.get(
    "/verify/{signature}",
    response_model=TransactionVerificationResponse,
    summary="Inspect a transaction on chain",
    responses=get_transaction_verify_responses()
)
def verify_transaction(
    signature: str,
    blockchain: BlockchainClient = Depends(get_blockchain_client)
):
    """Look up a transaction and decode any vote memo it carries."""
    return vote_casting.verify_transaction_on_chain(blockchain, signature)


@router.post(
    "/vote",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Cast a vote",
    description="Record a vote backed by a confirmed Solana transaction. Voters need a minted token for the poll.",
    responses=get_poll_vote_responses()
)
def cast_vote(
    vote: VoteCreate,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal),
    blockchain: BlockchainClient = Depends(get_blockchain_client)
):
    """Cast a vote once per poll per principal."""
    try:
        logger.info(f"{principal.role} {principal.id} voting on poll {vote.poll_id}, option {vote.option_index}")
        recorded, token_collected = vote_casting.cast_vote(
            db,
            principal,
            poll_id=vote.poll_id,
            option_index=vote.option_index,
            transaction_signature=vote.transaction_signature,
            wallet_address=vote.wallet_address,
            blockchain=blockchain
        )
        return VoteResponse(
            message="Vote recorded successfully",
            vote=VoteRead.model_validate(recorded),
            token_collected=token_collected
        )

    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"casting vote on poll {vote.poll_id}", e)
    except Exception as e:
        raise _unexpected_error(db, f"casting vote on poll {vote.poll_id}", e)


@router.get(
    "/{poll_id}",
    response_model=PollDetailResponse,
    summary="Get a poll",
    responses=get_single_poll_responses()
)
def get_poll(poll_id: int, db: Session = Depends(get_db)):
    """Poll with its options, current status and number of votes cast."""
    try:
        poll, vote_count = poll_lifecycle.get_poll(db, poll_id)
        return PollDetailResponse(poll=PollRead.model_validate(poll), vote_count=vote_count)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"retrieving poll {poll_id}", e)


@router.get(
    "/{poll_id}/results",
    response_model=PollResultsResponse,
    summary="Get poll results",
    responses=get_poll_results_responses()
)
def get_poll_results(poll_id: int, db: Session = Depends(get_db)):
    """Vote count per option, in option order."""
    try:
        return poll_lifecycle.compute_results(db, poll_id)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"computing results for poll {poll_id}", e)


@router.get(
    "/{poll_id}/vote-status",
    response_model=VoteStatusResponse,
    summary="Check whether I voted",
    responses=get_vote_status_responses()
)
def get_vote_status(
    poll_id: int,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    try:
        return vote_casting.check_user_vote(db, principal, poll_id)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"checking vote status on poll {poll_id}", e)


@router.delete(
    "/{poll_id}",
    response_model=PollDeleteResponse,
    summary="Delete a poll that has not started",
    responses=get_poll_delete_responses()
)
def delete_poll(
    poll_id: int,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """Delete a pending poll with its options and any minted tokens. Only its creator may do this."""
    try:
        poll_lifecycle.delete_poll(db, principal, poll_id)
        return PollDeleteResponse(
            message="Poll deleted successfully",
            poll_id=poll_id,
            timestamp=datetime.now(timezone.utc).isoformat()
        )
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"deleting poll {poll_id}", e)
    except Exception as e:
        raise _unexpected_error(db, f"deleting poll {poll_id}", e)
