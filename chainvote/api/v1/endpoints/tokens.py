from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from chainvote.db.database import get_db
from chainvote.schemas.token import MintSummary, MyTokensResponse, PollTokensResponse, TokenStatusResponse
from chainvote.schemas.user import PrincipalContext
from chainvote.services import token_lifecycle
from chainvote.core.constants import ErrorMessages, ErrorCodes
from chainvote.core.errors import ChainVoteError
from chainvote.api.v1.endpoints.dependencies import get_current_principal
from chainvote.api.v1.responses import (
    get_mint_responses,
    get_poll_tokens_responses,
    get_my_tokens_responses,
    get_token_status_responses
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tokens", tags=["tokens"])


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


@router.post("/mint/{poll_id}", response_model=MintSummary, responses=get_mint_responses())
def mint_tokens(
    poll_id: int,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """
    Mint one voting token per eligible voter for the poll.

    Voters who already hold a token are reported under `errors`; the run is
    safe to repeat.
    """
    try:
        return token_lifecycle.mint_for_poll(db, principal, poll_id)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"minting tokens for poll {poll_id}", e)


@router.get("/poll/{poll_id}", response_model=PollTokensResponse, responses=get_poll_tokens_responses())
def get_poll_tokens(
    poll_id: int,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """All tokens minted for a poll, with voter details and status counts. Admins only."""
    try:
        return token_lifecycle.get_poll_tokens(db, principal, poll_id)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"retrieving tokens for poll {poll_id}", e)


@router.get("/my-tokens", response_model=MyTokensResponse, responses=get_my_tokens_responses())
def get_my_tokens(
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """The calling voter's tokens, newest first."""
    try:
        return token_lifecycle.get_my_tokens(db, principal)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, "retrieving voter tokens", e)


@router.get("/status/{poll_id}", response_model=TokenStatusResponse, responses=get_token_status_responses())
def get_token_status(
    poll_id: int,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """Whether the calling voter holds a usable token for the poll."""
    try:
        return token_lifecycle.get_token_status(db, principal, poll_id)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, f"retrieving token status for poll {poll_id}", e)
