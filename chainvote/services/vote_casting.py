"""
Vote casting.

Checks run in a fixed order so that callers always see the first rule a
request breaks: poll exists, voting window, one vote per principal, token
held (voters only), option belongs to the poll, signature unused, on-chain
confirmation. The vote row and the token collection commit together.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chainvote.blockchain.solana_client import BlockchainClient
from chainvote.core.constants import ErrorCodes, ErrorMessages
from chainvote.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from chainvote.core.time_utils import resolve_now
from chainvote.models.polls import Poll, PollOption, Vote
from chainvote.schemas.user import PrincipalContext
from chainvote.services.poll_lifecycle import load_poll, sync_status
from chainvote.services.token_lifecycle import collect_on_vote, find_minted_token

logger = logging.getLogger(__name__)


def _existing_vote(db: Session, principal: PrincipalContext, poll_id: int) -> Optional[Vote]:
    return db.query(Vote).filter(
        Vote.poll_id == poll_id,
        Vote.principal_role == principal.role,
        Vote.principal_id == principal.id
    ).first()


def _signature_taken(db: Session, transaction_signature: str) -> bool:
    return db.query(Vote).filter(Vote.transaction_signature == transaction_signature).first() is not None


def _ensure_voting_window(poll: Poll, now: datetime) -> None:
    if now < poll.start_time:
        raise PreconditionError(ErrorMessages.POLL_NOT_STARTED, ErrorCodes.POLL_NOT_STARTED, poll_id=poll.id)
    if now > poll.end_time:
        raise PreconditionError(ErrorMessages.POLL_ENDED, ErrorCodes.POLL_ENDED, poll_id=poll.id)


def cast_vote(
    db: Session,
    principal: PrincipalContext,
    poll_id: int,
    option_index: int,
    transaction_signature: str,
    wallet_address: str,
    blockchain: BlockchainClient,
    now: Optional[datetime] = None,
) -> Tuple[Vote, bool]:
    """Record a verified vote. Returns the vote and whether a voting token was collected."""
    now = resolve_now(now)

    poll = load_poll(db, poll_id)
    sync_status(db, poll, now)
    _ensure_voting_window(poll, now)

    if _existing_vote(db, principal, poll.id) is not None:
        logger.warning(f"{principal.role} {principal.id} attempted to vote twice on poll {poll.id}")
        raise ConflictError(ErrorMessages.ALREADY_VOTED, ErrorCodes.ALREADY_VOTED, poll_id=poll.id)

    # Admins vote without a token
    if principal.is_voter and find_minted_token(db, principal.id, poll.id) is None:
        logger.warning(f"Voter {principal.id} has no minted token for poll {poll.id}")
        raise ForbiddenError(ErrorMessages.NO_TOKEN, ErrorCodes.NO_TOKEN, poll_id=poll.id)

    option = db.query(PollOption).filter(
        PollOption.poll_id == poll.id,
        PollOption.option_index == option_index
    ).first()
    if option is None:
        raise ValidationError(ErrorMessages.INVALID_OPTION, field="option_index", option_index=option_index)

    if _signature_taken(db, transaction_signature):
        logger.warning(f"Transaction signature reused: {transaction_signature}")
        raise ConflictError(ErrorMessages.DUPLICATE_SIGNATURE, ErrorCodes.DUPLICATE_SIGNATURE)

    verification = blockchain.verify_transaction(transaction_signature, wallet_address)
    if not verification.confirmed:
        logger.warning(f"Transaction verification failed for {transaction_signature}: {verification.reason}")
        raise ValidationError(
            f"Transaction verification failed: {verification.reason}",
            ErrorCodes.INVALID_TRANSACTION,
            verification_status=verification.status.value,
        )

    vote = Vote(
        poll_id=poll.id,
        principal_role=principal.role,
        principal_id=principal.id,
        option_index=option_index,
        transaction_signature=transaction_signature,
        wallet_address=wallet_address,
        created_at=now,
    )
    db.add(vote)
    try:
        db.flush()
    except IntegrityError as e:
        # Lost a race against a concurrent vote or signature reuse
        db.rollback()
        logger.warning(f"Vote insert rejected by constraint for poll {poll.id}: {e}")
        if _signature_taken(db, transaction_signature):
            raise ConflictError(ErrorMessages.DUPLICATE_SIGNATURE, ErrorCodes.DUPLICATE_SIGNATURE)
        raise ConflictError(ErrorMessages.ALREADY_VOTED, ErrorCodes.ALREADY_VOTED, poll_id=poll.id)

    token_collected = False
    if principal.is_voter:
        token_collected = collect_on_vote(db, principal.id, poll.id, transaction_signature, now, commit=False)

    db.commit()
    db.refresh(vote)
    logger.info(f"Vote recorded: poll {poll.id}, {principal.role} {principal.id}, option {option_index}, tx {transaction_signature}")
    return vote, token_collected


def check_user_vote(db: Session, principal: PrincipalContext, poll_id: int) -> Dict[str, Any]:
    vote = _existing_vote(db, principal, poll_id)
    if vote is None:
        return {"has_voted": False, "vote": None}
    return {"has_voted": True, "vote": vote}


def verify_transaction_on_chain(blockchain: BlockchainClient, signature: str) -> Dict[str, Any]:
    """Inspect a transaction for display. RPC failures propagate as ExternalServiceError."""
    info = blockchain.get_transaction(signature)
    if info is None:
        raise NotFoundError(ErrorMessages.TRANSACTION_NOT_FOUND, signature=signature)

    return {
        "signature": info.signature,
        "slot": info.slot,
        "block_time": info.block_time,
        "status": "confirmed" if info.succeeded else "failed",
        "signers": info.signers,
        "vote_data": info.memo,
    }
