"""
Voting token lifecycle.

At most one token exists per (voter, poll). A token moves ``minted`` ->
``collected`` exactly once, when its voter's vote on that poll is recorded.
Minting is not atomic across voters: each token commits on its own and a
re-run skips voters that already hold one.
"""

import logging
import secrets
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chainvote.core.constants import ErrorMessages
from chainvote.core.errors import AuthorizationError, PreconditionError
from chainvote.core.time_utils import epoch_millis, resolve_now
from chainvote.models.user import Voter
from chainvote.models.voting_token import TokenStatus, VotingToken
from chainvote.schemas.user import PrincipalContext
from chainvote.services.poll_lifecycle import load_poll

logger = logging.getLogger(__name__)


def _require_admin(principal: PrincipalContext, message: str) -> None:
    if not principal.is_admin:
        raise AuthorizationError(message, role=principal.role)


def _require_voter(principal: PrincipalContext, message: str) -> None:
    if not principal.is_voter:
        raise AuthorizationError(message, role=principal.role)


def make_token_id(poll_external_id: str, voter_external_id: str, now: datetime) -> str:
    return f"VT-{poll_external_id}-{voter_external_id}-{epoch_millis(now)}"


def make_mint_reference(now: datetime) -> str:
    # Tokens are recorded off-chain; the reference stands in for the mint transaction
    return f"{epoch_millis(now)}-{secrets.token_hex(8)}"


def mint_for_poll(db: Session, admin: PrincipalContext, poll_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    _require_admin(admin, "Only admins can mint tokens")
    now = resolve_now(now)
    poll = load_poll(db, poll_id)

    voters = db.query(Voter).filter(Voter.is_eligible.is_(True)).order_by(Voter.id).all()
    if not voters:
        raise PreconditionError(ErrorMessages.NO_ELIGIBLE_VOTERS, poll_id=poll.id)

    minted_tokens = []
    errors = []

    for voter in voters:
        existing = db.query(VotingToken).filter(
            VotingToken.voter_id == voter.id,
            VotingToken.poll_id == poll.id
        ).first()
        if existing is not None:
            errors.append({"voter_id": voter.voter_id, "message": ErrorMessages.TOKEN_ALREADY_MINTED})
            continue

        token = VotingToken(
            token_id=make_token_id(poll.poll_id, voter.voter_id, now),
            voter_id=voter.id,
            voter_wallet_address=voter.wallet_address,
            poll_id=poll.id,
            status=TokenStatus.MINTED,
            minted_by=admin.id,
            mint_transaction_signature=make_mint_reference(now),
            minted_at=now,
        )
        db.add(token)
        try:
            db.commit()
        except IntegrityError as e:
            # A concurrent mint got there first
            db.rollback()
            logger.warning(f"Token mint for voter {voter.voter_id} on poll {poll.id} rejected: {e}")
            errors.append({"voter_id": voter.voter_id, "message": ErrorMessages.TOKEN_ALREADY_MINTED})
            continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error minting token for voter {voter.voter_id} on poll {poll.id}: {e}")
            errors.append({"voter_id": voter.voter_id, "message": ErrorMessages.TOKEN_MINT_FAILED})
            continue

        minted_tokens.append({
            "token_id": token.token_id,
            "voter_id": voter.voter_id,
            "voter_wallet": voter.wallet_address,
            "transaction_signature": token.mint_transaction_signature,
        })

    logger.info(
        f"Token minting for poll {poll.id} by admin {admin.id}: "
        f"{len(minted_tokens)} minted, {len(errors)} skipped, {len(voters)} eligible voters"
    )
    return {
        "message": "Token minting completed",
        "poll_id": poll.id,
        "total_voters": len(voters),
        "successful_mints": len(minted_tokens),
        "failed_mints": len(errors),
        "minted_tokens": minted_tokens,
        "errors": errors,
    }


def get_token_status(db: Session, voter: PrincipalContext, poll_id: int) -> Dict[str, Any]:
    _require_voter(voter, "Only voters can check token status")
    token = db.query(VotingToken).filter(
        VotingToken.voter_id == voter.id,
        VotingToken.poll_id == poll_id
    ).first()

    if token is None:
        return {"has_token": False, "can_vote": False}

    return {
        "has_token": True,
        "token_id": token.token_id,
        "status": token.status,
        "can_vote": token.status == TokenStatus.MINTED,
        "minted_at": token.minted_at,
        "used_at": token.used_at,
        "transaction_signature": token.mint_transaction_signature,
    }


def get_poll_tokens(db: Session, admin: PrincipalContext, poll_id: int) -> Dict[str, Any]:
    _require_admin(admin, "Only admins can view poll tokens")
    load_poll(db, poll_id)
    tokens = (
        db.query(VotingToken)
        .filter(VotingToken.poll_id == poll_id)
        .order_by(VotingToken.minted_at.desc(), VotingToken.id.desc())
        .all()
    )

    def count(status: TokenStatus) -> int:
        return sum(1 for token in tokens if token.status == status)

    return {
        "summary": {
            "total": len(tokens),
            "minted": count(TokenStatus.MINTED),
            "used": count(TokenStatus.USED),
            "collected": count(TokenStatus.COLLECTED),
        },
        "tokens": tokens,
    }


def get_my_tokens(db: Session, voter: PrincipalContext) -> Dict[str, Any]:
    _require_voter(voter, "Only voters can view their tokens")
    tokens = (
        db.query(VotingToken)
        .filter(VotingToken.voter_id == voter.id)
        .order_by(VotingToken.minted_at.desc(), VotingToken.id.desc())
        .all()
    )
    return {
        "total": len(tokens),
        "available": sum(1 for token in tokens if token.status == TokenStatus.MINTED),
        "used": sum(1 for token in tokens if token.status == TokenStatus.COLLECTED),
        "tokens": tokens,
    }


def find_minted_token(db: Session, voter_id: int, poll_id: int) -> Optional[VotingToken]:
    return db.query(VotingToken).filter(
        VotingToken.voter_id == voter_id,
        VotingToken.poll_id == poll_id,
        VotingToken.status == TokenStatus.MINTED
    ).first()


def collect_on_vote(
    db: Session,
    voter_id: int,
    poll_id: int,
    transaction_signature: str,
    now: Optional[datetime] = None,
    commit: bool = True,
) -> bool:
    """Mark the voter's minted token for this poll as collected. Returns False if there was none."""
    token = find_minted_token(db, voter_id, poll_id)
    if token is None:
        logger.error(f"No minted token to collect for voter {voter_id} on poll {poll_id}")
        return False

    token.status = TokenStatus.COLLECTED
    token.used_at = resolve_now(now)
    token.transfer_transaction_signature = transaction_signature
    if commit:
        db.commit()
    logger.info(f"Token collected from voter {voter_id}: {token.token_id}")
    return True
