"""
Poll lifecycle: derived status, creation, deletion windows, results and history.

A poll's status is a function of its time window. It is recomputed on every
read and written back only when it changes, so no background sweep is
needed. ``closed`` is sticky.
"""

import logging
import random
import string
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Query, Session

from chainvote.blockchain.solana_client import generate_blockchain_address
from chainvote.core.constants import BusinessLimits, ErrorCodes, ErrorMessages
from chainvote.core.errors import AuthorizationError, NotFoundError, PreconditionError, ValidationError
from chainvote.core.time_utils import epoch_millis, resolve_now, to_naive_utc
from chainvote.models.polls import Poll, PollOption, PollStatus, Vote
from chainvote.schemas.poll import PollOptionCreate
from chainvote.schemas.user import PrincipalContext

logger = logging.getLogger(__name__)

_BASE36 = string.ascii_lowercase + string.digits


def derive_status(stored_status: PollStatus, start_time: datetime, end_time: datetime, now: datetime) -> PollStatus:
    if stored_status == PollStatus.CLOSED:
        return PollStatus.CLOSED
    if now > end_time:
        return PollStatus.CLOSED
    if start_time <= now <= end_time:
        return PollStatus.ACTIVE
    return PollStatus.PENDING


def sync_status(db: Session, poll: Poll, now: Optional[datetime] = None, commit: bool = True) -> PollStatus:
    """Recompute the poll's status and persist it if it changed."""
    now = resolve_now(now)
    current = derive_status(PollStatus(poll.status), poll.start_time, poll.end_time, now)
    if current != poll.status:
        logger.info(f"Poll {poll.id} status {PollStatus(poll.status).value} -> {current.value}")
        poll.status = current
        if commit:
            db.commit()
    return current


def refresh_statuses(db: Session, now: Optional[datetime] = None) -> int:
    """Sync every poll that is not closed yet. Returns how many changed."""
    now = resolve_now(now)
    changed = 0
    for poll in db.query(Poll).filter(Poll.status != PollStatus.CLOSED).all():
        before = poll.status
        if sync_status(db, poll, now, commit=False) != before:
            changed += 1
    if changed:
        db.commit()
    return changed


def generate_poll_id(now: datetime) -> str:
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"poll_{epoch_millis(now)}_{suffix}"


def _require_admin(principal: PrincipalContext, message: str = ErrorMessages.ADMIN_ONLY) -> None:
    if not principal.is_admin:
        raise AuthorizationError(message, role=principal.role)


def _require_creator(poll: Poll, principal: PrincipalContext) -> None:
    if not principal.is_admin or poll.creator_id != principal.id:
        logger.warning(f"{principal.role} {principal.id} attempted to delete poll {poll.id} created by admin {poll.creator_id}")
        raise AuthorizationError(ErrorMessages.NOT_AUTHORIZED_DELETE, poll_id=poll.id)


def load_poll(db: Session, poll_id: int) -> Poll:
    poll = db.query(Poll).filter(Poll.id == poll_id).first()
    if poll is None:
        logger.warning(f"Poll not found: ID {poll_id}")
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND, ErrorCodes.POLL_NOT_FOUND, poll_id=poll_id)
    return poll


def create_poll(
    db: Session,
    creator: PrincipalContext,
    title: str,
    description: str,
    start_time: datetime,
    end_time: datetime,
    options: Sequence[PollOptionCreate],
    now: Optional[datetime] = None,
) -> Poll:
    _require_admin(creator)
    now = resolve_now(now)
    start_time = to_naive_utc(start_time)
    end_time = to_naive_utc(end_time)

    if len(options) < BusinessLimits.MIN_POLL_OPTIONS:
        raise ValidationError(ErrorMessages.NOT_ENOUGH_OPTIONS, field="options")
    if end_time <= start_time:
        raise ValidationError(ErrorMessages.INVALID_TIME_WINDOW, field="end_time")

    poll = Poll(
        poll_id=generate_poll_id(now),
        title=title,
        description=description,
        creator_id=creator.id,
        blockchain_address=generate_blockchain_address(),
        start_time=start_time,
        end_time=end_time,
        status=derive_status(PollStatus.PENDING, start_time, end_time, now),
    )
    # Options ride on the same transaction as the poll
    poll.options = [
        PollOption(
            option_index=index,
            option_text=option.text,
            description=option.description,
            image_url=option.image_url,
        )
        for index, option in enumerate(options)
    ]
    db.add(poll)
    db.commit()
    db.refresh(poll)

    logger.info(f"Poll created: ID {poll.id}, poll_id {poll.poll_id}, status {PollStatus(poll.status).value}, options {len(options)}")
    return poll


def poll_listing_query(db: Session, status: Optional[PollStatus] = None, now: Optional[datetime] = None) -> Query:
    """Newest-first query over polls, with statuses synced beforehand."""
    refresh_statuses(db, now)
    query = db.query(Poll)
    if status is not None:
        query = query.filter(Poll.status == status)
    return query.order_by(Poll.created_at.desc(), Poll.id.desc())


def get_poll(db: Session, poll_id: int, now: Optional[datetime] = None) -> Tuple[Poll, int]:
    poll = load_poll(db, poll_id)
    sync_status(db, poll, now)
    vote_count = db.query(Vote).filter(Vote.poll_id == poll.id).count()
    return poll, vote_count


def delete_poll(db: Session, requester: PrincipalContext, poll_id: int, now: Optional[datetime] = None) -> None:
    """Delete a poll that has not started. Options and any minted tokens go with it."""
    now = resolve_now(now)
    poll = load_poll(db, poll_id)
    _require_creator(poll, requester)

    if not now < poll.start_time:
        raise PreconditionError(ErrorMessages.POLL_ALREADY_STARTED, poll_id=poll.id)

    db.delete(poll)
    db.commit()
    logger.info(f"Poll deleted: ID {poll_id} by admin {requester.id}")


def purge_closed_poll(db: Session, requester: PrincipalContext, poll_id: int, now: Optional[datetime] = None) -> None:
    """Remove a closed poll from history together with its votes, tokens and options."""
    poll = load_poll(db, poll_id)
    _require_creator(poll, requester)

    if sync_status(db, poll, now) != PollStatus.CLOSED:
        raise PreconditionError(ErrorMessages.POLL_NOT_CLOSED, poll_id=poll.id, status=PollStatus(poll.status).value)

    vote_total = len(poll.votes)
    db.delete(poll)
    db.commit()
    logger.info(f"Closed poll purged from history: ID {poll_id}, votes removed {vote_total}")


def count_votes(votes: Iterable[Vote]) -> Counter:
    return Counter(vote.option_index for vote in votes)


def compute_results(db: Session, poll_id: int) -> Dict[str, Any]:
    poll = load_poll(db, poll_id)
    votes = db.query(Vote).filter(Vote.poll_id == poll.id).all()
    counts = count_votes(votes)

    return {
        "poll": {
            "id": poll.id,
            "title": poll.title,
            "description": poll.description,
            "total_votes": len(votes),
        },
        "results": [
            {
                "option_index": option.option_index,
                "option_text": option.option_text,
                "vote_count": counts.get(option.option_index, 0),
            }
            for option in poll.options
        ],
    }


def compute_history_winners(options: Sequence[PollOption], votes: Iterable[Vote]) -> Dict[str, Any]:
    """Options with the highest count among cast votes. Ties are reported, not broken."""
    counts = count_votes(votes)
    if not counts:
        return {"winners": [], "is_tie": False}

    top = max(counts.values())
    winners = [
        {
            "option_index": option.option_index,
            "option_text": option.option_text,
            "description": option.description,
            "image_url": option.image_url,
            "vote_count": counts[option.option_index],
        }
        for option in options
        if counts.get(option.option_index) == top
    ]
    return {"winners": winners, "is_tie": len(winners) > 1}


def get_history(db: Session, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    refresh_statuses(db, now)
    closed_polls = (
        db.query(Poll)
        .filter(Poll.status == PollStatus.CLOSED)
        .order_by(Poll.end_time.desc())
        .all()
    )

    history = []
    for poll in closed_polls:
        outcome = compute_history_winners(poll.options, poll.votes)
        history.append({
            "id": poll.id,
            "poll_id": poll.poll_id,
            "title": poll.title,
            "description": poll.description,
            "creator_id": poll.creator_id,
            "end_time": poll.end_time,
            "total_votes": len(poll.votes),
            **outcome,
        })
    return history
