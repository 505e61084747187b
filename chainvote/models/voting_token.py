from enum import Enum
from chainvote.db.database import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func


class TokenStatus(str, Enum):
    MINTED = "minted"
    # Defined for the schema but never assigned; a vote moves a token straight to collected
    USED = "used"
    COLLECTED = "collected"


class VotingToken(Base):
    __tablename__ = "voting_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token_id = Column(String(150), unique=True, index=True, nullable=False)  # VT-<poll>-<voter>-<ms>
    voter_id = Column(Integer, ForeignKey("voters.id"), nullable=False)
    voter_wallet_address = Column(String(44), nullable=False)
    poll_id = Column(Integer, ForeignKey("polls.id"), nullable=False)
    status = Column(
        SQLEnum(TokenStatus, values_callable=lambda enum: [member.value for member in enum]),
        default=TokenStatus.MINTED,
        nullable=False,
    )
    minted_by = Column(Integer, ForeignKey("admins.id"), nullable=False)
    mint_transaction_signature = Column(String(88), nullable=False)
    transfer_transaction_signature = Column(String(88), nullable=True)
    minted_at = Column(DateTime, default=func.now(), nullable=False)
    used_at = Column(DateTime, nullable=True)

    # Relationships
    voter = relationship("Voter", back_populates="tokens")
    poll = relationship("Poll", back_populates="tokens")

    __table_args__ = (
        UniqueConstraint('voter_id', 'poll_id', name='unique_token_per_voter_poll'),
    )
