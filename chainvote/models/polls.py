from enum import Enum
from chainvote.db.database import Base
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func


class PollStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CLOSED = "closed"


# Define Poll model
class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(String(100), unique=True, index=True, nullable=False)  # External identifier
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Foreign key to admins table
    creator_id = Column(Integer, ForeignKey("admins.id"), nullable=False)
    # On-chain identifier only, not a live wallet
    blockchain_address = Column(String(44), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(
        SQLEnum(PollStatus, values_callable=lambda enum: [member.value for member in enum]),
        default=PollStatus.PENDING,
        nullable=False,
    )
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationship to Admin model
    creator = relationship("Admin", back_populates="polls")
    # Relationship to PollOption model
    options = relationship(
        "PollOption",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.option_index"
    )
    votes = relationship("Vote", back_populates="poll", cascade="all, delete-orphan")
    tokens = relationship("VotingToken", back_populates="poll", cascade="all, delete-orphan")


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id"), nullable=False)
    option_index = Column(Integer, nullable=False)  # Zero-based position within the poll
    option_text = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)

    # Relationship to Poll model
    poll = relationship("Poll", back_populates="options")

    __table_args__ = (
        UniqueConstraint('poll_id', 'option_index', name='unique_option_index_per_poll'),
    )


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id"), nullable=False)
    # Admins and voters live in separate tables, so the voter is identified by (role, id)
    principal_role = Column(String(10), nullable=False)
    principal_id = Column(Integer, nullable=False)
    option_index = Column(Integer, nullable=False)
    transaction_signature = Column(String(88), unique=True, index=True, nullable=False)
    wallet_address = Column(String(44), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    poll = relationship("Poll", back_populates="votes")

    # One vote per principal per poll, enforced by the database as well
    __table_args__ = (
        UniqueConstraint('poll_id', 'principal_role', 'principal_id', name='unique_principal_vote_per_poll'),
    )
