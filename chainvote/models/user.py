from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from chainvote.db.database import Base
from chainvote.core.constants import Roles

# Define the Admin model
class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    wallet_address = Column(String(44), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationship to Poll model (one admin can create many polls)
    polls = relationship("Poll", back_populates="creator")

    role = Roles.ADMIN


# Define the Voter model
class Voter(Base):
    __tablename__ = "voters"

    id = Column(Integer, primary_key=True, index=True)
    voter_id = Column(String(50), unique=True, index=True, nullable=False)  # VID-YYYYMMDD-XXXXX
    username = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    # bcrypt hash used for login verification
    national_id_hash = Column(String(255), nullable=False)
    # keyed digest used only to keep the plaintext unique
    national_id_digest = Column(String(64), unique=True, index=True, nullable=False)
    issue_date = Column(Date, nullable=False)
    wallet_address = Column(String(44), unique=True, index=True, nullable=False)
    is_eligible = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationship to VotingToken model (one voter holds at most one token per poll)
    tokens = relationship("VotingToken", back_populates="voter")

    role = Roles.VOTER
