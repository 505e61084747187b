from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from chainvote.models.polls import PollStatus
from chainvote.models.voting_token import TokenStatus


class MintedToken(BaseModel):
    token_id: str
    voter_id: str = Field(..., description="Voter identifier (VID-...)")
    voter_wallet: str
    transaction_signature: str


class MintError(BaseModel):
    voter_id: str
    message: str


class MintSummary(BaseModel):
    """Partial-success report of a mint run"""
    message: str = "Token minting completed"
    poll_id: int
    total_voters: int
    successful_mints: int
    failed_mints: int
    minted_tokens: List[MintedToken] = []
    errors: List[MintError] = []


class TokenStatusResponse(BaseModel):
    has_token: bool
    token_id: Optional[str] = None
    status: Optional[TokenStatus] = None
    can_vote: bool = False
    minted_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    transaction_signature: Optional[str] = None


class TokenVoterInfo(BaseModel):
    voter_id: str
    username: str
    email: str
    wallet_address: str

    model_config = ConfigDict(from_attributes=True)


class TokenPollInfo(BaseModel):
    id: int
    poll_id: str
    title: str
    status: PollStatus
    start_time: datetime
    end_time: datetime

    model_config = ConfigDict(from_attributes=True)


class VotingTokenRead(BaseModel):
    token_id: str
    poll_id: int
    status: TokenStatus
    voter_wallet_address: str
    minted_by: int
    mint_transaction_signature: str
    transfer_transaction_signature: Optional[str] = None
    minted_at: datetime
    used_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PollTokenRead(VotingTokenRead):
    voter: TokenVoterInfo


class MyTokenRead(VotingTokenRead):
    poll: TokenPollInfo


class TokenCounts(BaseModel):
    total: int
    minted: int
    used: int
    collected: int


class PollTokensResponse(BaseModel):
    summary: TokenCounts
    tokens: List[PollTokenRead]


class MyTokensResponse(BaseModel):
    total: int
    available: int = Field(..., description="Tokens that can still be used to vote")
    used: int = Field(..., description="Tokens collected by a vote")
    tokens: List[MyTokenRead]
