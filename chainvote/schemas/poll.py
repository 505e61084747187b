from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from datetime import datetime
from typing import Any, Optional, List
import re
from chainvote.core.constants import BusinessLimits
from chainvote.models.polls import PollStatus


# Poll Option Schemas
class PollOptionCreate(BaseModel):
    """Schema for one option supplied at poll creation"""
    text: str = Field(
        ...,
        min_length=1,
        max_length=BusinessLimits.MAX_POLL_OPTION_LENGTH,
        description=f'Option text (1-{BusinessLimits.MAX_POLL_OPTION_LENGTH} characters)',
        json_schema_extra={"example": "Candidate A"}
    )
    description: Optional[str] = Field(None, description="Optional option description")
    image_url: Optional[str] = Field(
        None,
        max_length=BusinessLimits.MAX_IMAGE_URL_LENGTH,
        description="Optional image reference"
    )

    @field_validator('text')
    def validate_text(cls, v):
        if not v or not v.strip():
            raise ValueError('Option text cannot be empty or just whitespace')

        # Remove excessive whitespace
        v = ' '.join(v.split())

        # Must contain at least one letter or number
        if not re.search(r'[a-zA-Z0-9]', v):
            raise ValueError('Option text must contain at least one letter or number')

        return v


class PollOptionRead(BaseModel):
    """Schema for reading poll option data"""
    option_index: int
    option_text: str
    description: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new poll
class PollCreate(BaseModel):
    title: str = Field(
        ...,
        min_length=BusinessLimits.MIN_POLL_TITLE_LENGTH,
        max_length=BusinessLimits.MAX_POLL_TITLE_LENGTH,
        description=f'Poll title ({BusinessLimits.MIN_POLL_TITLE_LENGTH}-{BusinessLimits.MAX_POLL_TITLE_LENGTH} characters)',
        json_schema_extra={"example": "Student council election"}
    )
    description: str = Field(
        "",
        max_length=BusinessLimits.MAX_POLL_DESCRIPTION_LENGTH,
        description=f'Poll description (max {BusinessLimits.MAX_POLL_DESCRIPTION_LENGTH} characters)'
    )
    start_time: datetime = Field(..., description="When voting opens (UTC if no offset is given)")
    end_time: datetime = Field(..., description="When voting closes (UTC if no offset is given)")
    options: List[PollOptionCreate] = Field(
        ...,
        max_length=BusinessLimits.MAX_POLL_OPTIONS,
        description="Ordered options; plain strings or objects with text/description/image_url"
    )

    @field_validator('title')
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError('Title cannot be empty or just whitespace')

        # Remove excessive whitespace
        v = ' '.join(v.split())

        # Must contain at least one letter
        if not re.search(r'[a-zA-Z]', v):
            raise ValueError('Title must contain at least one letter')

        return v

    @field_validator('description')
    def validate_description(cls, v):
        return v.strip() if v else ""

    @field_validator('options', mode='before')
    def normalize_options(cls, v: Any):
        # Accept bare strings as shorthand for {"text": ...}
        if isinstance(v, list):
            return [{"text": item} if isinstance(item, str) else item for item in v]
        return v


# Schema for reading poll data
class PollRead(BaseModel):
    id: int
    poll_id: str
    title: str
    description: str
    creator_id: int
    blockchain_address: str
    start_time: datetime
    end_time: datetime
    status: PollStatus
    created_at: Optional[datetime] = None
    options: List[PollOptionRead] = []

    model_config = ConfigDict(from_attributes=True)


class PollDetailResponse(BaseModel):
    poll: PollRead
    vote_count: int = Field(..., description="Number of votes cast so far")


class PollDeleteResponse(BaseModel):
    message: str
    poll_id: int
    timestamp: str


# Vote Schemas
class VoteCreate(BaseModel):
    poll_id: int = Field(..., gt=0, description="Internal id of the poll")
    option_index: int = Field(..., ge=0, description="Zero-based index of the chosen option")
    transaction_signature: str = Field(
        ...,
        min_length=1,
        max_length=BusinessLimits.MAX_SIGNATURE_LENGTH,
        description="Signature of the Solana transaction carrying the vote memo"
    )
    wallet_address: str = Field(
        ...,
        min_length=1,
        max_length=BusinessLimits.MAX_WALLET_ADDRESS_LENGTH,
        description="Wallet that signed the transaction"
    )

    @model_validator(mode='after')
    def strip_identifiers(self):
        self.transaction_signature = self.transaction_signature.strip()
        self.wallet_address = self.wallet_address.strip()
        return self


class VoteRead(BaseModel):
    """Schema for reading vote data"""
    id: int
    poll_id: int
    principal_role: str = Field(..., description="Role of the principal who voted")
    principal_id: int = Field(..., description="ID of the principal who voted")
    option_index: int
    transaction_signature: str
    wallet_address: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VoteResponse(BaseModel):
    """Schema for vote creation response"""
    message: str = Field(..., description="Success message")
    vote: VoteRead = Field(..., description="The recorded vote")
    token_collected: bool = Field(False, description="Whether a voting token was collected")


class VoteSummary(BaseModel):
    option_index: int
    created_at: Optional[datetime] = None
    transaction_signature: str

    model_config = ConfigDict(from_attributes=True)


class VoteStatusResponse(BaseModel):
    has_voted: bool
    vote: Optional[VoteSummary] = None


# Results and history
class OptionResult(BaseModel):
    option_index: int
    option_text: str
    vote_count: int


class PollResultsSummary(BaseModel):
    id: int
    title: str
    description: str
    total_votes: int


class PollResultsResponse(BaseModel):
    poll: PollResultsSummary
    results: List[OptionResult]


class HistoryWinner(BaseModel):
    option_index: int
    option_text: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    vote_count: int


class HistoryEntry(BaseModel):
    id: int
    poll_id: str
    title: str
    description: str
    creator_id: int
    end_time: datetime
    total_votes: int
    winners: List[HistoryWinner]
    is_tie: bool


class PollHistoryResponse(BaseModel):
    history: List[HistoryEntry]


class TransactionVerificationResponse(BaseModel):
    signature: str
    slot: Optional[int] = None
    block_time: Optional[int] = None
    status: str = Field(..., description="confirmed or failed")
    signers: List[str] = []
    vote_data: Optional[Any] = Field(None, description="Decoded memo payload, if any")
