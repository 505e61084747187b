from datetime import date, datetime
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from chainvote.core.constants import AuthConfig, BusinessLimits, Roles


# Decoded credential handed to the services; never carries secrets
class PrincipalContext(BaseModel):
    id: int
    email: Optional[str] = None
    role: Literal["admin", "voter"]
    voter_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Roles.ADMIN

    @property
    def is_voter(self) -> bool:
        return self.role == Roles.VOTER


class _RegisterBase(BaseModel):
    username: str = Field(
        ...,
        min_length=BusinessLimits.MIN_USERNAME_LENGTH,
        max_length=BusinessLimits.MAX_USERNAME_LENGTH,
        json_schema_extra={"example": "alice"}
    )
    email: EmailStr
    password: str = Field(..., description="At least 8 chars with upper, lower, digit and one of @$!%*?&#")
    wallet_address: str = Field(
        ...,
        max_length=BusinessLimits.MAX_WALLET_ADDRESS_LENGTH,
        description="Solana wallet public key (base58)"
    )


class AdminRegister(_RegisterBase):
    role: Literal["admin"]


class VoterRegister(_RegisterBase):
    role: Literal["voter"]
    national_id: str = Field(..., description="National identifier, 5-20 digits", json_schema_extra={"example": "1234567890"})
    issue_date: date = Field(..., description="Issue date of the national identifier")


RegisterRequest = Union[AdminRegister, VoterRegister]


class AdminLogin(BaseModel):
    role: Literal["admin"]
    email: EmailStr
    password: str


class VoterLogin(BaseModel):
    role: Literal["voter"]
    voter_id: str = Field(..., json_schema_extra={"example": "VID-20240101-AB12C"})
    national_id: str
    issue_date: date


LoginRequest = Union[AdminLogin, VoterLogin]


# Schema for reading principal data
class PrincipalRead(BaseModel):
    id: int
    username: str
    email: EmailStr
    wallet_address: str
    role: Literal["admin", "voter"]
    voter_id: Optional[str] = None
    is_eligible: Optional[bool] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = AuthConfig.TOKEN_TYPE
    user: PrincipalRead
    message: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = AuthConfig.TOKEN_TYPE


class ProfileUpdate(BaseModel):
    """Schema for updating profile information."""
    username: Optional[str] = Field(
        None,
        min_length=BusinessLimits.MIN_USERNAME_LENGTH,
        max_length=BusinessLimits.MAX_USERNAME_LENGTH
    )
    wallet_address: Optional[str] = Field(None, max_length=BusinessLimits.MAX_WALLET_ADDRESS_LENGTH)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str
