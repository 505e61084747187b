"""
Identity & credential service.

Registers admins and voters, authenticates both principal kinds, and turns
bearer credentials back into a ``PrincipalContext``. Email and wallet
address are unique across admins and voters combined.
"""

import logging
import secrets
import string
from datetime import date, datetime, timezone
from typing import Optional, Tuple, Union

from sqlalchemy.orm import Session

from chainvote.core.constants import AuthConfig, ErrorCodes, ErrorMessages, Roles
from chainvote.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from chainvote.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    hash_national_id,
    national_id_digest,
    national_id_is_valid,
    password_meets_policy,
    verify_national_id,
    verify_password,
)
from chainvote.models.user import Admin, Voter
from chainvote.schemas.user import PrincipalContext

logger = logging.getLogger(__name__)

Principal = Union[Admin, Voter]

_VOTER_ID_ALPHABET = string.ascii_uppercase + string.digits


def validate_password_policy(password: str) -> None:
    if not password_meets_policy(password):
        raise ValidationError(AuthConfig.PASSWORD_POLICY_MESSAGE, field="password")


def _ensure_unique_contact(db: Session, email: Optional[str], wallet_address: Optional[str], exclude: Optional[Principal] = None) -> None:
    """Reject an email or wallet already held by any admin or voter (other than ``exclude``)."""
    for model in (Admin, Voter):
        if wallet_address is not None:
            holder = db.query(model).filter(model.wallet_address == wallet_address).first()
            if holder is not None and holder is not exclude:
                logger.warning(f"Wallet address already registered: {wallet_address}")
                raise ConflictError(ErrorMessages.DUPLICATE_WALLET, wallet_address=wallet_address)
    for model in (Admin, Voter):
        if email is not None:
            holder = db.query(model).filter(model.email == email).first()
            if holder is not None and holder is not exclude:
                logger.warning(f"Email already registered: {email}")
                raise ConflictError(ErrorMessages.DUPLICATE_EMAIL, email=email)


def _require_wallet(wallet_address: Optional[str]) -> str:
    if not wallet_address or not wallet_address.strip():
        raise ValidationError(ErrorMessages.WALLET_REQUIRED, field="wallet_address")
    return wallet_address.strip()


def generate_voter_id(today: Optional[date] = None) -> str:
    """VID-<YYYYMMDD>-<5 random uppercase alphanumerics>."""
    today = today or datetime.now(timezone.utc).date()
    suffix = "".join(secrets.choice(_VOTER_ID_ALPHABET) for _ in range(AuthConfig.VOTER_ID_RANDOM_LENGTH))
    return f"{AuthConfig.VOTER_ID_PREFIX}-{today.strftime('%Y%m%d')}-{suffix}"


def _unused_voter_id(db: Session) -> str:
    for _ in range(AuthConfig.VOTER_ID_MAX_ATTEMPTS):
        candidate = generate_voter_id()
        if db.query(Voter).filter(Voter.voter_id == candidate).first() is None:
            return candidate
    raise ConflictError("Could not allocate a unique voter identifier, please retry")


def issue_credential(principal: Principal) -> str:
    claims = {
        "sub": principal.email,
        "id": principal.id,
        "email": principal.email,
        "role": principal.role,
    }
    if isinstance(principal, Voter):
        claims["voter_id"] = principal.voter_id
    return create_access_token(claims)


def register_admin(db: Session, username: str, email: str, password: str, wallet_address: str) -> Tuple[Admin, str]:
    validate_password_policy(password)
    wallet_address = _require_wallet(wallet_address)
    _ensure_unique_contact(db, email, wallet_address)

    admin = Admin(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        wallet_address=wallet_address,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info(f"Admin registered: ID {admin.id}, email: {admin.email}")
    return admin, issue_credential(admin)


def register_voter(
    db: Session,
    username: str,
    email: str,
    password: str,
    wallet_address: str,
    national_id: str,
    issue_date: date,
) -> Tuple[Voter, str]:
    validate_password_policy(password)
    wallet_address = _require_wallet(wallet_address)
    if not national_id_is_valid(national_id):
        raise ValidationError(ErrorMessages.INVALID_NATIONAL_ID, field="national_id")
    _ensure_unique_contact(db, email, wallet_address)

    digest = national_id_digest(national_id)
    if db.query(Voter).filter(Voter.national_id_digest == digest).first() is not None:
        logger.warning("Registration rejected: national identifier already registered")
        raise ConflictError(ErrorMessages.DUPLICATE_NATIONAL_ID)

    voter = Voter(
        voter_id=_unused_voter_id(db),
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        national_id_hash=hash_national_id(national_id),
        national_id_digest=digest,
        issue_date=issue_date,
        wallet_address=wallet_address,
        is_eligible=True,
    )
    db.add(voter)
    db.commit()
    db.refresh(voter)

    logger.info(f"Voter registered: ID {voter.id}, voter_id: {voter.voter_id}")
    return voter, issue_credential(voter)


def login_admin(db: Session, email: str, password: str) -> Tuple[Admin, str]:
    admin = db.query(Admin).filter(Admin.email == email).first()
    if admin is None or not verify_password(password, admin.hashed_password):
        logger.warning(f"Failed admin login attempt for email: {email}")
        raise AuthenticationError()
    logger.info(f"Admin login successful: {admin.email}")
    return admin, issue_credential(admin)


def login_voter(db: Session, voter_id: str, national_id: str, issue_date: date) -> Tuple[Voter, str]:
    voter = db.query(Voter).filter(Voter.voter_id == voter_id).first()
    if voter is None:
        logger.warning(f"Failed voter login attempt for voter_id: {voter_id}")
        raise AuthenticationError()
    if not verify_national_id(national_id, voter.national_id_hash):
        logger.warning(f"Failed voter login attempt for voter_id: {voter_id}")
        raise AuthenticationError()
    # Calendar-date equality, not timestamp equality
    if voter.issue_date != issue_date:
        logger.warning(f"Failed voter login attempt for voter_id: {voter_id}")
        raise AuthenticationError()
    logger.info(f"Voter login successful: {voter.voter_id}")
    return voter, issue_credential(voter)


def authenticate(credential: Optional[str]) -> PrincipalContext:
    if not credential:
        raise AuthenticationError(ErrorMessages.AUTH_REQUIRED, ErrorCodes.AUTH_ERROR)

    claims = decode_access_token(credential)
    if claims is None:
        raise AuthenticationError(ErrorMessages.INVALID_TOKEN, ErrorCodes.AUTH_ERROR)

    role = claims.get("role")
    principal_id = claims.get("id")
    if role not in (Roles.ADMIN, Roles.VOTER) or not isinstance(principal_id, int):
        raise AuthenticationError(ErrorMessages.INVALID_TOKEN, ErrorCodes.AUTH_ERROR)

    return PrincipalContext(
        id=principal_id,
        email=claims.get("email") or claims.get("sub"),
        role=role,
        voter_id=claims.get("voter_id"),
    )


def load_principal(db: Session, principal: PrincipalContext) -> Principal:
    model = Admin if principal.is_admin else Voter
    record = db.query(model).filter(model.id == principal.id).first()
    if record is None:
        raise NotFoundError(ErrorMessages.USER_NOT_FOUND, ErrorCodes.RESOURCE_NOT_FOUND)
    return record


def get_profile(db: Session, principal: PrincipalContext) -> Principal:
    record = load_principal(db, principal)
    logger.info(f"Profile retrieved for {principal.role} {principal.id}")
    return record


def update_profile(
    db: Session,
    principal: PrincipalContext,
    username: Optional[str] = None,
    wallet_address: Optional[str] = None,
) -> Principal:
    record = load_principal(db, principal)

    changed_fields = []
    if username and username != record.username:
        record.username = username
        changed_fields.append("username")
    if wallet_address is not None:
        wallet_address = _require_wallet(wallet_address)
        if wallet_address != record.wallet_address:
            _ensure_unique_contact(db, None, wallet_address, exclude=record)
            record.wallet_address = wallet_address
            changed_fields.append("wallet_address")

    if changed_fields:
        db.commit()
        db.refresh(record)
        logger.info(f"Profile updated for {principal.role} {principal.id}: {changed_fields}")
    return record


def change_password(db: Session, principal: PrincipalContext, current_password: str, new_password: str) -> None:
    record = load_principal(db, principal)
    if not verify_password(current_password, record.hashed_password):
        raise AuthenticationError(ErrorMessages.CURRENT_PASSWORD_INCORRECT)
    validate_password_policy(new_password)

    # Rehash only when the plaintext actually changes
    if verify_password(new_password, record.hashed_password):
        return
    record.hashed_password = get_password_hash(new_password)
    db.commit()
    logger.info(f"Password changed for {principal.role} {principal.id}")
