from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from passlib.context import CryptContext
from jose import JWTError, jwt
from dotenv import load_dotenv
import hashlib
import hmac
import os
import re

from chainvote.core.constants import AuthConfig

# Load environment variables from a .env file
load_dotenv()

# Get the secret key from the environment variables
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = AuthConfig.ALGORITHM
ACCESS_TOKEN_EXPIRE_DAYS = AuthConfig.ACCESS_TOKEN_EXPIRE_DAYS

_PASSWORD_RE = re.compile(AuthConfig.PASSWORD_PATTERN)
_NATIONAL_ID_RE = re.compile(AuthConfig.NATIONAL_ID_PATTERN)

# bcrypt gives every hash its own random salt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=AuthConfig.BCRYPT_ROUNDS,
    bcrypt__default_ident="2b"
)


def password_meets_policy(password: str) -> bool:
    return bool(password) and _PASSWORD_RE.match(password) is not None


def national_id_is_valid(national_id: str) -> bool:
    return bool(national_id) and _NATIONAL_ID_RE.match(national_id) is not None


# Password hashing
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Fallback verification for direct bcrypt hashes
        import bcrypt
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    # Ensure password is not longer than 72 bytes (bcrypt limitation)
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password = password_bytes[:72].decode('utf-8', errors='ignore')

    try:
        return pwd_context.hash(password)
    except ValueError:
        # Fallback to a simpler bcrypt approach if passlib fails
        import bcrypt
        salt = bcrypt.gensalt(rounds=AuthConfig.BCRYPT_ROUNDS)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


# The national identifier is hashed the same way as a password
hash_national_id = get_password_hash
verify_national_id = verify_password


def national_id_digest(national_id: str) -> str:
    """Deterministic keyed digest, so uniqueness can be checked without storing the plaintext."""
    return hmac.new(SECRET_KEY.encode("utf-8"), national_id.encode("utf-8"), hashlib.sha256).hexdigest()


# JWT token creation and verification
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid, unexpired token, or None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
