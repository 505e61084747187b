"""
Application Constants

Centralized location for all application constants, organized by domain.
This makes it easy to maintain and update values across the entire application.
"""

import os
from dotenv import load_dotenv

# Load environment variables from a .env file
load_dotenv()

# =============================================================================
# API Configuration
# =============================================================================

class APIConfig:
    """API-level configuration constants"""

    # API Versioning
    API_V1_PREFIX = "/api/v1"
    API_VERSION = "1.0.0"
    API_TITLE = "ChainVote API"
    API_DESCRIPTION = """
    A polling API where every vote is backed by a Solana transaction signature.

    ## Features
    - Admin and voter registration and authentication
    - Time-windowed polls with derived status
    - Per-poll voting tokens minted for eligible voters
    - One vote per principal per poll, verified on-chain
    - Results and closed-poll history with winners
    """

    # CORS Configuration
    ALLOWED_ORIGINS = [
        "http://localhost:3000",  # React dev server
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]


# =============================================================================
# Authentication & Security
# =============================================================================

class AuthConfig:
    """Authentication and security constants"""

    # JWT Configuration
    ACCESS_TOKEN_EXPIRE_DAYS = 7
    ALGORITHM = "HS256"
    TOKEN_TYPE = "bearer"

    # bcrypt work factor, lowered in tests through the environment
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Password requirements
    PASSWORD_PATTERN = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#])[A-Za-z\d@$!%*?&#]{8,}$"
    PASSWORD_POLICY_MESSAGE = (
        "Password must be at least 8 characters long and contain at least 1 uppercase letter, "
        "1 lowercase letter, 1 number, and 1 special character (@$!%*?&#)"
    )

    # Voter identity
    NATIONAL_ID_PATTERN = r"^[0-9]{5,20}$"
    VOTER_ID_PREFIX = "VID"
    VOTER_ID_RANDOM_LENGTH = 5
    VOTER_ID_MAX_ATTEMPTS = 5


class Roles:
    """Principal roles carried in credentials"""

    ADMIN = "admin"
    VOTER = "voter"


# =============================================================================
# Business Logic Limits
# =============================================================================

class BusinessLimits:
    """Business rules and validation constants"""

    # Poll limits
    MIN_POLL_TITLE_LENGTH = 3
    MAX_POLL_TITLE_LENGTH = 200
    MAX_POLL_DESCRIPTION_LENGTH = 5000
    MIN_POLL_OPTIONS = 2
    MAX_POLL_OPTIONS = 20
    MAX_POLL_OPTION_LENGTH = 200
    MAX_IMAGE_URL_LENGTH = 500

    # User profile limits
    MIN_USERNAME_LENGTH = 3
    MAX_USERNAME_LENGTH = 100
    MAX_WALLET_ADDRESS_LENGTH = 44
    MAX_SIGNATURE_LENGTH = 88


# =============================================================================
# Error Messages
# =============================================================================

class ErrorMessages:
    """Standardized error messages"""

    # Authentication errors
    AUTH_REQUIRED = "Authentication required"
    INVALID_CREDENTIALS = "Invalid credentials"
    INVALID_TOKEN = "Could not validate credentials"
    CURRENT_PASSWORD_INCORRECT = "Current password is incorrect"

    # Authorization errors
    ADMIN_ONLY = "Only admins can perform this action"
    NOT_AUTHORIZED_DELETE = "You are not authorized to delete this poll"
    NO_TOKEN = "No valid voting token found. Please contact admin to mint a token for you."

    # Resource errors
    POLL_NOT_FOUND = "Poll not found"
    USER_NOT_FOUND = "User not found"
    TRANSACTION_NOT_FOUND = "Transaction not found on blockchain"

    # Validation errors
    DUPLICATE_EMAIL = "Email is already registered"
    DUPLICATE_WALLET = "Wallet address is already registered"
    DUPLICATE_NATIONAL_ID = "National identifier is already registered"
    WALLET_REQUIRED = "Wallet address is required"
    INVALID_NATIONAL_ID = "National identifier must be 5-20 digits"
    NOT_ENOUGH_OPTIONS = "A poll needs at least 2 options"
    INVALID_TIME_WINDOW = "Poll end time must be after its start time"
    INVALID_OPTION = "Option does not belong to this poll"

    # Business rule violations
    POLL_NOT_STARTED = "Poll has not started yet"
    POLL_ENDED = "Poll has ended"
    POLL_ALREADY_STARTED = "Cannot delete a poll that has already started"
    POLL_NOT_CLOSED = "Can only delete closed polls from history"
    ALREADY_VOTED = "You have already voted in this poll"
    DUPLICATE_SIGNATURE = "Transaction signature has already been used"
    NO_ELIGIBLE_VOTERS = "No eligible voters found"
    TOKEN_ALREADY_MINTED = "Token already minted for this poll"
    TOKEN_MINT_FAILED = "Token could not be minted, please retry"

    # System errors
    DATABASE_ERROR = "Database operation failed"
    INTERNAL_ERROR = "An unexpected error occurred"
    VALIDATION_ERROR = "Validation failed"
    BLOCKCHAIN_ERROR = "Blockchain service unavailable"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes for API responses"""

    # Authentication & Authorization
    AUTH_ERROR = "AUTH_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    NO_TOKEN = "NO_TOKEN"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TRANSACTION = "INVALID_TRANSACTION"

    # Business Logic
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    POLL_NOT_FOUND = "POLL_NOT_FOUND"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    POLL_NOT_STARTED = "POLL_NOT_STARTED"
    POLL_ENDED = "POLL_ENDED"
    ALREADY_VOTED = "ALREADY_VOTED"
    DUPLICATE_SIGNATURE = "DUPLICATE_SIGNATURE"

    # System
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BLOCKCHAIN_ERROR = "BLOCKCHAIN_ERROR"


# =============================================================================
# Database Configuration
# =============================================================================

class DatabaseConfig:
    """Database-related constants"""

    DEFAULT_DATABASE_URL = "sqlite:///./chainvote.db"

    # Query limits
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100


# =============================================================================
# Blockchain Configuration
# =============================================================================

class BlockchainConfig:
    """Solana RPC settings"""

    MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
    DEVNET_RPC_URL = "https://api.devnet.solana.com"
    COMMITMENT = "confirmed"
    MEMO_PROGRAM_ID = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"
    DEFAULT_TIMEOUT_SECONDS = 10.0

    @staticmethod
    def rpc_url() -> str:
        override = os.getenv("SOLANA_RPC_URL")
        if override:
            return override
        if os.getenv("SOLANA_NETWORK", "devnet") == "mainnet":
            return BlockchainConfig.MAINNET_RPC_URL
        return BlockchainConfig.DEVNET_RPC_URL

    @staticmethod
    def timeout_seconds() -> float:
        return float(os.getenv("BLOCKCHAIN_TIMEOUT_SECONDS", BlockchainConfig.DEFAULT_TIMEOUT_SECONDS))


# =============================================================================
# Logging Configuration
# =============================================================================

class LoggingConfig:
    """Logging configuration constants"""

    # Log levels
    DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_LOG_LEVEL = "WARNING"

    # Log formats
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# Convenience Exports
# =============================================================================

API_V1_PREFIX = APIConfig.API_V1_PREFIX
POLL_NOT_FOUND = ErrorMessages.POLL_NOT_FOUND
