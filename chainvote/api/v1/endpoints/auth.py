from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import logging

from chainvote.db.database import get_db
from chainvote.schemas.user import (
    AdminRegister,
    AdminLogin,
    AuthResponse,
    LoginRequest,
    PrincipalRead,
    RegisterRequest,
    Token
)
from chainvote.services import identity
from chainvote.core.constants import ErrorMessages, ErrorCodes
from chainvote.core.errors import ChainVoteError
from chainvote.api.v1.responses import (
    get_registration_responses,
    get_login_responses,
    get_token_responses
)

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(principal, access_token: str, message: str) -> AuthResponse:
    return AuthResponse(
        access_token=access_token,
        user=PrincipalRead.model_validate(principal),
        message=message
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, responses=get_registration_responses())
def register(payload: RegisterRequest = Body(..., discriminator="role"), db: Session = Depends(get_db)):
    """
    Register an admin or a voter.

    The `role` field selects the shape of the body. Voters additionally supply
    their national identifier and its issue date, and receive a generated
    `voter_id` they use to log in. The response carries a 7-day bearer token.
    """
    try:
        logger.info(f"Registration attempt for {payload.role}: {payload.email}")

        if isinstance(payload, AdminRegister):
            principal, access_token = identity.register_admin(
                db,
                username=payload.username,
                email=payload.email,
                password=payload.password,
                wallet_address=payload.wallet_address
            )
        else:
            principal, access_token = identity.register_voter(
                db,
                username=payload.username,
                email=payload.email,
                password=payload.password,
                wallet_address=payload.wallet_address,
                national_id=payload.national_id,
                issue_date=payload.issue_date
            )

        return _auth_response(principal, access_token, "Registration successful")

    except (ChainVoteError, HTTPException):
        # Re-raise properly formatted errors
        raise
    except ValidationError as e:
        logger.error(f"Validation error during registration: {str(e)}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": ErrorMessages.VALIDATION_ERROR,
                "error_code": ErrorCodes.VALIDATION_ERROR,
                "errors": e.errors(include_url=False)
            }
        )
    except IntegrityError as e:
        # Lost a race on a unique column
        db.rollback()
        logger.error(f"Database integrity error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Registration failed due to data constraint violation",
                "error_code": ErrorCodes.DUPLICATE_RESOURCE
            }
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": ErrorMessages.DATABASE_ERROR,
                "error_code": ErrorCodes.DATABASE_ERROR
            }
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error during registration: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": ErrorMessages.INTERNAL_ERROR,
                "error_code": ErrorCodes.INTERNAL_ERROR
            }
        )


@router.post("/login", response_model=AuthResponse, responses=get_login_responses())
def login(payload: LoginRequest = Body(..., discriminator="role"), db: Session = Depends(get_db)):
    """
    Log in as an admin (email + password) or a voter (voter_id + national id + issue date).

    Every mismatch returns the same 401 so callers cannot tell which part was wrong.
    """
    try:
        if isinstance(payload, AdminLogin):
            logger.info(f"Admin login attempt for email: {payload.email}")
            principal, access_token = identity.login_admin(db, payload.email, payload.password)
        else:
            logger.info(f"Voter login attempt for voter_id: {payload.voter_id}")
            principal, access_token = identity.login_voter(
                db,
                voter_id=payload.voter_id,
                national_id=payload.national_id,
                issue_date=payload.issue_date
            )

        return _auth_response(principal, access_token, "Login successful")

    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": ErrorMessages.DATABASE_ERROR,
                "error_code": ErrorCodes.DATABASE_ERROR
            }
        )
    except Exception as e:
        logger.error(f"Unexpected error during login: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": ErrorMessages.INTERNAL_ERROR,
                "error_code": ErrorCodes.INTERNAL_ERROR
            }
        )


@router.post("/token", response_model=Token, responses=get_token_responses())
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 password flow for admins, used by the interactive docs.

    IMPORTANT: In the 'username' field, enter the admin's EMAIL ADDRESS.
    """
    try:
        logger.info(f"OAuth2 token request for email: {form_data.username}")
        _, access_token = identity.login_admin(db, form_data.username, form_data.password)
        return Token(access_token=access_token)

    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error during token generation: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": ErrorMessages.DATABASE_ERROR,
                "error_code": ErrorCodes.DATABASE_ERROR
            }
        )
    except Exception as e:
        logger.error(f"Unexpected error during token generation: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": ErrorMessages.INTERNAL_ERROR,
                "error_code": ErrorCodes.INTERNAL_ERROR
            }
        )
