from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import logging

from chainvote.db.database import get_db
from chainvote.schemas.common import MessageResponse
from chainvote.schemas.user import PasswordChange, PrincipalContext, PrincipalRead, ProfileUpdate
from chainvote.services import identity
from chainvote.core.constants import ErrorMessages, ErrorCodes
from chainvote.core.errors import ChainVoteError
from chainvote.api.v1.endpoints.dependencies import get_current_principal
from chainvote.api.v1.responses import (
    get_user_profile_responses,
    get_user_update_responses,
    get_password_change_responses
)

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _database_error(db: Session, action: str, e: Exception) -> HTTPException:
    db.rollback()
    logger.error(f"Database error during {action}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "message": ErrorMessages.DATABASE_ERROR,
            "error_code": ErrorCodes.DATABASE_ERROR
        }
    )


@router.get("/me", response_model=PrincipalRead, responses=get_user_profile_responses())
def read_current_user(
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """Get the profile of the authenticated admin or voter."""
    try:
        return identity.get_profile(db, principal)
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, "profile retrieval", e)


@router.put("/me", response_model=PrincipalRead, responses=get_user_update_responses())
def update_current_user(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """
    Update the caller's username and/or wallet address.

    The wallet must stay unique across admins and voters.
    """
    try:
        logger.info(f"Profile update attempt for {principal.role} {principal.id}")
        return identity.update_profile(
            db,
            principal,
            username=payload.username,
            wallet_address=payload.wallet_address
        )
    except (ChainVoteError, HTTPException):
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error during profile update: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": ErrorMessages.DUPLICATE_WALLET,
                "error_code": ErrorCodes.DUPLICATE_RESOURCE
            }
        )
    except SQLAlchemyError as e:
        raise _database_error(db, "profile update", e)


@router.put("/me/password", response_model=MessageResponse, responses=get_password_change_responses())
def change_current_user_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    principal: PrincipalContext = Depends(get_current_principal)
):
    """Change the caller's password after re-checking the current one."""
    try:
        identity.change_password(db, principal, payload.current_password, payload.new_password)
        return MessageResponse(message="Password updated successfully")
    except (ChainVoteError, HTTPException):
        raise
    except SQLAlchemyError as e:
        raise _database_error(db, "password change", e)
