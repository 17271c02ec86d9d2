"""
Authentication endpoints: login and current-user lookup.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from backoffice.api.schemas.auth import AuthResponse, Token, UserLogin, UserResponse
from backoffice.core.security import User, authenticate_user, get_current_user, token_for_user
from backoffice.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Login with username and password.

    Returns:
    - JWT access token
    - User information
    """
    try:
        user = authenticate_user(db, credentials.username, credentials.password)
        if not user:
            raise HTTPException(
                status_code=401,
                detail="Incorrect username or password"
            )

        logger.info("User '%s' logged in", user.username)
        return AuthResponse(
            token=Token(access_token=token_for_user(user)),
            user=UserResponse.model_validate(user)
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user information.

    Requires: Bearer token in Authorization header
    """
    return UserResponse.model_validate(current_user)
