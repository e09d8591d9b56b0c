import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from src.api.auth import (
    authenticate_user,
    get_current_user,
    get_password_hash,
    issue_token_for,
)
from src.api.config import settings
from src.api.database import get_db
from src.api.errors import Unauthenticated
from src.api.models import User
from src.api.schemas import (
    LoginRequest,
    MessageResponse,
    TokenResponse,
    UserCreateRequest,
    UserResponse,
)
from src.api.services import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=settings.access_token_max_age,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register_user(payload: UserCreateRequest, response: Response, db: Session = Depends(get_db)):
    """
    Register a new user and log them in.

    Body:
        name: display name
        email: valid email address
        password: plaintext password (min 6 chars)

    Returns:
        TokenResponse {"access_token", "token_type": "bearer"}; the token
        is under "access_token" (not "token") and is also set as an
        httpOnly cookie.

    Raises:
        400 if email already in use.
    """
    user = UserService.register(db, payload, get_password_hash(payload.password))
    token = issue_token_for(user)
    _set_auth_cookie(response, token)
    return TokenResponse(access_token=token, token_type="bearer")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login and obtain JWT access token",
)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Login with email and password.

    Returns:
        TokenResponse {"access_token", "token_type": "bearer"}; the token
        is under "access_token" (not "token") and is also set as an
        httpOnly cookie.

    Raises:
        401 on invalid credentials.
    """
    user = authenticate_user(db, payload.email, payload.password)
    if user is None:
        logger.warning("Failed login attempt")
        raise Unauthenticated("Invalid email or password")
    token = issue_token_for(user)
    _set_auth_cookie(response, token)
    logger.info("User %s logged in", user.id)
    return TokenResponse(access_token=token, token_type="bearer")


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserResponse, summary="Get the current user")
def read_current_user(current_user: User = Depends(get_current_user)):
    """Return the identity the request's token resolves to."""
    return UserResponse(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        created_at=current_user.created_at,
    )


# PUBLIC_INTERFACE
@router.post("/logout", response_model=MessageResponse, summary="Clear the auth cookie")
def logout(response: Response, current_user: User = Depends(get_current_user)):
    """
    Clear the browser auth cookie. Tokens are stateless and stay valid until
    they expire.
    """
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return MessageResponse(message="Logged out")
