import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.api.config import settings
from src.api.database import get_db
from src.api.errors import Unauthenticated
from src.api.models import User

logger = logging.getLogger(__name__)

# Setup password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)

# OAuth2 bearer scheme - tokenUrl must match login path.
# auto_error is off so the auth cookie can be tried when the header is absent.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(tz=timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def issue_token_for(user: User) -> str:
    return create_access_token({"sub": str(user.id)})


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for a matching email/password pair, else None."""
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def resolve_token(token: Optional[str], db: Session) -> User:
    """
    Validate a token's signature and expiry and load the user it names.

    Raises:
        Unauthenticated for a missing, malformed, expired or forged token,
        or when the user no longer exists.
    """
    if not token:
        raise Unauthenticated("Not authenticated")
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise Unauthenticated()
        user_id = int(subject)
    except (JWTError, ValueError, TypeError):
        logger.warning("Rejected invalid access token")
        raise Unauthenticated()
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.warning("Rejected token for unknown user id=%s", user_id)
        raise Unauthenticated()
    return user


# PUBLIC_INTERFACE
def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that returns the currently authenticated user.

    The bearer header is used when present, otherwise the auth cookie.

    Raises:
        401 if credentials are missing or invalid, or the user is not found.
    """
    if not token:
        token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    return resolve_token(token, db)
