import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import AuthenticationError, ConfigurationError
from database import get_db
from models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)
security_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Spend the same time as a real verification so unknown users are not detectable by timing."""
    pwd_context.dummy_verify()


def _signing_secret() -> str:
    if not settings.jwt_secret:
        logger.error("JWT secret is not configured")
        raise ConfigurationError()
    return settings.jwt_secret


def create_access_token(user: User) -> tuple[str, int]:
    """Issue a bearer token for ``user``. Returns the token and its expiry as epoch seconds."""
    secret = _signing_secret()
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=settings.jwt_expire_minutes)
    token = jwt.encode(
        {
            "sub": str(user.id),
            "userId": str(user.id),
            "username": user.username,
            "iat": issued_at,
            "exp": expire,
        },
        secret,
        algorithm=settings.jwt_algorithm,
    )
    return token, int(expire.timestamp())


def decode_access_token(token: str) -> dict:
    secret = _signing_secret()
    try:
        return jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Your session has expired. Please log in again.", error_code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationError("Invalid token. Please log in again.", error_code="INVALID_TOKEN")


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Authenticate the request from its ``Authorization: Bearer`` header."""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = UUID(payload["userId"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token. Please log in again.", error_code="INVALID_TOKEN")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthenticationError("Invalid token. Please log in again.", error_code="INVALID_TOKEN")

    request.state.user_id = user.id
    return user
