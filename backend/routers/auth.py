import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.user import User
from schemas.auth import RegisterRequest, RegisterResponse, LoginRequest, LoginResponse, PublicUser, UserResponse
from core.errors import AuthenticationError, ConflictError
from core.security import hash_password, verify_password, dummy_verify, create_access_token, get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials."


async def _taken_fields(db: AsyncSession, username: str, email: str) -> list[str]:
    existing = await db.execute(select(User).where(or_(User.email == email, User.username == username)))
    taken = existing.scalars().all()
    conflicts = []
    if any(u.email == email for u in taken):
        conflicts.append(f"email '{email}' already exists")
    if any(u.username == username for u in taken):
        conflicts.append(f"username '{username}' already exists")
    return conflicts


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(req: RegisterRequest, db: AsyncSession = Depends(get_db)):
    conflicts = await _taken_fields(db, req.username, req.email)
    if conflicts:
        raise ConflictError(", ".join(conflicts))

    user = User(username=req.username, email=req.email, password_hash=hash_password(req.password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent registration took the email or username after the check above
        await db.rollback()
        conflicts = await _taken_fields(db, req.username, req.email)
        if not conflicts:
            raise
        raise ConflictError(", ".join(conflicts))
    await db.refresh(user)
    logger.info("User registered: %s", user.id)
    return RegisterResponse(message="User registered successfully.", user_id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest, db: AsyncSession = Depends(get_db)):
    if req.email:
        result = await db.execute(select(User).where(User.email == req.email))
    else:
        result = await db.execute(select(User).where(User.username == req.username))
    user = result.scalar_one_or_none()

    # unknown identifier and wrong password must be indistinguishable
    if not user:
        dummy_verify()
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not verify_password(req.password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS)

    token, expires_at = create_access_token(user)
    logger.info("User logged in: %s", user.id)
    return LoginResponse(
        message="Login successful.",
        token=token,
        expires_at=expires_at,
        user=PublicUser.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
