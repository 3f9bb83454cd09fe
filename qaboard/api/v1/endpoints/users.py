"""
User endpoints - registration and login for the identity layer.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from qaboard.db.session import DbSession
from qaboard.db.models import User
from qaboard.db.repositories.user_repository import UserRepository
from qaboard.schemas.user import UserCreate, UserResponse
from qaboard.core.security import hash_password, create_access_token, verify_password

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(session: DbSession, data: UserCreate):
    """Create new user. Returns user without password."""
    repo = UserRepository(session)
    if await repo.get_by_username(data.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    if await repo.get_by_email(data.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    user = User(
        username=data.username,
        email=data.email,
        hashed_password=hash_password(data.password),
    )
    user = await repo.add(user)
    return UserResponse.model_validate(user)


@router.post("/login")
async def login(session: DbSession, data: LoginRequest):
    """Authenticate and return JWT."""
    user = await UserRepository(session).get_by_username(data.username)
    if not user or not verify_password(data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    token = create_access_token(user.id, user.username)
    return {"access_token": token, "token_type": "bearer", "user_id": user.id}
