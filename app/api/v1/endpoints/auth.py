"""Authentication and profile endpoints."""

import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User, ROLE_USER
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    Token,
    UserOut,
    ProfileUpdate,
    RegisterResponse,
    MessageResponse,
)
from app.services.auth import (
    hash_password,
    authenticate_user,
    create_token_for_user,
    get_user_by_email,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """Register a new patient account."""
    existing_user = await get_user_by_email(db, user_data.email)
    if existing_user:
        raise HTTPException(status_code=400, detail="Failed! Email is already in use.")

    user = User(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        phone=user_data.phone,
        role=ROLE_USER,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("User registered: %s", user.email)
    return {"message": "User registered successfully!", "userId": user.id}


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """Login with email and password; returns a bearer token."""
    user = await authenticate_user(db, credentials.email, credentials.password)

    if not user:
        raise HTTPException(status_code=401, detail="Incorrect email or password")

    logger.info("User logged in: %s (role: %s)", user.email, user.role)
    return {
        "access_token": create_token_for_user(user),
        "token_type": "bearer",
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
    }


@router.get("/profile", response_model=UserOut)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user


@router.put("/profile", response_model=MessageResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(current_user, key, value)
    await db.commit()

    return {"message": "Profile updated successfully!"}
