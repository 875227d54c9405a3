# api/auth.py
"""
Auth API
Registration and login; both return a signed JWT plus the public user.
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..interfaces.user_store import DuplicateEmailError, to_public_user
from ..schemas.auth_schemas import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from ..utils.security import create_access_token, hash_password, verify_password
from .deps import AppServices, get_services

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(request: RegisterRequest, services: AppServices = Depends(get_services)):
    try:
        user = services.user_store.create_user(
            email=request.email,
            username=request.username,
            password_hash=hash_password(request.password),
        )
    except DuplicateEmailError:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    token = create_access_token(str(user["_id"]), user["email"])
    return AuthResponse(token=token, user=UserPublic(**to_public_user(user)))


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, services: AppServices = Depends(get_services)):
    user = services.user_store.get_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        logger.info(f"Failed login for {request.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(str(user["_id"]), user["email"])
    return AuthResponse(token=token, user=UserPublic(**to_public_user(user)))
