"""
Auth API routes — signup, login, protected, me, all.

Mounted at the application root.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from auth.dependencies import get_auth_service, get_credential_store, get_current_claims
from auth.exceptions import InvalidToken
from auth.jwt import TokenClaims
from auth.password import MAX_PASSWORD_BYTES
from auth.service import AuthService
from database.users import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    username: str
    password: str


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    message: str
    token: str


class ProtectedResponse(BaseModel):
    message: str
    userId: str


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/signup", response_model=MessageResponse)
async def signup(
    req: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user."""
    await service.signup(req.username, req.email, req.password)
    return {"message": "Signup successful"}


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with username + password."""
    token = await service.login(req.username, req.password)
    return {"message": "Login successful", "token": token}


@router.get("/protected", response_model=ProtectedResponse)
async def protected(claims: TokenClaims = Depends(get_current_claims)) -> Dict[str, Any]:
    return {"message": "Protected data", "userId": claims.sub}


@router.get("/me")
async def me(
    claims: TokenClaims = Depends(get_current_claims),
    store: CredentialStore = Depends(get_credential_store),
) -> Dict[str, Any]:
    """Profile of the token's subject."""
    user = await store.find_by_id(claims.sub)
    if user is None:
        # signed by us, but the account is gone
        raise InvalidToken("unknown subject")
    return user.to_public()


@router.get("/all")
async def list_users(
    claims: TokenClaims = Depends(get_current_claims),
    store: CredentialStore = Depends(get_credential_store),
) -> List[Dict[str, Any]]:
    users = await store.list_users()
    logger.debug("User %s listed %d users", claims.sub, len(users))
    return [u.to_public() for u in users]
