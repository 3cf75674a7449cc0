"""
FastAPI dependencies for authentication.

Provides ``db_session``, the credential store / auth service wiring and
``get_current_claims`` which guards protected routes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenClaims, TokenIssuer
from auth.service import AuthService, authenticate
from config.settings import Settings
from database.session import get_db_session
from database.users import CredentialStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_credential_store(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(get_app_settings),
) -> CredentialStore:
    return CredentialStore(session, case_insensitive=settings.username_case_insensitive)


def get_auth_service(
    store: CredentialStore = Depends(get_credential_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(store, issuer, bcrypt_rounds=settings.bcrypt_rounds)


async def get_current_claims(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """
    Verify the token in the ``Authorization`` header and return its claims.

    Raises ``TokenMissing`` (403) or ``InvalidToken`` (401).
    """
    return authenticate(authorization, issuer)
