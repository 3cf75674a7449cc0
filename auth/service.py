"""
Auth service — signup, login and the token gate for protected routes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from auth.exceptions import DuplicateUser, InvalidCredentials, TokenMissing
from auth.jwt import TokenClaims, TokenIssuer
from auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from database.models import User
from errors import DuplicateKey

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    async def find_by_username(self, username: str) -> Optional[User]: ...

    async def insert(self, username: str, email: str, password_hash: str) -> User: ...


def extract_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization`` header.

    Accepts ``Bearer <token>`` or a bare token; anything else is
    ``TokenMissing``.
    """
    parts = (authorization or "").split()
    if len(parts) == 1 and parts[0].lower() != "bearer":
        return parts[0]
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    raise TokenMissing()


def authenticate(authorization: Optional[str], issuer: TokenIssuer) -> TokenClaims:
    """Gate for protected routes: ``TokenMissing`` or ``InvalidToken`` on failure."""
    return issuer.verify(extract_token(authorization))


class AuthService:
    def __init__(
        self,
        store: UserStore,
        issuer: TokenIssuer,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self.store = store
        self.issuer = issuer
        self.bcrypt_rounds = bcrypt_rounds

    async def signup(self, username: str, email: str, password: str) -> User:
        if await self.store.find_by_username(username) is not None:
            raise DuplicateUser()

        # bcrypt is CPU-bound; keep it off the event loop
        password_hash = await asyncio.to_thread(
            hash_password, password, rounds=self.bcrypt_rounds
        )
        try:
            user = await self.store.insert(username, email, password_hash)
        except DuplicateKey as exc:
            # lost a race, or the email is taken
            raise DuplicateUser() from exc

        logger.info("Registered user %s (%s)", user.username, user.user_id)
        return user

    async def login(self, username: str, password: str) -> str:
        user = await self.store.find_by_username(username)
        if user is None or not await asyncio.to_thread(
            verify_password, password, user.password_hash
        ):
            logger.info("Failed login for %r", username)
            raise InvalidCredentials()

        logger.info("Login: %s (%s)", user.username, user.user_id)
        return self.issuer.issue(str(user.user_id))
