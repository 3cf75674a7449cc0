"""
Authentication error taxonomy.

Store failures (``StoreUnavailable``, ``DuplicateKey``) live in ``errors``
since the document routes raise them too.
"""

from __future__ import annotations

from fastapi import status

from errors import AppError


class AuthError(AppError):
    code = "auth_error"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Authentication failed"


class DuplicateUser(AuthError):
    code = "duplicate_user"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class InvalidCredentials(AuthError):
    """Unknown username and wrong password are deliberately the same error."""

    code = "invalid_credentials"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials"


class TokenMissing(AuthError):
    code = "token_missing"
    status_code = status.HTTP_403_FORBIDDEN
    message = "Token missing"


class InvalidToken(AuthError):
    code = "invalid_token"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid token"


class TokenExpired(InvalidToken):
    code = "token_expired"
