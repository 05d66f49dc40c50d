# Password hashing and JWT issuing/verification
# movie_api/core/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Scheme for extracting "Bearer <token>" from the Authorization header.
# auto_error=False so a missing header gets our 401 instead of FastAPI's 403.
token_bearer_scheme = HTTPBearer(auto_error=False)


# --- Password Hashing ---

class PasswordHasher:
    """Salted one-way password hashing (bcrypt) with a fixed work factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty.")
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison of a plaintext password against a stored hash."""
        if not password or not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            # Stored value is not a recognizable hash
            logger.warning("Stored password value is not a valid bcrypt hash.")
            return False


# --- Exceptions ---

class AuthError(Exception):
    """Raised when a bearer token cannot be accepted (bad signature, malformed, expired)."""
    def __init__(self, message: str = "Unauthenticated", expired: bool = False):
        self.message = message
        self.expired = expired
        super().__init__(message)


class CredentialsException(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials", status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(
            status_code=status_code,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class TokenExpiredException(CredentialsException):
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail=detail)

class InvalidTokenException(CredentialsException):
    def __init__(self, detail: str = "Invalid token signature or format"):
        super().__init__(detail=detail)

class MissingTokenException(CredentialsException):
    def __init__(self, detail: str = "Authentication token missing"):
        super().__init__(detail=detail)

class InsufficientPermissionsException(CredentialsException):
    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


# --- Token Service ---

class TokenService:
    """
    Issues and verifies signed, time-limited bearer tokens.

    Tokens are stateless: the payload carries the user's public fields, the
    subject claim is the username, and validity is decided by signature and
    expiry alone.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: timedelta = timedelta(days=7)):
        if not secret:
            raise ValueError("JWT secret must not be empty.")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, user: Dict[str, Any], now: Optional[datetime] = None) -> str:
        """
        Signs a token for the given serialized user record.

        Args:
            user: JSON-compatible user fields; must include "username".
            now: Issue time. Defaults to the current UTC time; naive values are read as UTC.

        Returns:
            The encoded JWT.
        """
        issued_at = now or datetime.now(timezone.utc)
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        claims = dict(user)
        claims.update({
            "sub": user["username"],
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_in).timestamp()),
        })
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Checks signature and expiry and returns the decoded identity.

        Raises:
            AuthError: If the token is expired, malformed, badly signed or has no subject.
        """
        if not token:
            raise AuthError("Authentication token missing")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "require_exp": True,
                    "require_sub": True,
                },
            )
        except ExpiredSignatureError:
            raise AuthError("Token has expired", expired=True)
        except JWTClaimsError as e:
            raise AuthError(f"Invalid token claims: {e}")
        except JWTError as e:
            raise AuthError(f"Invalid token: {e}")

        if not isinstance(payload.get("sub"), str):
            raise AuthError("User identifier not found in token")
        return payload
