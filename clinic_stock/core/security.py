"""
Security utilities for request identity.
Handles JWT access tokens and turns them into an explicit acting user that
route handlers pass down to the services.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Any

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from clinic_stock.core.config import settings
from clinic_stock.utils import utcnow


# HTTP Bearer token scheme
security_scheme = HTTPBearer(auto_error=True)


@dataclass(frozen=True)
class ActingUser:
    """Identity of the caller for one request."""
    user_id: str
    role: str = "staff"


def create_access_token(
    subject: str,
    role: str = "staff",
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: User identifier
        role: Role claim (admin, pharmacy, glass, staff, ceo)
        expires_delta: Token expiration time
        additional_claims: Extra data to include in token

    Returns:
        Encoded JWT token string
    """
    now = utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "role": role,
        "type": "access",
        "iat": now
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_acting_user(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme)
) -> ActingUser:
    """Extract and validate the acting user from the bearer token."""
    payload = decode_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type", "access") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type. Access token required.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return ActingUser(user_id=user_id, role=payload.get("role", "staff"))


def require_roles(*roles: str):
    """Dependency factory restricting a route to the given roles. Admins always pass."""

    def checker(user: ActingUser = Depends(get_acting_user)) -> ActingUser:
        if user.role != "admin" and user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(roles)}"
            )
        return user

    return checker
