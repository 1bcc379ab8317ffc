"""Bearer token authentication for event ingress."""

import logging
from typing import Optional

import jwt
from fastapi import Header

from .config import settings
from .errors import AuthenticationError
from ..models.schemas import Identity

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def authenticate(
    authorization: Optional[str],
    secret: Optional[str],
    algorithm: str = "HS256",
) -> Identity:
    """
    Validate an `Authorization` header and decode the caller identity.

    Args:
        authorization: Raw header value, expected as "Bearer <token>"
        secret: Shared signing secret
        algorithm: JWT signing algorithm

    Returns:
        Identity decoded from the token claims

    Raises:
        AuthenticationError: header missing or malformed, signature invalid,
            token expired, or no secret configured
    """
    if not authorization:
        raise AuthenticationError("Missing authorization header")

    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Authorization header must use the Bearer scheme")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Missing bearer token")

    if not secret:
        logger.error("JWT_SECRET is not configured; rejecting request")
        raise AuthenticationError("Authentication is not configured")

    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {str(e)}")

    return Identity(
        id=payload.get("id") or payload.get("sub"),
        user_type=payload.get("userType") or payload.get("user_type") or payload.get("role"),
        email=payload.get("email"),
    )


async def get_current_identity(
    authorization: Optional[str] = Header(default=None),
) -> Identity:
    """
    FastAPI dependency guarding the event routes.

    Usage:
        @router.post("/events")
        async def publish(identity: Identity = Depends(get_current_identity)):
            ...
    """
    return authenticate(authorization, settings.JWT_SECRET, settings.JWT_ALGORITHM)
