# carebook/auth.py
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .application.ports.identity import Actor, Role
from .config import settings

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer()


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT issued by the identity service"""
    # Refuse to trust tokens while the placeholder secret is configured
    if not settings.SECRET_KEY or settings.SECRET_KEY == "change-me-in-prod":
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("JWT token expired")
        return None
    except jwt.InvalidTokenError:
        return None


def actor_from_payload(payload: Dict[str, Any]) -> Actor:
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    try:
        user_id = int(user_id)
    except (ValueError, TypeError):
        raise HTTPException(status_code=401, detail="Invalid token: invalid user ID format")
    try:
        role = Role(str(payload.get("role", "")).upper())
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token: unknown role")
    return Actor(user_id=user_id, role=role)


def get_current_actor(credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> Actor:
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return actor_from_payload(payload)


def require_roles(*roles: Role):
    """Dependency factory rejecting callers whose role is not listed"""
    def _checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.is_admin and actor.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient role for this operation")
        return actor
    return _checker
