"""JWT issue/verify helpers for API authentication."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from flask import current_app
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _secret_for(token_type: str) -> str:
    config = current_app.config
    if token_type == REFRESH_TOKEN:
        return config["JWT_REFRESH_SECRET"]
    return config["JWT_SECRET"]


def generate_token(user) -> str:
    """Issue a short-lived access token carrying the principal's claims."""
    expires = datetime.utcnow() + timedelta(minutes=current_app.config["JWT_ACCESS_EXPIRES_MINUTES"])
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "company_id": user.company_id,
        "type": ACCESS_TOKEN,
        "exp": expires,
    }
    return jwt.encode(claims, _secret_for(ACCESS_TOKEN), algorithm=current_app.config["JWT_ALGORITHM"])


def generate_refresh_token(user) -> str:
    expires = datetime.utcnow() + timedelta(days=current_app.config["JWT_REFRESH_EXPIRES_DAYS"])
    claims = {"sub": str(user.id), "type": REFRESH_TOKEN, "exp": expires}
    return jwt.encode(claims, _secret_for(REFRESH_TOKEN), algorithm=current_app.config["JWT_ALGORITHM"])


def decode_token(token: str, token_type: str = ACCESS_TOKEN) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None when the token is invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError as exc:
        logger.debug("Rejected %s token: %s", token_type, exc)
        return None

    if payload.get("type") != token_type:
        return None
    return payload


def issue_token_pair(user) -> Dict[str, str]:
    return {"token": generate_token(user), "refresh_token": generate_refresh_token(user)}
