"""Resolve the calling principal from a bearer token."""
from __future__ import annotations

from typing import Optional

from flask import Request
from flask_login import LoginManager

from spendflow import db
from spendflow.models import User
from spendflow.services.token_service import decode_token
from spendflow.utils.helpers import json_response


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def init_principal_loader(login_manager: LoginManager) -> None:
    @login_manager.user_loader
    def load_user(user_id: str) -> Optional[User]:
        return db.session.get(User, int(user_id))

    @login_manager.request_loader
    def load_user_from_request(request: Request) -> Optional[User]:
        token = _bearer_token(request)
        if token is None:
            return None
        payload = decode_token(token)
        if payload is None:
            return None
        return db.session.get(User, int(payload["sub"]))

    @login_manager.unauthorized_handler
    def unauthorized():
        return json_response({"message": "Authentication required."}, status=401)
