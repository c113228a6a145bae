"""General helper utilities."""
from __future__ import annotations

import re
from functools import wraps
from typing import Any, Callable, Dict

from flask import jsonify, request
from flask_login import current_user

from spendflow.models import UserRole

JsonView = Callable[..., Any]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _camel_key(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _snake_key(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def to_camel_case(data: Any) -> Any:
    """Recursively convert dictionary keys from snake_case to camelCase."""
    if isinstance(data, list):
        return [to_camel_case(item) for item in data]
    if isinstance(data, dict):
        return {
            (_camel_key(key) if isinstance(key, str) else key): to_camel_case(value)
            for key, value in data.items()
        }
    return data


def to_snake_case(data: Any) -> Any:
    """Recursively convert dictionary keys from camelCase to snake_case."""
    if isinstance(data, list):
        return [to_snake_case(item) for item in data]
    if isinstance(data, dict):
        return {
            (_snake_key(key) if isinstance(key, str) else key): to_snake_case(value)
            for key, value in data.items()
        }
    return data


def json_response(payload: Any, status: int = 200):
    """Return a camelCased JSON response with status code."""
    return jsonify(to_camel_case(payload)), status


def request_payload() -> Dict[str, Any]:
    """Return the JSON (or form) body of the current request with snake_case keys."""
    if request.is_json:
        payload = request.get_json(silent=True) or {}
    else:
        payload = request.form.to_dict()
    if not isinstance(payload, dict):
        return {}
    return to_snake_case(payload)


def role_required(*roles: UserRole):
    """Restrict a route to one or more roles."""
    def decorator(view_func: JsonView) -> JsonView:
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return json_response({"message": "Authentication required."}, status=401)
            if current_user.role not in roles:
                return json_response({"message": "Insufficient permissions."}, status=403)
            return view_func(*args, **kwargs)

        return wrapped

    return decorator
