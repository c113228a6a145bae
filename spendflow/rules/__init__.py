"""Approval-rule administration blueprint."""
from flask import Blueprint

rules_bp = Blueprint("rules", __name__, url_prefix="/api/approval-rules")

from . import routes  # noqa: E402,F401
