"""Health, status and exchange-rate routes."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from flask import current_app, request
from flask_login import login_required

from spendflow.errors import ValidationError
from spendflow.services import currency_service
from spendflow.utils.helpers import json_response

from . import main_bp


@main_bp.route("/health", methods=["GET"])
def health() -> Any:
    return json_response({"status": "ok", "timestamp": datetime.utcnow().isoformat()})


@main_bp.route("/api/status", methods=["GET"])
def status() -> Any:
    return json_response({"status": "ok", "timestamp": datetime.utcnow().isoformat()})


@main_bp.route("/api/exchange-rate", methods=["GET"])
@login_required
def exchange_rate() -> Any:
    """Return the rate used to convert between two currencies."""
    source = request.args.get("from")
    target = request.args.get("to") or current_app.config["DEFAULT_CURRENCY"]
    if not source:
        raise ValidationError("Query parameter 'from' is required.")

    rate = currency_service.get_exchange_rate(source, target)
    return json_response({"from": source.upper(), "to": target.upper(), "rate": float(rate)})
