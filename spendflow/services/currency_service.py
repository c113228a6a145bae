"""Currency conversion and metadata helpers."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Optional, Tuple

import requests
from flask import current_app

logger = logging.getLogger(__name__)

EXCHANGE_API_URL = "https://api.exchangerate-api.com/v4/latest/{base}"
REST_COUNTRIES_URL = "https://restcountries.com/v3.1/all?fields=name,currencies"

TWO_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")


def get_default_currency_for_country(country_name: str) -> Dict[str, Optional[str]]:
    """Return the default currency information for a given country."""
    try:
        response = requests.get(REST_COUNTRIES_URL, timeout=10)
        response.raise_for_status()
        countries = response.json()
    except requests.RequestException as exc:
        logger.warning("Failed to fetch country data: %s", exc)
        return {"currency_code": None, "currency_name": None}

    target = next(
        (
            entry
            for entry in countries
            if entry.get("name", {}).get("common", "").lower() == country_name.lower()
        ),
        None,
    )

    if not target:
        return {"currency_code": None, "currency_name": None}

    currencies = target.get("currencies") or {}
    if not currencies:
        return {"currency_code": None, "currency_name": None}

    code, details = next(iter(currencies.items()))
    return {"currency_code": code, "currency_name": details.get("name")}


def fetch_exchange_rates(base_currency: str) -> Dict[str, float]:
    """Fetch exchange rates for the given base currency."""
    try:
        response = requests.get(EXCHANGE_API_URL.format(base=base_currency.upper()), timeout=10)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        logger.warning("Failed to fetch exchange rates for %s: %s", base_currency, exc)
        return {}

    return payload.get("rates", {})


def get_exchange_rate(source_currency: str, target_currency: str) -> Decimal:
    """Rate that converts ``source_currency`` amounts into ``target_currency``.

    With ``EXCHANGE_RATE_SOURCE = "static"`` every cross-currency pair uses the
    configured ``STATIC_EXCHANGE_RATE``. ``"live"`` queries the exchange rate API
    and falls back to the static rate when it is unreachable.
    """
    if source_currency.upper() == target_currency.upper():
        return Decimal("1")

    static_rate = Decimal(str(current_app.config["STATIC_EXCHANGE_RATE"]))
    if current_app.config.get("EXCHANGE_RATE_SOURCE") != "live":
        return static_rate

    rate = fetch_exchange_rates(source_currency).get(target_currency.upper())
    if not rate:
        return static_rate
    return Decimal(str(rate)).quantize(RATE_PLACES)


def convert_currency(
    amount: Decimal | float, source_currency: str, target_currency: str
) -> Tuple[Decimal, Decimal]:
    """Convert an amount between currencies, returning ``(converted, rate)``."""
    rate = get_exchange_rate(source_currency, target_currency)
    converted = (Decimal(str(amount)) * rate).quantize(TWO_PLACES)
    return converted, rate
