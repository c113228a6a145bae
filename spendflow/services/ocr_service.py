"""Placeholder OCR integration."""
from __future__ import annotations

from typing import Any, Dict


def extract_expense_data(filename: str) -> Dict[str, Any]:
    """Return mock receipt fields for an uploaded file."""
    return {
        "success": True,
        "file_processed": filename,
        "text": "OCR processed text would appear here",
        "data": {
            "amount": 125.50,
            "date": "2023-10-15",
            "vendor": "Office Supplies Inc.",
            "category": "OFFICE_SUPPLIES",
        },
    }
