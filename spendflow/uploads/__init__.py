"""Receipt upload and OCR blueprint."""
from flask import Blueprint

uploads_bp = Blueprint("uploads", __name__)

from . import routes  # noqa: E402,F401
