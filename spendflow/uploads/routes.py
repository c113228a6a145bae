"""Receipt upload, download and OCR routes."""
from __future__ import annotations

import os
import uuid
from typing import Any

from flask import current_app, request, send_from_directory, url_for
from flask_login import current_user, login_required
from werkzeug.utils import secure_filename

from spendflow import db
from spendflow.errors import NotFoundError, ValidationError
from spendflow.models import Attachment, Expense
from spendflow.services import ocr_service
from spendflow.utils.helpers import json_response

from . import uploads_bp


def upload_dir() -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    if not os.path.isabs(folder):
        folder = os.path.join(current_app.instance_path, folder)
    os.makedirs(folder, exist_ok=True)
    return folder


def _uploaded_file():
    file = request.files.get("file")
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    if file.mimetype not in current_app.config["ALLOWED_UPLOAD_TYPES"]:
        raise ValidationError("Invalid file type. Only images and PDF files are allowed.")
    return file


@uploads_bp.route("/api/uploads", methods=["POST"])
@login_required
def upload_file() -> Any:
    """Store a receipt on disk and attach it to one of the caller's expenses."""
    file = _uploaded_file()

    expense_id = request.form.get("expenseId") or request.form.get("expense_id")
    if not expense_id:
        raise ValidationError("ExpenseId is required.")
    try:
        expense_id = int(expense_id)
    except ValueError:
        raise ValidationError("ExpenseId must be an integer.") from None

    expense = Expense.query.filter_by(id=expense_id, user_id=current_user.id).first()
    if expense is None:
        raise NotFoundError("Expense not found or you do not have permission.")

    original_name = secure_filename(file.filename) or "receipt"
    _, extension = os.path.splitext(original_name)
    stored_name = f"{uuid.uuid4().hex}{extension.lower()}"
    path = os.path.join(upload_dir(), stored_name)
    file.save(path)

    file_url = url_for("uploads.serve_file", filename=stored_name, _external=True)
    attachment = Attachment(
        expense_id=expense.id,
        filename=original_name,
        url=file_url,
        content_type=file.mimetype,
        size=os.path.getsize(path),
    )
    db.session.add(attachment)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        os.remove(path)
        raise

    current_app.logger.info("Stored attachment %s for expense %s", attachment.id, expense.id)
    return json_response({"attachment_id": attachment.id, "file_url": file_url}, status=201)


@uploads_bp.route("/uploads/<path:filename>", methods=["GET"])
@login_required
def serve_file(filename: str) -> Any:
    return send_from_directory(upload_dir(), filename)


@uploads_bp.route("/api/ocr", methods=["POST"])
@login_required
def process_ocr() -> Any:
    """Return extracted receipt fields (stubbed)."""
    file = _uploaded_file()
    return json_response(ocr_service.extract_expense_data(secure_filename(file.filename)))
