"""
Job routes (JSON API).

Handles:
- GET  /api/jobs               - Board: all jobs, optional ?status= filter
- POST /api/jobs               - Intake: create a job
- GET  /api/jobs/<id>          - One job with customer and device
- POST /api/jobs/<id>/status   - Change status, get notification decision
- POST /api/triage             - AI tags/urgency/summary for an issue note

Service errors (FixFlowError) are turned into JSON responses by the
app-level error handler.
"""

import html
from typing import Any, Dict, Optional

import bleach
from flask import (
    Blueprint,
    current_app,
    jsonify,
    request,
)

from core.exceptions import ValidationError
from models.intake import IntakeRequest
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

jobs_bp = Blueprint("jobs", __name__)

# Constants
MAX_FIELD_LENGTH = 200
TEXT_FIELDS = (
    "customerName",
    "customerPhone",
    "customerEmail",
    "deviceSerial",
    "deviceModel",
    "deviceType",
    "urgency",
)


def _sanitize_text(text: Any, max_length: Optional[int] = None) -> Any:
    """
    Strip markup from user input; non-strings pass through for validation.

    bleach escapes & < >, so the result is unescaped to keep the text as typed.
    """
    if not isinstance(text, str):
        return text
    text = html.unescape(bleach.clean(text.strip(), tags=[], strip=True))
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def _request_data() -> Dict[str, Any]:
    """JSON body, or form fields for plain form posts."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data
    data: Dict[str, Any] = request.form.to_dict()
    if "tags" in request.form:
        data["tags"] = request.form.getlist("tags")
    return data


def _job_service():
    return current_app.config["JOB_SERVICE"]


@jobs_bp.route("/api/jobs", methods=["GET"])
def list_jobs():
    """Jobs for the board, most recently updated first."""
    status = request.args.get("status") or None
    board = _job_service().list_board(status)
    return jsonify({"jobs": [job.to_dict() for job in board]})


@jobs_bp.route("/api/jobs", methods=["POST"])
def create_job():
    """
    Create a job from intake input.

    Returns 201 with the new job, or 400 with field_errors.
    """
    data = _request_data()

    cleaned = dict(data)
    for key in TEXT_FIELDS:
        if key in cleaned:
            cleaned[key] = _sanitize_text(cleaned[key], MAX_FIELD_LENGTH)
    cleaned["issueDescription"] = _sanitize_text(
        data.get("issueDescription", ""),
        max_length=current_app.config.get("MAX_DESCRIPTION_LENGTH"),
    )
    tags = data.get("tags", [])
    if isinstance(tags, list):
        cleaned["tags"] = [_sanitize_text(t, MAX_FIELD_LENGTH) for t in tags]

    created = _job_service().create_job(IntakeRequest.from_dict(cleaned))
    logger.info(f"Job {created.job.id} created via API")
    return jsonify(created.to_dict()), 201


@jobs_bp.route("/api/jobs/<job_id>", methods=["GET"])
def get_job(job_id: str):
    """One job with customer and device."""
    return jsonify(_job_service().get_job(job_id).to_dict())


@jobs_bp.route("/api/jobs/<job_id>/status", methods=["POST"])
def update_status(job_id: str):
    """
    Change a job's status.

    Body: {"status": "Ready"}
    Returns the updated job plus shouldNotify / message / whatsAppUrl.
    """
    data = _request_data()
    new_status = data.get("status")
    if not new_status:
        raise ValidationError.for_field("status", "Status is required")

    outcome = _job_service().change_status(job_id, new_status)
    return jsonify(outcome.to_dict())


@jobs_bp.route("/api/triage", methods=["POST"])
def triage():
    """
    AI-assisted job entry.

    Body: {"issueDescription": "..."}
    Returns {"tags": [...], "urgency": "...", "summary": "..."}.
    """
    data = _request_data()
    description = _sanitize_text(
        data.get("issueDescription", ""),
        max_length=current_app.config.get("MAX_DESCRIPTION_LENGTH"),
    )
    if not isinstance(description, str):
        raise ValidationError.for_field("issueDescription", "Description must be text")

    suggestion = _job_service().triage(description)
    return jsonify(suggestion.to_dict())
