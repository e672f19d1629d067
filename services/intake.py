"""
Job intake.

Turns raw intake input into a stored job:
    1. Validate every field, collecting all problems into one ValidationError
    2. Resolve or create the customer by phone
    3. Resolve or create the device by serial (owner set only on creation)
    4. Create the job in "To Do" with cost 0

Also home to apply_ai_suggestion(), the pure merge of an AI triage result into
an intake form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.exceptions import ValidationError
from models.entities import DeviceType, Job, Urgency
from models.intake import IntakeRequest
from models.notification import TriageSuggestion
from logging_config import get_logger
from .entity_store import EntityStore


logger = get_logger(__name__)

MIN_DESCRIPTION_LENGTH = 10
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class ValidIntake:
    """Intake input that passed validation, normalized."""

    customer_name: str
    customer_phone: str
    customer_email: Optional[str]
    device_serial: str
    device_model: str
    device_type: DeviceType
    issue_description: str
    tags: List[str]
    urgency: Urgency


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _normalize_tags(raw: Any, errors: Dict[str, List[str]]) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        errors.setdefault("tags", []).append("Tags must be a list of strings")
        return []

    tags: List[str] = []
    for tag in raw:
        if not isinstance(tag, str):
            errors.setdefault("tags", []).append("Tags must be a list of strings")
            return []
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def validate_intake(request: IntakeRequest) -> ValidIntake:
    """
    Validate raw intake input.

    Raises:
        ValidationError: With field_errors for every failing field
    """
    errors: Dict[str, List[str]] = {}

    def fail(field_name: str, message: str) -> None:
        errors.setdefault(field_name, []).append(message)

    name = _text(request.customer_name)
    if not name:
        fail("customerName", "Customer name is required")

    phone = _text(request.customer_phone)
    if not phone:
        fail("customerPhone", "Customer phone is required")

    email = _text(request.customer_email) or None
    if email is not None and not EMAIL_PATTERN.match(email):
        fail("customerEmail", "Invalid email address")

    serial = _text(request.device_serial)
    if not serial:
        fail("deviceSerial", "Device serial is required")

    model = _text(request.device_model)
    if not model:
        fail("deviceModel", "Device model is required")

    device_type = DeviceType.OTHER
    if request.device_type:
        try:
            device_type = DeviceType(request.device_type)
        except ValueError:
            allowed = ", ".join(t.value for t in DeviceType)
            fail("deviceType", f"Device type must be one of: {allowed}")

    description = _text(request.issue_description)
    if len(description) < MIN_DESCRIPTION_LENGTH:
        fail("issueDescription", "Please provide a detailed description")

    urgency = None
    try:
        urgency = Urgency(request.urgency)
    except ValueError:
        fail("urgency", "Urgency must be one of: low, medium, high")

    tags = _normalize_tags(request.tags, errors)

    if errors:
        logger.info(f"Intake rejected: {sorted(errors)}")
        raise ValidationError("Intake validation failed", errors)

    return ValidIntake(
        customer_name=name,
        customer_phone=phone,
        customer_email=email,
        device_serial=serial,
        device_model=model,
        device_type=device_type,
        issue_description=description,
        tags=tags,
        urgency=urgency,
    )


def intake(store: EntityStore, request: IntakeRequest) -> Job:
    """
    Validate input and create a new job.

    Args:
        store: Entity store
        request: Raw intake input

    Returns:
        The new job, status "To Do", cost 0

    Raises:
        ValidationError: If the input is malformed (nothing is written)
    """
    valid = validate_intake(request)

    customer = store.upsert_customer({
        "name": valid.customer_name,
        "phone": valid.customer_phone,
        "email": valid.customer_email,
    })
    device = store.upsert_device(
        {
            "serialNumber": valid.device_serial,
            "model": valid.device_model,
            "type": valid.device_type,
        },
        customer.id,
    )
    job = store.create_job(
        customer_id=customer.id,
        device_id=device.id,
        description=valid.issue_description,
        tags=valid.tags,
        urgency=valid.urgency,
    )

    logger.info(f"Intake complete: job {job.id} (customer {customer.id}, device {device.id})")
    return job


def apply_ai_suggestion(form: Dict[str, Any], suggestion: TriageSuggestion) -> Dict[str, Any]:
    """
    Merge an AI triage result into an intake form.

    Pure: the input form is not modified.
    - tags: suggested tags appended after the form's own, no duplicates
    - urgency: replaced by the suggestion
    - summary: stored under "summary"

    Args:
        form: Intake form dict (camelCase keys)
        suggestion: AI triage result

    Returns:
        New form dict
    """
    merged = dict(form)

    existing = form.get("tags") or []
    if isinstance(existing, str):
        existing = [existing]
    tags = list(existing)
    for tag in suggestion.tags:
        if tag not in tags:
            tags.append(tag)

    merged["tags"] = tags
    merged["urgency"] = suggestion.urgency.value
    if suggestion.summary:
        merged["summary"] = suggestion.summary
    return merged
