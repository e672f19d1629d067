"""
Intake request model.

An IntakeRequest is the raw, unvalidated input for a new job as it arrives
from the intake form or the JSON API. Validation lives in services.intake.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional


@dataclass
class IntakeRequest:
    """
    Raw customer/device/issue input for a new job.

    Field values are kept exactly as submitted; nothing here is trusted
    until services.intake.validate_intake() has run.
    """

    customer_name: str = ""
    customer_phone: str = ""
    device_serial: str = ""
    device_model: str = ""
    issue_description: str = ""
    urgency: str = ""
    customer_email: Optional[str] = None
    device_type: Optional[str] = None
    tags: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntakeRequest":
        """
        Create from form/JSON data.

        Accepts the camelCase keys used by the intake form.
        """
        tags = data.get("tags", [])
        if isinstance(tags, str):
            tags = [tags]
        return cls(
            customer_name=data.get("customerName") or "",
            customer_phone=data.get("customerPhone") or "",
            customer_email=data.get("customerEmail") or None,
            device_serial=data.get("deviceSerial") or "",
            device_model=data.get("deviceModel") or "",
            device_type=data.get("deviceType") or None,
            issue_description=data.get("issueDescription") or "",
            tags=list(tags) if isinstance(tags, (list, tuple)) else tags,
            urgency=data.get("urgency") or "",
        )
