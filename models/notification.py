"""
Notification and AI exchange models.

These models carry data between the job service, the notification policy
and the AI capability client. They are small frozen dataclasses so a
decision can be passed around and logged without being mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Any, List, Optional

from .entities import JobStatus, Urgency


@dataclass(frozen=True)
class JobContext:
    """What the policy needs to know about a job to word a message."""

    customer_name: str
    device_model: str
    cost: Decimal
    job_id: str
    description: str = ""


@dataclass(frozen=True)
class JudgmentRequest:
    """Input sent to the AI judge for an ambiguous status change."""

    previous_status: JobStatus
    new_status: JobStatus
    customer_name: str
    device: str
    cost: Decimal
    job_id: str
    job_details: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the payload shape the model is shown."""
        return {
            "previousStatus": self.previous_status.value,
            "newStatus": self.new_status.value,
            "customerName": self.customer_name,
            "device": self.device,
            "cost": float(self.cost),
            "jobId": self.job_id,
            "jobDetails": self.job_details,
        }


@dataclass(frozen=True)
class AIJudgment:
    """The AI judge's answer: whether to notify, and a draft if so."""

    notify: bool
    draft: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIJudgment":
        """Create from the model's JSON reply."""
        draft = data.get("draft")
        return cls(
            notify=bool(data.get("notify", False)),
            draft=draft if isinstance(draft, str) else None,
        )


@dataclass(frozen=True)
class NotificationDecision:
    """
    Outcome of the notification policy.

    message is only set when should_notify is True.
    """

    should_notify: bool
    message: Optional[str] = None

    @classmethod
    def silent(cls) -> "NotificationDecision":
        """Decision for transitions the customer never hears about."""
        return cls(should_notify=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"shouldNotify": self.should_notify, "message": self.message}


@dataclass(frozen=True)
class TriageSuggestion:
    """AI triage of a technician's issue note."""

    tags: List[str] = field(default_factory=list)
    urgency: Urgency = Urgency.MEDIUM
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tags": list(self.tags),
            "urgency": self.urgency.value,
            "summary": self.summary,
        }
