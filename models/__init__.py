"""
Data models for FixFlow.

This module contains dataclasses for:
- Customer, Device, Job: The three stored collections
- JobWithRelations: A job joined with its customer and device
- IntakeRequest: Raw input for a new job
- JobContext, JudgmentRequest, AIJudgment: Notification policy exchange
- NotificationDecision: Whether (and what) to tell the customer
- TriageSuggestion: AI triage of an issue note

Stored entities are frozen; the store hands out new instances on change.
"""

from .entities import (
    Customer,
    Device,
    DeviceType,
    Job,
    JobStatus,
    JobWithRelations,
    Urgency,
    WORKFLOW_ORDER,
)
from .intake import IntakeRequest
from .notification import (
    AIJudgment,
    JobContext,
    JudgmentRequest,
    NotificationDecision,
    TriageSuggestion,
)

__all__ = [
    # Entities
    "Customer",
    "Device",
    "DeviceType",
    "Job",
    "JobStatus",
    "JobWithRelations",
    "Urgency",
    "WORKFLOW_ORDER",
    # Intake
    "IntakeRequest",
    # Notification
    "AIJudgment",
    "JobContext",
    "JudgmentRequest",
    "NotificationDecision",
    "TriageSuggestion",
]
