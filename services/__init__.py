"""
Services layer for FixFlow.

This module contains the business logic services:
- EntityStore: Repository for customers, devices and jobs
- status_engine: Status transitions
- NotificationPolicy: Whether and what to tell the customer
- intake: Validation and resolve-or-create for new jobs
- JobService: Use cases tying the above together

Flow:
    Intake       -> EntityStore (resolve-or-create) -> new Job ("To Do")
    Status change -> transition -> EntityStore -> NotificationPolicy -> caller
"""

from .entity_store import EntityStore, InMemoryEntityStore, JsonFileEntityStore
from .status_engine import TransitionResult, transition
from .notification_policy import NotificationPolicy
from .intake import apply_ai_suggestion, intake, validate_intake
from .job_service import JobService, StatusChangeOutcome

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "JsonFileEntityStore",
    "TransitionResult",
    "transition",
    "NotificationPolicy",
    "apply_ai_suggestion",
    "intake",
    "validate_intake",
    "JobService",
    "StatusChangeOutcome",
]
