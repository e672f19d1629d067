"""
Job service: the workshop's use cases on top of the entity store.

Status change flow:
    1. Resolve the job (NotFoundError before anything else happens)
    2. Transition engine validates and persists the new status
    3. If the status really changed, the notification policy decides
    4. If the customer should be told, build a WhatsApp link for the technician

Nothing is sent from here. The caller gets the decision, the message and
the link, and the technician chooses whether to open it.

Usage:
    # At app startup
    job_service = JobService(store, NotificationPolicy(judge), triage=ai_client)

    # New job from the intake form
    created = job_service.create_job(IntakeRequest.from_dict(form))

    # Status change from the board
    outcome = job_service.change_status("job_1", "Ready")
    if outcome.decision.should_notify:
        show_link(outcome.whatsapp_url)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from core.ai_client import TriageAssistant
from core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from models.entities import Customer, Device, Job, JobStatus, JobWithRelations
from models.intake import IntakeRequest
from models.notification import JobContext, NotificationDecision, TriageSuggestion
from modules.whatsapp import DEFAULT_BASE_URL, build_whatsapp_url
from logging_config import get_logger, get_job_logger, job_context
from .entity_store import EntityStore
from .intake import intake
from .notification_policy import NotificationPolicy
from .status_engine import transition


logger = get_logger(__name__)


@dataclass(frozen=True)
class StatusChangeOutcome:
    """Everything the board needs after a status change."""

    job: JobWithRelations
    previous_status: JobStatus
    changed: bool
    decision: NotificationDecision
    whatsapp_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job": self.job.to_dict(),
            "previousStatus": self.previous_status.value,
            "changed": self.changed,
            "shouldNotify": self.decision.should_notify,
            "message": self.decision.message,
            "whatsAppUrl": self.whatsapp_url,
        }


@dataclass(frozen=True)
class DeviceHistory:
    """A device, its recorded owner, and every job done on it."""

    device: Device
    owner: Optional[Customer]
    jobs: List[Job]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device": self.device.to_dict(),
            "owner": self.owner.to_dict() if self.owner else None,
            "jobs": [job.to_dict() for job in self.jobs],
        }


class JobService:
    """
    Use cases for repair jobs.

    Attributes:
        store: Entity store (any EntityStore implementation)
        policy: Notification policy
    """

    def __init__(
        self,
        store: EntityStore,
        policy: NotificationPolicy,
        triage: Optional[TriageAssistant] = None,
        whatsapp_base_url: str = DEFAULT_BASE_URL,
    ):
        self.store = store
        self.policy = policy
        self._triage = triage
        self._whatsapp_base_url = whatsapp_base_url
        logger.info("JobService initialized")

    # -------------------------------------------------------------------------
    # Intake
    # -------------------------------------------------------------------------

    def create_job(self, request: IntakeRequest) -> JobWithRelations:
        """
        Run intake and return the new job with its relations.

        Raises:
            ValidationError: If the intake input is malformed
        """
        job = intake(self.store, request)
        return self._require_relations(job.id)

    def triage(self, issue_description: str) -> TriageSuggestion:
        """
        Ask the AI for tags, urgency and a title for an issue note.

        Raises:
            ValidationError: If the description is too short
            ExternalServiceError: If no assistant is configured or it fails
        """
        if self._triage is None:
            raise ExternalServiceError("triage", "AI assistance is not configured")
        return self._triage.suggest(issue_description)

    # -------------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------------

    def change_status(self, job_id: str, new_status: Union[JobStatus, str]) -> StatusChangeOutcome:
        """
        Change a job's status and decide on a customer notification.

        Args:
            job_id: Job to update
            new_status: Target status (enum or display value)

        Returns:
            StatusChangeOutcome

        Raises:
            NotFoundError: If job_id does not resolve
            ValidationError: If new_status is not a known status
        """
        with job_context(job_id):
            job = self.store.get_job_by_id(job_id)
            if job is None:
                raise NotFoundError("Job", job_id)

            # Only stored ids get a named logger
            job_logger = get_job_logger(job.id)

            result = transition(self.store, job, new_status)
            related = self._require_relations(job_id)

            if not result.changed:
                job_logger.info(f"Status unchanged ({result.previous_status.value})")
                return StatusChangeOutcome(
                    job=related,
                    previous_status=result.previous_status,
                    changed=False,
                    decision=NotificationDecision.silent(),
                )

            job_logger.info(
                f"Status {result.previous_status.value} -> {result.job.status.value}"
            )

            context = JobContext(
                customer_name=related.customer.name,
                device_model=related.device.model,
                cost=related.job.cost,
                job_id=related.job.id,
                description=related.job.description,
            )
            decision = self.policy.decide(result.previous_status, result.job.status, context)

            whatsapp_url = None
            if decision.should_notify and decision.message:
                try:
                    whatsapp_url = build_whatsapp_url(
                        related.customer.phone, decision.message, self._whatsapp_base_url
                    )
                    job_logger.info("Customer notification drafted")
                except ValidationError as e:
                    # The status change is already stored; only the link is lost
                    job_logger.warning(f"Cannot build WhatsApp link: {e.message}")

            return StatusChangeOutcome(
                job=related,
                previous_status=result.previous_status,
                changed=True,
                decision=decision,
                whatsapp_url=whatsapp_url,
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_job(self, job_id: str) -> JobWithRelations:
        """
        Raises:
            NotFoundError: If the job (or one of its relations) is missing
        """
        return self._require_relations(job_id)

    def list_board(self, status: Optional[Union[JobStatus, str]] = None) -> List[JobWithRelations]:
        """Jobs for the board, most recently updated first."""
        status_filter = JobStatus.parse(status) if status else None
        board = []
        for job in self.store.list_jobs(status_filter):
            related = self.store.get_job_with_relations(job.id)
            if related is not None:
                board.append(related)
        return board

    def device_history(self, serial: str) -> DeviceHistory:
        """
        Look up a scanned serial number.

        Raises:
            NotFoundError: If no device has that serial
        """
        device = self.store.find_device_by_serial(serial)
        if device is None:
            raise NotFoundError("Device", serial)
        return DeviceHistory(
            device=device,
            owner=self.store.get_customer_by_id(device.customer_id),
            jobs=self.store.list_jobs_for_device(device.id),
        )

    def _require_relations(self, job_id: str) -> JobWithRelations:
        related = self.store.get_job_with_relations(job_id)
        if related is None:
            raise NotFoundError("Job", job_id)
        return related
