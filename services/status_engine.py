"""
Job status transitions.

Any status can be reached from any other - the workshop reopens jobs,
skips Waiting when parts are in stock, and so on. The engine therefore never
rejects a transition. Its job is to spot no-op requests (same status) so that
nothing is written and nobody is notified, and to persist real changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from models.entities import Job, JobStatus
from logging_config import get_logger
from .entity_store import EntityStore


logger = get_logger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a status change request."""

    job: Job
    """The job after the request (unchanged if changed is False)."""

    previous_status: JobStatus
    """Status before the request."""

    changed: bool
    """False when the requested status equals the current one."""


def is_forward(previous: JobStatus, new: JobStatus) -> bool:
    """True if the move follows the To Do -> Waiting -> Ready -> Done order."""
    return new.position > previous.position


def transition(
    store: EntityStore,
    job: Job,
    requested_status: Union[JobStatus, str],
) -> TransitionResult:
    """
    Apply a status change to a job.

    Args:
        store: Store to persist the change in
        job: Current job snapshot
        requested_status: Target status (enum or display value)

    Returns:
        TransitionResult with the persisted job

    Raises:
        ValidationError: If requested_status is not a known status
        NotFoundError: If the job disappeared from the store
    """
    new_status = JobStatus.parse(requested_status)
    previous_status = job.status

    if new_status == previous_status:
        logger.debug(f"Job {job.id} already {new_status.value}, nothing to do")
        return TransitionResult(job=job, previous_status=previous_status, changed=False)

    if not is_forward(previous_status, new_status):
        logger.info(f"Job {job.id} moving backwards: {previous_status.value} -> {new_status.value}")

    updated = store.update_job_status(job.id, new_status)
    return TransitionResult(job=updated, previous_status=previous_status, changed=True)
