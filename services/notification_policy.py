"""
Customer notification policy.

Decides whether a job status change should be passed on to the customer and
words the message. Deterministic rules come first; the AI judge is only
consulted for the one status the rules cannot settle.

Decision table:
    same status          -> silent
    Ready / Done         -> notify, fixed template (no AI call)
    To Do                -> silent (internal movement, no AI call)
    anything else        -> ask the AI judge
        (i.e. Waiting)      notify only if it says so AND drafts a message

The Waiting rule is meant to always produce a "parts ordered" message; the AI
is prompted accordingly. If it declines anyway, or fails, the customer is
NOT notified. That gap is known and kept as-is until the workshop decides
otherwise.

Failures of the AI judge never leave this module: they are logged and the
decision degrades to silent.
"""

from __future__ import annotations

from typing import Optional

from core.ai_client import NotificationJudge
from models.entities import JobStatus
from models.notification import JobContext, JudgmentRequest, NotificationDecision
from logging_config import get_logger


logger = get_logger(__name__)


READY_TEMPLATE = (
    "Hi {customer_name}, good news! Your {device_model} is repaired and ready "
    "for pickup. Total cost: {currency}{cost:.2f}. Job reference: {job_id}."
)

DONE_TEMPLATE = (
    "Hi {customer_name}, your {device_model} repair is complete. "
    "Total cost: {currency}{cost:.2f}. Job reference: {job_id}. "
    "Thank you for choosing us!"
)

COMPLETION_TEMPLATES = {
    JobStatus.READY: READY_TEMPLATE,
    JobStatus.DONE: DONE_TEMPLATE,
}


def render_completion_message(
    status: JobStatus,
    context: JobContext,
    currency_symbol: str = "$",
) -> str:
    """
    Fill in the fixed message for a Ready or Done job.

    Raises:
        KeyError: If status has no fixed template
    """
    return COMPLETION_TEMPLATES[status].format(
        customer_name=context.customer_name,
        device_model=context.device_model,
        currency=currency_symbol,
        cost=context.cost,
        job_id=context.job_id,
    )


class NotificationPolicy:
    """
    Rule-first, AI-second notification decisions.

    Attributes:
        judge: AI judge for ambiguous transitions (None = AI unavailable)
    """

    def __init__(
        self,
        judge: Optional[NotificationJudge] = None,
        currency_symbol: str = "$",
    ):
        self.judge = judge
        self._currency_symbol = currency_symbol

    def decide(
        self,
        previous_status: JobStatus,
        new_status: JobStatus,
        context: JobContext,
    ) -> NotificationDecision:
        """
        Decide whether to notify the customer about a status change.

        Args:
            previous_status: Status before the change
            new_status: Status after the change
            context: Customer, device, cost and job id for the message

        Returns:
            NotificationDecision (never raises for AI failures)
        """
        if new_status == previous_status:
            return NotificationDecision.silent()

        if new_status in COMPLETION_TEMPLATES:
            message = render_completion_message(new_status, context, self._currency_symbol)
            logger.info(f"Job {context.job_id} is {new_status.value}: notifying customer")
            return NotificationDecision(should_notify=True, message=message)

        if new_status == JobStatus.TODO:
            logger.debug(f"Job {context.job_id} moved back to {new_status.value}: internal only")
            return NotificationDecision.silent()

        return self._ask_judge(previous_status, new_status, context)

    def _ask_judge(
        self,
        previous_status: JobStatus,
        new_status: JobStatus,
        context: JobContext,
    ) -> NotificationDecision:
        if self.judge is None:
            logger.warning(
                f"No AI judge configured; not notifying for job {context.job_id} "
                f"({previous_status.value} -> {new_status.value})"
            )
            return NotificationDecision.silent()

        request = JudgmentRequest(
            previous_status=previous_status,
            new_status=new_status,
            customer_name=context.customer_name,
            device=context.device_model,
            cost=context.cost,
            job_id=context.job_id,
            job_details=context.description,
        )

        try:
            judgment = self.judge.judge(request)
        except Exception as e:
            logger.error(f"AI judgment failed for job {context.job_id}: {e}", exc_info=True)
            return NotificationDecision.silent()

        draft = (judgment.draft or "").strip()
        if judgment.notify and draft:
            return NotificationDecision(should_notify=True, message=draft)

        if new_status == JobStatus.WAITING:
            logger.warning(
                f"AI declined to notify for job {context.job_id} moving to "
                f"{new_status.value}; customer will not be told"
            )
        return NotificationDecision.silent()
