"""
AI capability client.

The workshop uses a language model for two narrow jobs:
    - Judging whether an ambiguous status change (e.g. -> Waiting) deserves a
      customer message, and drafting that message
    - Triage of a technician's raw issue note into tags, urgency and a title

Both are exposed as small abstract interfaces so the services never depend on
a particular provider. OpenAIClient implements both through the openai SDK.

FAILURE MODEL:
    - One request per call, no retries (max_retries=0 on the SDK client)
    - Every provider error, empty reply or non-JSON reply is raised as
      ExternalServiceError
    - Callers decide what to fall back to; this module never guesses

Usage:
    client = OpenAIClient(api_key=key, model="gpt-4o-mini", timeout_seconds=15)

    judgment = client.judge(request)
    if judgment.notify:
        send(judgment.draft)

    suggestion = client.suggest("Console won't read discs, customer needs it ASAP")
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import openai

from models.entities import Urgency
from models.notification import AIJudgment, JudgmentRequest, TriageSuggestion
from .exceptions import ExternalServiceError, ValidationError


MIN_DESCRIPTION_LENGTH = 10
MAX_TRIAGE_TAGS = 3

NOTIFICATION_SYSTEM_PROMPT = (
    "You help a device repair workshop decide whether a job status change "
    "warrants a message to the customer. If the new status is 'Waiting', the "
    "job is usually waiting on parts: write a short, friendly 'parts ordered' "
    "update. Mention an unexpected delay or extra cost if the job details "
    "suggest one. Reply with a JSON object: "
    '{"notify": true|false, "draft": "<message or empty>"}.'
)

TRIAGE_SYSTEM_PROMPT = (
    "You are a device repair expert. Analyse the technician's raw note. "
    "1. Extract 1-3 technical issue tags (e.g. 'HDMI', 'Power Supply', "
    "'Disc Drive'). 2. Determine urgency from keywords ('urgent', 'ASAP' = "
    "high). 3. Summarise the issue in 5 words for a title. Reply with a JSON "
    'object: {"tags": [...], "urgency": "low"|"medium"|"high", "summary": "..."}.'
)


class NotificationJudge(ABC):
    """Decides whether an ambiguous status change should reach the customer."""

    @abstractmethod
    def judge(self, request: JudgmentRequest) -> AIJudgment:
        """
        Judge a status change.

        Raises:
            ExternalServiceError: If the capability is unavailable or fails
        """


class TriageAssistant(ABC):
    """Turns a free-text issue note into suggested tags and urgency."""

    @abstractmethod
    def suggest(self, issue_description: str) -> TriageSuggestion:
        """
        Suggest tags, urgency and a short summary.

        Raises:
            ValidationError: If the description is too short to analyse
            ExternalServiceError: If the capability is unavailable or fails
        """


class OpenAIClient(NotificationJudge, TriageAssistant):
    """
    OpenAI-backed implementation of both AI capabilities.

    A single SDK client is created per instance and shared across calls;
    the SDK client is safe to use from multiple request threads.
    """

    SERVICE_NAME = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 15.0,
        logger: Optional[logging.Logger] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Provider API key
            model: Chat model name
            timeout_seconds: Per-request timeout
            logger: Logger instance (creates default if not provided)
            client: Pre-built SDK client (tests inject a mock here)

        Raises:
            ValueError: If api_key is empty and no client is supplied
        """
        if client is None and not api_key:
            raise ValueError("api_key is required to create an OpenAIClient")

        self._model = model
        self._logger = logger or logging.getLogger("fixflow.core.ai_client")
        self._client = client or openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model

    def judge(self, request: JudgmentRequest) -> AIJudgment:
        """Ask the model whether to notify, returning its draft if any."""
        self._logger.debug(
            f"Requesting notification judgment for job {request.job_id} "
            f"({request.previous_status.value} -> {request.new_status.value})"
        )
        data = self._complete_json(NOTIFICATION_SYSTEM_PROMPT, json.dumps(request.to_dict()))
        judgment = AIJudgment.from_dict(data)
        self._logger.info(f"AI judgment for job {request.job_id}: notify={judgment.notify}")
        return judgment

    def suggest(self, issue_description: str) -> TriageSuggestion:
        """Triage an issue note into tags, urgency and a title."""
        issue_description = (issue_description or "").strip()
        if len(issue_description) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError.for_field(
                "issueDescription", "Please provide a more detailed description."
            )

        data = self._complete_json(TRIAGE_SYSTEM_PROMPT, issue_description)
        return TriageSuggestion(
            tags=_clean_tags(data.get("tags")),
            urgency=_parse_urgency(data.get("urgency")),
            summary=str(data.get("summary") or "").strip(),
        )

    def _complete_json(self, system_prompt: str, user_content: str) -> Dict[str, Any]:
        """
        Run one chat completion and parse its JSON body.

        Raises:
            ExternalServiceError: On SDK errors, empty replies or invalid JSON
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
            )
        except openai.OpenAIError as e:
            raise ExternalServiceError(self.SERVICE_NAME, f"Model request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise ExternalServiceError(self.SERVICE_NAME, "Model returned an empty reply")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ExternalServiceError(
                self.SERVICE_NAME,
                "Model reply was not valid JSON",
                {"reply": content[:200]},
            ) from e

        if not isinstance(data, dict):
            raise ExternalServiceError(self.SERVICE_NAME, "Model reply was not a JSON object")
        return data


def _clean_tags(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    tags: List[str] = []
    for tag in raw:
        if isinstance(tag, str) and tag.strip() and tag.strip() not in tags:
            tags.append(tag.strip())
    return tags[:MAX_TRIAGE_TAGS]


def _parse_urgency(raw: Any) -> Urgency:
    try:
        return Urgency(str(raw).lower())
    except ValueError:
        return Urgency.MEDIUM
