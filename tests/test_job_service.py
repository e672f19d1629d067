"""
Unit tests for the job service and WhatsApp link building.
"""

import logging
from unittest.mock import MagicMock
from urllib.parse import unquote

import pytest

from core.ai_client import TriageAssistant
from core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from models.entities import JobStatus, Urgency
from models.notification import AIJudgment, TriageSuggestion
from modules.demo_data import load_demo_data
from modules.whatsapp import build_whatsapp_url, phone_digits
from services.entity_store import InMemoryEntityStore
from services.job_service import JobService
from services.notification_policy import NotificationPolicy


# Fixtures

@pytest.fixture
def demo_store(clock):
    """Demo fixtures; random ids so new records never collide with job_1 etc."""
    return load_demo_data(InMemoryEntityStore(clock=clock))


@pytest.fixture
def service(demo_store, mock_judge):
    return JobService(demo_store, NotificationPolicy(mock_judge))


class TestWhatsApp:

    def test_digits_only_and_encoded(self):
        url = build_whatsapp_url("+1 (123) 456-7890", "Hi John & co, ready?")

        assert url.startswith("https://wa.me/11234567890?text=")
        assert " " not in url
        assert "%26" in url
        assert unquote(url.split("text=")[1]) == "Hi John & co, ready?"

    def test_keeps_characters_browsers_leave_unescaped(self):
        url = build_whatsapp_url("555", "Good news! (ready) it's *done*")

        assert url.endswith("?text=Good%20news!%20(ready)%20it's%20*done*")

    def test_custom_base_url(self):
        assert build_whatsapp_url("555", "x", "https://chat.example/").startswith("https://chat.example/555?")

    def test_phone_without_digits_rejected(self):
        assert phone_digits("n/a") == ""
        with pytest.raises(ValidationError):
            build_whatsapp_url("n/a", "hello")


class TestChangeStatus:

    def test_ready_returns_message_and_link(self, service, demo_store):
        outcome = service.change_status("job_1", "Ready")

        assert outcome.changed is True
        assert outcome.previous_status == JobStatus.TODO
        assert outcome.job.job.status == JobStatus.READY
        assert outcome.decision.should_notify is True
        assert "John Doe" in outcome.decision.message
        assert "250.00" in outcome.decision.message
        assert outcome.whatsapp_url.startswith("https://wa.me/1234567890?text=")
        assert demo_store.get_job_by_id("job_1").status == JobStatus.READY

    def test_same_status_skips_policy(self, service, mock_judge):
        outcome = service.change_status("job_3", JobStatus.WAITING)

        assert outcome.changed is False
        assert outcome.decision.should_notify is False
        assert outcome.whatsapp_url is None
        mock_judge.judge.assert_not_called()

    def test_waiting_uses_ai_draft(self, service, mock_judge):
        mock_judge.judge.return_value = AIJudgment(notify=True, draft="Parts ordered for your MacBook.")

        outcome = service.change_status("job_2", "Waiting")

        assert outcome.decision.message == "Parts ordered for your MacBook."
        assert "0987654321" in outcome.whatsapp_url
        request = mock_judge.judge.call_args[0][0]
        assert request.customer_name == "Jane Smith"
        assert request.job_id == "job_2"

    def test_waiting_ai_failure_still_saves_status(self, service, mock_judge, demo_store):
        mock_judge.judge.side_effect = ExternalServiceError("openai", "timeout")

        outcome = service.change_status("job_2", "Waiting")

        assert outcome.changed is True
        assert outcome.decision.should_notify is False
        assert outcome.whatsapp_url is None
        assert demo_store.get_job_by_id("job_2").status == JobStatus.WAITING

    def test_unknown_job_raises_before_ai(self, service, mock_judge):
        with pytest.raises(NotFoundError):
            service.change_status("job_404", "Waiting")
        mock_judge.judge.assert_not_called()

    def test_unknown_job_registers_no_job_logger(self, service):
        for i in range(3):
            with pytest.raises(NotFoundError):
                service.change_status(f"missing_{i}", "Done")

        registered = logging.Logger.manager.loggerDict
        assert not any(name.startswith("fixflow.job.missing_") for name in registered)

    def test_unusable_phone_keeps_decision(self, store, mock_judge):
        customer = store.upsert_customer({"name": "Walk-in", "phone": "none"})
        device = store.upsert_device({"serialNumber": "X1", "model": "Switch"}, customer.id)
        job = store.create_job(customer.id, device.id, "Joy-con drift on left", [], Urgency.LOW)

        outcome = JobService(store, NotificationPolicy(mock_judge)).change_status(job.id, "Done")

        assert outcome.decision.should_notify is True
        assert outcome.whatsapp_url is None


class TestQueries:

    def test_create_job_returns_relations(self, service, intake_request):
        created = service.create_job(intake_request)

        # Phone and serial match demo records cus_1 / dev_1
        assert created.customer.id == "cus_1"
        assert created.device.id == "dev_1"
        assert created.job.status == JobStatus.TODO

    def test_board_filter(self, service):
        ready = service.list_board("Ready")
        assert [r.job.id for r in ready] == ["job_5", "job_4"]
        assert len(service.list_board()) == 5

    def test_board_rejects_unknown_status(self, service):
        with pytest.raises(ValidationError):
            service.list_board("Lost")

    def test_device_history(self, service):
        history = service.device_history("SN87654321")

        assert history.device.id == "dev_2"
        assert history.owner.name == "Jane Smith"
        assert [j.id for j in history.jobs] == ["job_5", "job_2"]

    def test_unknown_device(self, service):
        with pytest.raises(NotFoundError):
            service.device_history("SN00000000")

    def test_get_unknown_job(self, service):
        with pytest.raises(NotFoundError):
            service.get_job("job_404")


class TestTriage:

    def test_not_configured(self, service):
        with pytest.raises(ExternalServiceError):
            service.triage("Console will not read any discs")

    def test_delegates_to_assistant(self, demo_store, mock_judge):
        assistant = MagicMock(spec=TriageAssistant)
        assistant.suggest.return_value = TriageSuggestion(tags=["Disc Drive"], urgency=Urgency.LOW)
        service = JobService(demo_store, NotificationPolicy(mock_judge), triage=assistant)

        suggestion = service.triage("Console will not read any discs")

        assert suggestion.tags == ["Disc Drive"]
        assistant.suggest.assert_called_once_with("Console will not read any discs")
