"""
HTTP tests for the JSON API using Flask's test client.
"""

from unittest.mock import MagicMock

import pytest

from app import create_app
from config import TestingConfig
from core.ai_client import TriageAssistant
from core.exceptions import ExternalServiceError
from models.entities import Urgency
from models.notification import AIJudgment, TriageSuggestion
from modules.demo_data import load_demo_data
from services.entity_store import InMemoryEntityStore


# Fixtures

@pytest.fixture
def demo_store():
    return load_demo_data(InMemoryEntityStore())


@pytest.fixture
def triage_assistant():
    assistant = MagicMock(spec=TriageAssistant)
    assistant.suggest.return_value = TriageSuggestion(
        tags=["Disc Drive"], urgency=Urgency.HIGH, summary="Console disc drive failure"
    )
    return assistant


@pytest.fixture
def app(demo_store, mock_judge, triage_assistant):
    return create_app(TestingConfig, store=demo_store, judge=mock_judge, triage=triage_assistant)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def intake_payload():
    return {
        "customerName": "Ana Lima",
        "customerPhone": "555-010-2030",
        "customerEmail": "ana@example.com",
        "deviceSerial": "SNPS5-0001",
        "deviceModel": "PlayStation 5",
        "deviceType": "Other",
        "issueDescription": "HDMI port is loose and the picture flickers.",
        "tags": ["hdmi"],
        "urgency": "medium",
    }


class TestBasics:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}

    def test_index_redirects_to_board(self, client):
        response = client.get("/")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/api/jobs")

    def test_unknown_route_is_json_404(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Not Found"


class TestJobs:

    def test_board(self, client):
        data = client.get("/api/jobs").get_json()
        assert len(data["jobs"]) == 5
        assert data["jobs"][0]["customer"]["name"]

    def test_board_status_filter(self, client):
        data = client.get("/api/jobs?status=Waiting").get_json()
        assert [j["id"] for j in data["jobs"]] == ["job_3"]

    def test_board_bad_status(self, client):
        response = client.get("/api/jobs?status=Lost")
        assert response.status_code == 400
        assert "status" in response.get_json()["field_errors"]

    def test_get_job(self, client):
        data = client.get("/api/jobs/job_1").get_json()

        assert data["status"] == "To Do"
        assert data["cost"] == 250.0
        assert data["device"]["serialNumber"] == "SN12345678"

    def test_get_missing_job(self, client):
        response = client.get("/api/jobs/job_404")
        assert response.status_code == 404
        assert response.get_json()["error"] == "NotFoundError"

    def test_create_job(self, client, intake_payload, demo_store):
        response = client.post("/api/jobs", json=intake_payload)

        assert response.status_code == 201
        data = response.get_json()
        assert data["status"] == "To Do"
        assert data["cost"] == 0.0
        assert data["createdAt"] == data["updatedAt"]
        assert data["customer"]["phone"] == "555-010-2030"
        assert demo_store.get_job_by_id(data["id"]) is not None

    def test_create_job_strips_markup(self, client, intake_payload):
        intake_payload["customerName"] = "<b>Ana</b> Lima"

        data = client.post("/api/jobs", json=intake_payload).get_json()
        assert data["customer"]["name"] == "Ana Lima"

    def test_create_job_keeps_ampersands_and_angle_brackets(self, client, intake_payload, demo_store):
        intake_payload["customerName"] = "Smith & Sons"
        intake_payload["deviceModel"] = "Pixel <7>"
        intake_payload["issueDescription"] = "Fan & HDD both rattle when x < 5 cm"
        intake_payload["tags"] = ["fan & hdd"]

        data = client.post("/api/jobs", json=intake_payload).get_json()

        assert data["customer"]["name"] == "Smith & Sons"
        assert data["device"]["model"] == "Pixel <7>"
        assert data["description"] == "Fan & HDD both rattle when x < 5 cm"
        assert data["tags"] == ["fan & hdd"]
        assert demo_store.find_customer_by_phone("555-010-2030").name == "Smith & Sons"

    def test_short_description_with_ampersand_rejected(self, client, intake_payload):
        intake_payload["issueDescription"] = "fan & hdd"

        response = client.post("/api/jobs", json=intake_payload)

        assert response.status_code == 400
        assert set(response.get_json()["field_errors"]) == {"issueDescription"}

    def test_ready_message_uses_plain_text(self, client, intake_payload):
        intake_payload["customerName"] = "Smith & Sons"
        intake_payload["deviceModel"] = "Pixel <7>"
        job_id = client.post("/api/jobs", json=intake_payload).get_json()["id"]

        data = client.post(f"/api/jobs/{job_id}/status", json={"status": "Ready"}).get_json()

        assert data["message"].startswith("Hi Smith & Sons, good news! Your Pixel <7> is repaired")
        assert "&amp;" not in data["message"]

    def test_create_job_from_form(self, client, intake_payload):
        form = dict(intake_payload)
        form["tags"] = ["hdmi", "flicker"]

        response = client.post("/api/jobs", data=form)

        assert response.status_code == 201
        assert response.get_json()["tags"] == ["hdmi", "flicker"]

    def test_create_job_validation_errors(self, client, intake_payload):
        intake_payload["issueDescription"] = "short"
        intake_payload["urgency"] = "asap"

        response = client.post("/api/jobs", json=intake_payload)

        assert response.status_code == 400
        errors = response.get_json()["field_errors"]
        assert set(errors) == {"issueDescription", "urgency"}

    def test_non_object_body_rejected(self, client):
        response = client.post("/api/jobs", json=["not", "an", "object"])
        assert response.status_code == 400


class TestStatusChange:

    def test_done_returns_notification(self, client):
        response = client.post("/api/jobs/job_4/status", json={"status": "Done"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["changed"] is True
        assert data["previousStatus"] == "Ready"
        assert data["job"]["status"] == "Done"
        assert data["shouldNotify"] is True
        assert "Galaxy S22" in data["message"]
        assert "95.00" in data["message"]
        assert data["whatsAppUrl"].startswith("https://wa.me/1234567890?text=")

    def test_waiting_declined_by_ai(self, client, mock_judge):
        data = client.post("/api/jobs/job_1/status", json={"status": "Waiting"}).get_json()

        assert data["changed"] is True
        assert data["shouldNotify"] is False
        assert data["whatsAppUrl"] is None
        mock_judge.judge.assert_called_once()

    def test_waiting_with_ai_draft(self, client, mock_judge):
        mock_judge.judge.return_value = AIJudgment(notify=True, draft="Parts ordered.")

        data = client.post("/api/jobs/job_1/status", json={"status": "Waiting"}).get_json()

        assert data["shouldNotify"] is True
        assert data["message"] == "Parts ordered."

    def test_missing_status(self, client):
        response = client.post("/api/jobs/job_1/status", json={})
        assert response.status_code == 400

    def test_unknown_job(self, client):
        response = client.post("/api/jobs/job_404/status", json={"status": "Done"})
        assert response.status_code == 404


class TestTriageAndDevices:

    def test_triage(self, client, triage_assistant):
        response = client.post("/api/triage", json={"issueDescription": "PS5 will not read discs, ASAP"})

        assert response.status_code == 200
        assert response.get_json() == {
            "tags": ["Disc Drive"],
            "urgency": "high",
            "summary": "Console disc drive failure",
        }
        triage_assistant.suggest.assert_called_once_with("PS5 will not read discs, ASAP")

    def test_triage_failure_is_502(self, client, triage_assistant):
        triage_assistant.suggest.side_effect = ExternalServiceError("openai", "timed out")

        response = client.post("/api/triage", json={"issueDescription": "PS5 will not read discs"})

        assert response.status_code == 502
        assert response.get_json()["error"] == "ExternalServiceError"

    def test_device_lookup(self, client):
        data = client.get("/api/devices/SN12345678").get_json()

        assert data["device"]["model"] == "iPhone 13"
        assert data["owner"]["id"] == "cus_1"
        assert [j["id"] for j in data["jobs"]] == ["job_1"]

    def test_device_lookup_missing(self, client):
        assert client.get("/api/devices/SN0").status_code == 404
