"""
Unit tests for entity serialization and store-boundary validation.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from models.entities import Customer, Device, DeviceType, Job, JobStatus, Urgency, parse_cost
from models.intake import IntakeRequest
from modules.demo_data import DEMO_DOCUMENTS


# Fixtures

@pytest.fixture
def job_document():
    return dict(DEMO_DOCUMENTS["jobs"][2])


class TestJobDocuments:

    def test_from_dict(self, job_document):
        job = Job.from_dict(job_document)

        assert job.status == JobStatus.WAITING
        assert job.urgency == Urgency.MEDIUM
        assert job.cost == Decimal("150")
        assert job.created_at == datetime(2023, 10, 25, 14, 0, tzinfo=timezone.utc)
        assert job.updated_at > job.created_at

    def test_to_dict_uses_document_keys(self, job_document):
        data = Job.from_dict(job_document).to_dict()

        assert data["customerId"] == "cus_3"
        assert data["status"] == "Waiting"
        assert data["createdAt"] == "2023-10-25T14:00:00+00:00"

    def test_stored_form_keeps_exact_cost(self, job_document):
        job_document["cost"] = "0.10"
        job = Job.from_dict(job_document)

        assert job.to_document()["cost"] == "0.10"
        assert job.to_dict()["cost"] == 0.1
        assert Job.from_dict(job.to_document()).cost == Decimal("0.10")

    @pytest.mark.parametrize("key,value", [
        ("status", "Lost"),
        ("urgency", "critical"),
        ("cost", -1),
        ("cost", "abc"),
        ("tags", "battery"),
        ("updatedAt", "2023-10-25T13:00:00Z"),
        ("createdAt", "yesterday"),
    ])
    def test_invalid_documents_rejected(self, job_document, key, value):
        job_document[key] = value
        with pytest.raises(ValidationError):
            Job.from_dict(job_document)

    def test_missing_key_rejected(self, job_document):
        del job_document["deviceId"]
        with pytest.raises(ValidationError) as exc_info:
            Job.from_dict(job_document)
        assert "deviceId" in exc_info.value.field_errors

    def test_naive_timestamps_treated_as_utc(self, job_document):
        job_document["createdAt"] = "2023-10-25T14:00:00"
        job_document["updatedAt"] = "2023-10-25T14:00:00"
        assert Job.from_dict(job_document).created_at.tzinfo == timezone.utc


class TestOtherDocuments:

    def test_customer_email_optional(self):
        customer = Customer.from_dict({"id": "cus_9", "name": "Walk-in", "phone": "555", "email": ""})
        assert customer.email is None

    def test_device_round_trip(self):
        document = DEMO_DOCUMENTS["devices"][1]
        device = Device.from_dict(document)

        assert device.type == DeviceType.LAPTOP
        assert device.to_dict() == document

    def test_status_parse(self):
        assert JobStatus.parse("Done") is JobStatus.DONE
        assert JobStatus.parse(JobStatus.TODO) is JobStatus.TODO
        with pytest.raises(ValidationError):
            JobStatus.parse("done")

    def test_parse_cost(self):
        assert parse_cost("12.50") == Decimal("12.50")
        with pytest.raises(ValidationError):
            parse_cost(True)
        with pytest.raises(ValidationError):
            parse_cost("NaN")


class TestIntakeRequest:

    def test_from_form_keys(self):
        request = IntakeRequest.from_dict({
            "customerName": "Ana",
            "customerPhone": "555",
            "deviceSerial": "SN1",
            "deviceModel": "Switch",
            "issueDescription": "Joy-con drift on the left stick",
            "tags": "drift",
            "urgency": "low",
        })

        assert request.customer_name == "Ana"
        assert request.customer_email is None
        assert request.tags == ["drift"]
