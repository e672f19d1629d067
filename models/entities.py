"""
Workshop entity models.

These models represent the three document collections the workshop keeps:
customers, devices and repair jobs.

Serialization:
    to_dict() emits the camelCase document shape stored on disk and returned
    by the API. from_dict() is the store-boundary check: anything that does
    not fit the schema raises ValidationError instead of leaking a half-built
    entity into the services.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Any, List, Optional

from core.exceptions import ValidationError


class JobStatus(Enum):
    """
    Status of a repair job.

    Workflow order:
        TODO -> WAITING -> READY -> DONE

    Any status can be set from any other; the order only describes the
    usual forward path.
    """

    TODO = "To Do"
    """Logged, not yet worked on."""

    WAITING = "Waiting"
    """Blocked, usually on parts."""

    READY = "Ready"
    """Repaired, waiting for pickup."""

    DONE = "Done"
    """Collected and closed."""

    @classmethod
    def parse(cls, value: Any) -> "JobStatus":
        """
        Accept either a JobStatus or its display value.

        Raises:
            ValidationError: If the value is not one of the four statuses
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError.for_field("status", f"Invalid status '{value}'. Expected one of: {allowed}")

    @property
    def position(self) -> int:
        """Index in the workflow order."""
        return WORKFLOW_ORDER.index(self)


WORKFLOW_ORDER = [JobStatus.TODO, JobStatus.WAITING, JobStatus.READY, JobStatus.DONE]


class Urgency(Enum):
    """Triage priority of a job."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DeviceType(Enum):
    """Kind of device brought in."""

    PHONE = "Phone"
    LAPTOP = "Laptop"
    TABLET = "Tablet"
    OTHER = "Other"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _require(data: Dict[str, Any], key: str, entity: str) -> Any:
    if key not in data or data[key] is None:
        raise ValidationError.for_field(key, f"{entity} document is missing '{key}'")
    return data[key]


def _parse_enum(enum_cls, value: Any, key: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError.for_field(key, f"Invalid {key} '{value}'")


def _parse_timestamp(value: Any, key: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            # fromisoformat() only learned the 'Z' suffix in 3.11
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError.for_field(key, f"Invalid timestamp '{value}'")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_cost(value: Any) -> Decimal:
    """
    Convert a stored or submitted cost to Decimal.

    Raises:
        ValidationError: If the value is not a number or is negative
    """
    if isinstance(value, bool):
        raise ValidationError.for_field("cost", f"Invalid cost '{value}'")
    try:
        cost = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError.for_field("cost", f"Invalid cost '{value}'")
    if not cost.is_finite() or cost < 0:
        raise ValidationError.for_field("cost", "Cost must be a non-negative amount")
    return cost


@dataclass(frozen=True)
class Customer:
    """
    A workshop customer.

    The phone number is the natural key used to avoid duplicate records.
    """

    id: str
    name: str
    phone: str
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to document form."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Customer":
        """Create from a stored document."""
        return cls(
            id=_require(data, "id", "Customer"),
            name=_require(data, "name", "Customer"),
            phone=_require(data, "phone", "Customer"),
            email=data.get("email") or None,
        )


@dataclass(frozen=True)
class Device:
    """
    A physical unit identified by its serial number.

    Created once per serial and reused across jobs. customer_id records the
    owner at the time the device was first seen.
    """

    id: str
    serial_number: str
    model: str
    type: DeviceType
    customer_id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to document form."""
        return {
            "id": self.id,
            "serialNumber": self.serial_number,
            "model": self.model,
            "type": self.type.value,
            "customerId": self.customer_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        """Create from a stored document."""
        return cls(
            id=_require(data, "id", "Device"),
            serial_number=_require(data, "serialNumber", "Device"),
            model=_require(data, "model", "Device"),
            type=_parse_enum(DeviceType, data.get("type", DeviceType.OTHER.value), "type"),
            customer_id=_require(data, "customerId", "Device"),
        )


@dataclass(frozen=True)
class Job:
    """
    A single repair work order.

    Jobs are immutable snapshots; the store produces a new instance on every
    status change via with_status().
    """

    id: str
    customer_id: str
    device_id: str
    description: str
    status: JobStatus
    urgency: Urgency
    created_at: datetime
    updated_at: datetime
    tags: List[str] = field(default_factory=list)
    cost: Decimal = Decimal("0")

    def with_status(self, status: JobStatus, now: datetime) -> "Job":
        """
        Return a copy with a new status and updated_at.

        updated_at never moves behind created_at, even with a skewed clock.
        """
        return replace(self, status=status, updated_at=max(now, self.created_at))

    def to_document(self) -> Dict[str, Any]:
        """Stored form: cost as a decimal string so it survives a reload exactly."""
        data = self.to_dict()
        data["cost"] = str(self.cost)
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API form (cost as a JSON number)."""
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "deviceId": self.device_id,
            "description": self.description,
            "status": self.status.value,
            "urgency": self.urgency.value,
            "tags": list(self.tags),
            "cost": float(self.cost),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """
        Create from a stored document.

        Raises:
            ValidationError: On unknown status/urgency, negative cost,
                non-string tags or updatedAt earlier than createdAt
        """
        created_at = _parse_timestamp(_require(data, "createdAt", "Job"), "createdAt")
        updated_at = _parse_timestamp(data.get("updatedAt", created_at), "updatedAt")
        if updated_at < created_at:
            raise ValidationError.for_field("updatedAt", "updatedAt cannot be earlier than createdAt")

        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValidationError.for_field("tags", "tags must be a list of strings")

        return cls(
            id=_require(data, "id", "Job"),
            customer_id=_require(data, "customerId", "Job"),
            device_id=_require(data, "deviceId", "Job"),
            description=data.get("description", ""),
            status=_parse_enum(JobStatus, _require(data, "status", "Job"), "status"),
            urgency=_parse_enum(Urgency, _require(data, "urgency", "Job"), "urgency"),
            created_at=created_at,
            updated_at=updated_at,
            tags=list(tags),
            cost=parse_cost(data.get("cost", 0)),
        )


@dataclass(frozen=True)
class JobWithRelations:
    """A job joined with its customer and device, as shown on a job card."""

    job: Job
    customer: Customer
    device: Device

    def to_dict(self) -> Dict[str, Any]:
        """Job document with embedded customer and device."""
        data = self.job.to_dict()
        data["customer"] = self.customer.to_dict()
        data["device"] = self.device.to_dict()
        return data
