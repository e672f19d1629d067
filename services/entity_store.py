"""
Entity store for customers, devices and jobs.

The store is the single source of truth for the three workshop collections.
Services depend only on the EntityStore interface (repository pattern); the
backing implementation is chosen at app start-up.

Implementations:
    - InMemoryEntityStore: dict collections, used for tests and demo mode
    - JsonFileEntityStore: in-memory collections persisted to a JSON document
      file after every mutation

CREATE-IF-ABSENT:
    upsert_customer() and upsert_device() look up by natural key (phone,
    serial number) and create only when nothing matches. The lookup and the
    insert happen under one lock, so two concurrent intakes for the same
    phone can never produce two customers.

    An existing device is returned unchanged, even when the intake names a
    different owner. Ownership is recorded once, at creation.

Usage:
    store = InMemoryEntityStore()

    customer = store.upsert_customer({"name": "John Doe", "phone": "123-456-7890"})
    device = store.upsert_device({"serialNumber": "SN1", "model": "iPhone 13"}, customer.id)
    job = store.create_job(customer.id, device.id, "Cracked screen", ["screen"], Urgency.HIGH)

    job = store.update_job_status(job.id, JobStatus.READY)
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from core.exceptions import NotFoundError
from models.entities import (
    Customer,
    Device,
    DeviceType,
    Job,
    JobStatus,
    JobWithRelations,
    Urgency,
    utc_now,
)
from logging_config import get_logger


logger = get_logger(__name__)

Clock = Callable[[], datetime]
IdFactory = Callable[[str], str]


def random_id(prefix: str) -> str:
    """Generate an id such as 'job_3f9c2a7b1e04'."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class EntityStore(ABC):
    """
    Abstract repository for the workshop collections.

    Lookups return None when nothing matches. update_job_status() is the only
    operation that raises NotFoundError; there is nothing sensible to return
    for a status change on a job that does not exist.
    """

    # -------------------------------------------------------------------------
    # Natural-key lookups and upserts
    # -------------------------------------------------------------------------

    @abstractmethod
    def find_customer_by_phone(self, phone: str) -> Optional[Customer]:
        """Find a customer by phone number."""

    @abstractmethod
    def find_device_by_serial(self, serial: str) -> Optional[Device]:
        """Find a device by serial number."""

    @abstractmethod
    def upsert_customer(self, data: Dict[str, Any]) -> Customer:
        """
        Return the customer with data['phone'], creating it if absent.

        Args:
            data: Dict with 'name', 'phone' and optional 'email'
        """

    @abstractmethod
    def upsert_device(self, data: Dict[str, Any], owner_customer_id: str) -> Device:
        """
        Return the device with data['serialNumber'], creating it if absent.

        Args:
            data: Dict with 'serialNumber', 'model' and optional 'type'
            owner_customer_id: Owner recorded only if the device is created
        """

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_job(
        self,
        customer_id: str,
        device_id: str,
        description: str,
        tags: List[str],
        urgency: Urgency,
    ) -> Job:
        """Create a job in 'To Do' with cost 0."""

    @abstractmethod
    def get_job_by_id(self, job_id: str) -> Optional[Job]:
        """Get a job, or None."""

    @abstractmethod
    def update_job_status(self, job_id: str, new_status: JobStatus) -> Job:
        """
        Set status and updated_at on a job.

        Raises:
            NotFoundError: If job_id does not resolve
        """

    # -------------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_customer_by_id(self, customer_id: str) -> Optional[Customer]:
        """Get a customer, or None."""

    @abstractmethod
    def get_device_by_id(self, device_id: str) -> Optional[Device]:
        """Get a device, or None."""

    @abstractmethod
    def list_jobs(self, status: Optional[JobStatus] = None) -> List[Job]:
        """All jobs (optionally of one status), most recently updated first."""

    def list_jobs_for_device(self, device_id: str) -> List[Job]:
        """Repair history of one device, most recently updated first."""
        return [job for job in self.list_jobs() if job.device_id == device_id]

    def get_job_with_relations(self, job_id: str) -> Optional[JobWithRelations]:
        """
        Join a job with its customer and device.

        Returns None if the job, or either of its relations, is missing.
        """
        job = self.get_job_by_id(job_id)
        if job is None:
            return None
        customer = self.get_customer_by_id(job.customer_id)
        device = self.get_device_by_id(job.device_id)
        if customer is None or device is None:
            logger.warning(f"Job {job_id} has dangling relations")
            return None
        return JobWithRelations(job=job, customer=customer, device=device)


class InMemoryEntityStore(EntityStore):
    """
    Dict-backed store.

    Thread Safety:
        - All reads and writes take one re-entrant lock
        - Upserts do lookup-then-insert under that lock (atomic create-if-absent)
        - Entities are frozen, so returned objects can be shared freely
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        """
        Initialize empty collections.

        Args:
            clock: Returns "now" (default: timezone-aware UTC)
            id_factory: Builds an id from a prefix (default: random_id)
        """
        self._clock = clock or utc_now
        self._new_id = id_factory or random_id
        self._customers: Dict[str, Customer] = {}
        self._devices: Dict[str, Device] = {}
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.RLock()

    def find_customer_by_phone(self, phone: str) -> Optional[Customer]:
        phone = (phone or "").strip()
        with self._lock:
            for customer in self._customers.values():
                if customer.phone == phone:
                    return customer
        return None

    def find_device_by_serial(self, serial: str) -> Optional[Device]:
        serial = (serial or "").strip()
        with self._lock:
            for device in self._devices.values():
                if device.serial_number == serial:
                    return device
        return None

    def upsert_customer(self, data: Dict[str, Any]) -> Customer:
        phone = (data.get("phone") or "").strip()
        with self._lock:
            existing = self.find_customer_by_phone(phone)
            if existing is not None:
                logger.info(f"Reusing customer {existing.id} for phone {phone}")
                return existing

            customer = Customer(
                id=self._new_id("cus"),
                name=(data.get("name") or "").strip(),
                phone=phone,
                email=(data.get("email") or "").strip() or None,
            )
            self._commit(self._customers, customer.id, customer)

        logger.info(f"Created customer {customer.id}")
        return customer

    def upsert_device(self, data: Dict[str, Any], owner_customer_id: str) -> Device:
        serial = (data.get("serialNumber") or "").strip()
        with self._lock:
            existing = self.find_device_by_serial(serial)
            if existing is not None:
                if existing.customer_id != owner_customer_id:
                    logger.warning(
                        f"Device {existing.id} ({serial}) belongs to {existing.customer_id}, "
                        f"intake names {owner_customer_id}; ownership left unchanged"
                    )
                else:
                    logger.info(f"Reusing device {existing.id} for serial {serial}")
                return existing

            device_type = data.get("type") or DeviceType.OTHER
            device = Device(
                id=self._new_id("dev"),
                serial_number=serial,
                model=(data.get("model") or "").strip(),
                type=DeviceType(device_type) if not isinstance(device_type, DeviceType) else device_type,
                customer_id=owner_customer_id,
            )
            self._commit(self._devices, device.id, device)

        logger.info(f"Created device {device.id} for customer {owner_customer_id}")
        return device

    def create_job(
        self,
        customer_id: str,
        device_id: str,
        description: str,
        tags: List[str],
        urgency: Urgency,
    ) -> Job:
        now = self._clock()
        with self._lock:
            job = Job(
                id=self._new_id("job"),
                customer_id=customer_id,
                device_id=device_id,
                description=description,
                status=JobStatus.TODO,
                urgency=urgency,
                created_at=now,
                updated_at=now,
                tags=list(tags),
                cost=Decimal("0"),
            )
            self._commit(self._jobs, job.id, job)

        logger.info(f"Created job {job.id} for device {device_id}")
        return job

    def get_job_by_id(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def update_job_status(self, job_id: str, new_status: JobStatus) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise NotFoundError("Job", job_id)
            updated = job.with_status(new_status, self._clock())
            self._commit(self._jobs, job_id, updated)

        logger.info(f"Job {job_id} status {job.status.value} -> {new_status.value}")
        return updated

    def get_customer_by_id(self, customer_id: str) -> Optional[Customer]:
        with self._lock:
            return self._customers.get(customer_id)

    def get_device_by_id(self, device_id: str) -> Optional[Device]:
        with self._lock:
            return self._devices.get(device_id)

    def list_jobs(self, status: Optional[JobStatus] = None) -> List[Job]:
        with self._lock:
            jobs = list(self._jobs.values())
        if status is not None:
            jobs = [job for job in jobs if job.status == status]
        return sorted(jobs, key=lambda job: job.updated_at, reverse=True)

    # -------------------------------------------------------------------------
    # Bulk load / dump (used by fixtures and the file-backed store)
    # -------------------------------------------------------------------------

    def load_documents(self, documents: Dict[str, List[Dict[str, Any]]]) -> None:
        """
        Replace all collections with validated documents.

        Args:
            documents: {"customers": [...], "devices": [...], "jobs": [...]}

        Raises:
            ValidationError: If any document fails schema validation
        """
        customers = [Customer.from_dict(d) for d in documents.get("customers", [])]
        devices = [Device.from_dict(d) for d in documents.get("devices", [])]
        jobs = [Job.from_dict(d) for d in documents.get("jobs", [])]

        with self._lock:
            self._customers = {c.id: c for c in customers}
            self._devices = {d.id: d for d in devices}
            self._jobs = {j.id: j for j in jobs}

        logger.info(
            f"Loaded {len(customers)} customers, {len(devices)} devices, {len(jobs)} jobs"
        )

    def dump_documents(self) -> Dict[str, List[Dict[str, Any]]]:
        """Snapshot of all collections in document form."""
        with self._lock:
            return {
                "customers": [c.to_dict() for c in self._customers.values()],
                "devices": [d.to_dict() for d in self._devices.values()],
                "jobs": [j.to_document() for j in self._jobs.values()],
            }

    def _commit(self, collection: Dict[str, Any], key: str, value: Any) -> None:
        """
        Store one record and persist, restoring the previous state if
        persisting fails. Called under the lock.
        """
        previous = collection.get(key)
        collection[key] = value
        try:
            self._persist()
        except Exception:
            if previous is None:
                del collection[key]
            else:
                collection[key] = previous
            logger.error(f"Failed to persist {key}; change rolled back", exc_info=True)
            raise

    def _persist(self) -> None:
        """Hook called under the lock after every mutation."""


class JsonFileEntityStore(InMemoryEntityStore):
    """
    Store persisted to a single JSON document file.

    The file is read once at construction. Every mutation rewrites the whole
    document to a temporary file in the same directory and swaps it in with
    os.replace(), so a crash never leaves a half-written file behind.
    """

    def __init__(
        self,
        path: Union[str, Path],
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        """
        Open (or create) the document file.

        Args:
            path: Location of the JSON document
            clock: Returns "now"
            id_factory: Builds an id from a prefix

        Raises:
            ValidationError: If the existing file holds invalid documents
        """
        super().__init__(clock=clock, id_factory=id_factory)
        self._path = Path(path)

        if self._path.exists():
            with open(self._path, "r", encoding="utf-8") as f:
                self.load_documents(json.load(f))
            logger.info(f"Opened entity store at {self._path}")
        else:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Creating new entity store at {self._path}")
            with self._lock:
                self._persist()

    @property
    def path(self) -> Path:
        return self._path

    def _persist(self) -> None:
        documents = self.dump_documents()
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(documents, f, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
