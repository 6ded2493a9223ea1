"""
Domain models for hospital asset and request tracking.

These models represent the record snapshots the policy layer reads and are
framework-agnostic. They use Pydantic for validation but could be swapped to
dataclasses if needed.
"""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ComplianceStatus(str, Enum):
    """Derived state of a certification or audit entry."""

    VALID = "valid"
    PENDING_RENEWAL = "pending_renewal"
    EXPIRED = "expired"


class UrgencyLevel(str, Enum):
    """Urgency chosen by the requester; drives automatic escalation."""

    ROUTINE = "routine"
    URGENT = "urgent"
    EMERGENCY = "emergency"
    CRITICAL = "critical"


class Priority(str, Enum):
    """Request priority, ordered low < medium < high < urgent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)


_PRIORITY_ORDER = (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.URGENT)


class DeviceStatus(str, Enum):
    ACTIVE = "active"
    FAULTY = "faulty"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class IncidentSeverity(str, Enum):
    """Incident severity levels, mirroring the alerting scale."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ComplianceRecord(BaseModel):
    """Certification/audit entry tied to a device."""

    model_config = ConfigDict(frozen=True)  # Snapshots are never edited in place

    id: str
    device_id: str
    compliance_type: str
    certificate_number: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = Field(None, description="None when no expiry is tracked")
    status: ComplianceStatus = ComplianceStatus.VALID


class EquipmentType(BaseModel):
    """Category of device carrying a default maintenance interval."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    is_medical_device: bool = False
    requires_certification: bool = False
    # Not range-checked here: a bad interval must surface as InvalidConfiguration
    maintenance_interval_days: int


class Device(BaseModel):
    """Tracked piece of equipment."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    status: DeviceStatus = DeviceStatus.ACTIVE
    equipment_type_id: str | None = None
    location: str | None = None
    is_critical: bool = False
    last_maintenance_date: date | None = None
    next_maintenance_date: date | None = None
    compliance_status: str = Field(default="compliant", description="Free-text device rollup")


class Department(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    code: str
    is_critical: bool = Field(default=False, description="Always patient-impacting")


class RequestType(BaseModel):
    """Category a request is filed under (hardware, software, network, ...)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Request(BaseModel):
    """Equipment/IT request submitted by staff."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    request_type_id: str | None = None
    department_id: str | None = None
    device_id: str | None = None
    urgency_level: UrgencyLevel = UrgencyLevel.ROUTINE
    priority: Priority = Priority.MEDIUM
    patient_impact: bool = False
    status: RequestStatus = RequestStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None


class MaintenanceSchedule(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    device_id: str
    maintenance_type: str = "preventive"
    scheduled_date: date
    completed_date: date | None = None
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED

    def is_overdue(self, today: date) -> bool:
        """Still scheduled after its date has passed."""
        return self.status == MaintenanceStatus.SCHEDULED and self.scheduled_date < today


class IncidentReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    device_id: str | None = None
    incident_type: str = "equipment_failure"
    severity: IncidentSeverity = IncidentSeverity.MEDIUM
    status: IncidentStatus = IncidentStatus.OPEN
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    resolved_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status in (IncidentStatus.OPEN, IncidentStatus.INVESTIGATING)
