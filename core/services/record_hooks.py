"""
Write-path hooks applying the policy to record snapshots.

The hosting application calls these right before it creates or updates a row
through its backend client. Every hook takes a frozen snapshot and returns an
updated copy; nothing here talks to storage.

Batch refreshes report per-record failures through ``Result`` so one
misconfigured equipment type does not abort a whole nightly sweep.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Generic, TypeVar

import structlog

from core.domain.models import (
    ComplianceRecord,
    Department,
    Device,
    EquipmentType,
    IncidentReport,
    IncidentStatus,
    MaintenanceSchedule,
    MaintenanceStatus,
    Request,
    RequestStatus,
)
from core.services.policy_evaluator import InvalidConfiguration, PolicyEvaluator

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    Used where failure is expected business data (a bad interval on one row)
    rather than a programming error.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class RecordHooks:
    """Applies ``PolicyEvaluator`` derivations to typed records."""

    def __init__(self, evaluator: PolicyEvaluator | None = None) -> None:
        self.evaluator = evaluator or PolicyEvaluator()
        self.logger = logger.bind(component="record_hooks")

    # Create/update hooks

    def before_compliance_write(
        self, record: ComplianceRecord, now: date | datetime
    ) -> ComplianceRecord:
        status = self.evaluator.compliance_status(record.expiry_date, now)
        if status == record.status:
            return record
        return record.model_copy(update={"status": status})

    def before_device_write(
        self,
        device: Device,
        equipment_type: EquipmentType | None,
        now: date | datetime,
    ) -> Device:
        """
        Recompute ``next_maintenance_date`` for a device being written.

        Devices without an equipment type keep whatever date they carry.

        Raises:
            InvalidConfiguration: the equipment type's interval is not positive.
        """
        if equipment_type is None:
            return device

        next_date = self.evaluator.next_maintenance_date(
            device.last_maintenance_date, equipment_type.maintenance_interval_days, now
        )
        return device.model_copy(update={"next_maintenance_date": next_date})

    def before_request_write(self, request: Request, department: Department | None) -> Request:
        # Unknown department: nothing marks it critical
        department_is_critical = department.is_critical if department is not None else False

        priority, patient_impact = self.evaluator.request_escalation(
            request.urgency_level,
            department_is_critical,
            request.priority,
            request.patient_impact,
        )
        if priority == request.priority and patient_impact == request.patient_impact:
            return request
        return request.model_copy(update={"priority": priority, "patient_impact": patient_impact})

    # Batch refreshes

    def refresh_compliance(
        self, records: Iterable[ComplianceRecord], now: date | datetime
    ) -> list[ComplianceRecord]:
        """Recompute every record's status against ``now``."""
        refreshed: list[ComplianceRecord] = []
        changed = 0
        for record in records:
            updated = self.before_compliance_write(record, now)
            if updated is not record:
                changed += 1
            refreshed.append(updated)

        self.logger.info("compliance_refresh_completed", total=len(refreshed), changed=changed)
        return refreshed

    def refresh_maintenance(
        self,
        devices: Iterable[Device],
        equipment_types: Mapping[str, EquipmentType],
        now: date | datetime,
    ) -> list[Result[Device, InvalidConfiguration]]:
        """
        Recompute next maintenance dates for many devices.

        Returns one ``Result`` per device, in input order. Devices whose
        equipment type is missing from ``equipment_types`` come back unchanged.
        """
        results: list[Result[Device, InvalidConfiguration]] = []
        failures = 0
        for device in devices:
            equipment_type = (
                equipment_types.get(device.equipment_type_id)
                if device.equipment_type_id is not None
                else None
            )
            try:
                results.append(Result.ok(self.before_device_write(device, equipment_type, now)))
            except InvalidConfiguration as e:
                failures += 1
                self.logger.warning(
                    "maintenance_refresh_failed",
                    device_id=device.id,
                    equipment_type_id=device.equipment_type_id,
                    error=str(e),
                )
                results.append(Result.err(e))

        self.logger.info("maintenance_refresh_completed", total=len(results), failed=failures)
        return results

    # Lifecycle stamping

    def record_service(
        self,
        device: Device,
        equipment_type: EquipmentType | None,
        serviced_on: date,
    ) -> Device:
        """Mark a device as serviced and roll its next maintenance date forward."""
        serviced = device.model_copy(update={"last_maintenance_date": serviced_on})
        return self.before_device_write(serviced, equipment_type, serviced_on)

    def complete_request(self, request: Request, now: datetime) -> Request:
        if request.status == RequestStatus.COMPLETED:
            return request
        return request.model_copy(
            update={"status": RequestStatus.COMPLETED, "completed_at": now}
        )

    def complete_maintenance(
        self, schedule: MaintenanceSchedule, today: date
    ) -> MaintenanceSchedule:
        if schedule.status == MaintenanceStatus.COMPLETED:
            return schedule
        return schedule.model_copy(
            update={"status": MaintenanceStatus.COMPLETED, "completed_date": today}
        )

    def resolve_incident(self, incident: IncidentReport, now: datetime) -> IncidentReport:
        if incident.status in (IncidentStatus.RESOLVED, IncidentStatus.CLOSED):
            return incident
        return incident.model_copy(update={"status": IncidentStatus.RESOLVED, "resolved_at": now})
