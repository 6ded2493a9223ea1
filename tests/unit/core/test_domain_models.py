"""
Tests for the record snapshots in `core/domain/models.py`.
"""

from datetime import UTC, date, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from core.domain.models import (
    Device,
    EquipmentType,
    IncidentReport,
    IncidentStatus,
    MaintenanceSchedule,
    MaintenanceStatus,
    Priority,
    Request,
)


class TestPriority:
    def test_rank_follows_declared_order(self) -> None:
        ranks = [p.rank for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.URGENT)]
        assert ranks == [0, 1, 2, 3]

    def test_values_round_trip_from_backend_strings(self) -> None:
        assert Priority("urgent") is Priority.URGENT


class TestSnapshots:
    def test_records_are_immutable(self) -> None:
        device = Device(id="dev-1", name="Ventilator")

        with pytest.raises(ValueError, match="frozen"):
            device.name = "Other"  # type: ignore

    def test_request_defaults(self) -> None:
        request = Request(id="req-1", title="Printer")

        assert request.priority == Priority.MEDIUM
        assert request.patient_impact is False
        assert request.created_at.tzinfo == UTC

    def test_equipment_type_accepts_any_interval(self) -> None:
        # Range checks belong to the policy layer
        assert EquipmentType(id="e", name="x", maintenance_interval_days=0)

    def test_request_parses_backend_row(self) -> None:
        row = {
            "id": "req-9",
            "title": "Ventilator fault",
            "urgency_level": "critical",
            "priority": "high",
            "status": "in_progress",
            "created_at": "2024-06-01T08:00:00+00:00",
        }

        request = Request.model_validate(row)

        assert request.priority == Priority.HIGH
        assert request.created_at == datetime(2024, 6, 1, 8, tzinfo=UTC)


class TestMaintenanceSchedule:
    @given(days_late=st.integers(min_value=1, max_value=1000))
    def test_scheduled_in_the_past_is_overdue(self, days_late: int) -> None:
        today = date(2024, 6, 1)
        scheduled = date.fromordinal(today.toordinal() - days_late)
        schedule = MaintenanceSchedule(id="m", device_id="d", scheduled_date=scheduled)

        assert schedule.is_overdue(today)

    def test_due_today_is_not_overdue(self) -> None:
        today = date(2024, 6, 1)
        schedule = MaintenanceSchedule(id="m", device_id="d", scheduled_date=today)

        assert not schedule.is_overdue(today)

    @pytest.mark.parametrize(
        "status",
        [MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED],
    )
    def test_only_scheduled_work_can_be_overdue(self, status: MaintenanceStatus) -> None:
        schedule = MaintenanceSchedule(
            id="m", device_id="d", scheduled_date=date(2020, 1, 1), status=status
        )

        assert not schedule.is_overdue(date(2024, 6, 1))


@pytest.mark.parametrize(
    "status,expected",
    [
        (IncidentStatus.OPEN, True),
        (IncidentStatus.INVESTIGATING, True),
        (IncidentStatus.RESOLVED, False),
        (IncidentStatus.CLOSED, False),
    ],
)
def test_incident_is_open(status: IncidentStatus, expected: bool) -> None:
    assert IncidentReport(id="i", status=status).is_open is expected
