"""
Admin dashboard counters and analytics breakdowns.

Pure aggregations over record snapshots the caller already fetched. Both the
summary tiles and the analytics charts are computed here once, whatever backend
the records came from.

Compliance statuses are always re-derived against ``today``; whatever status the
record was stored with is ignored.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

import structlog
from pydantic import BaseModel, Field, computed_field

from core.domain.models import (
    ComplianceRecord,
    ComplianceStatus,
    Department,
    Device,
    DeviceStatus,
    IncidentReport,
    IncidentSeverity,
    MaintenanceSchedule,
    Request,
    RequestStatus,
    RequestType,
)
from core.services.policy_evaluator import ESCALATING_URGENCIES, PolicyEvaluator

logger = structlog.get_logger(__name__)

UNASSIGNED_DEPARTMENT = "Unassigned"
UNCATEGORIZED_REQUEST_TYPE = "Uncategorized"


class DashboardSummary(BaseModel):
    """Headline counters for the admin dashboard."""

    total_devices: int = Field(ge=0)
    active_devices: int = Field(ge=0)
    faulty_devices: int = Field(ge=0)
    critical_devices: int = Field(ge=0)
    compliance_issues: int = Field(ge=0, description="Devices not rolled up as compliant")

    pending_requests: int = Field(ge=0)
    emergency_requests: int = Field(ge=0)

    overdue_maintenances: int = Field(ge=0)
    open_incidents: int = Field(ge=0)
    critical_incidents: int = Field(ge=0, description="Critical and not yet resolved")

    expired_certificates: int = Field(ge=0)
    pending_renewals: int = Field(ge=0)

    @computed_field(return_type=bool)
    def requires_attention(self) -> bool:
        return (
            self.emergency_requests > 0
            or self.open_incidents > 0
            or self.overdue_maintenances > 0
        )


class TrendPoint(BaseModel):
    day: date
    count: int = Field(ge=0)


class AnalyticsReport(BaseModel):
    """Breakdowns behind the analytics charts."""

    requests_by_type: dict[str, int]
    requests_by_status: dict[str, int]
    requests_by_urgency: dict[str, int]
    requests_by_department: dict[str, int]
    devices_by_status: dict[str, int]
    incidents_by_severity: dict[str, int]
    compliance_by_status: dict[str, int]
    request_trend: list[TrendPoint]


def current_compliance_statuses(
    compliance_records: Iterable[ComplianceRecord],
    today: date,
    evaluator: PolicyEvaluator | None = None,
) -> list[ComplianceStatus]:
    """Derive each record's status as of ``today``, in input order."""
    evaluator = evaluator or PolicyEvaluator()
    return [evaluator.compliance_status(c.expiry_date, today) for c in compliance_records]


def build_dashboard_summary(
    devices: Sequence[Device],
    requests: Sequence[Request],
    schedules: Sequence[MaintenanceSchedule],
    incidents: Sequence[IncidentReport],
    compliance_records: Sequence[ComplianceRecord],
    today: date,
    evaluator: PolicyEvaluator | None = None,
) -> DashboardSummary:
    """Count the dashboard tiles from fetched snapshots."""
    statuses = Counter(current_compliance_statuses(compliance_records, today, evaluator))

    summary = DashboardSummary(
        total_devices=len(devices),
        active_devices=sum(1 for d in devices if d.status == DeviceStatus.ACTIVE),
        faulty_devices=sum(1 for d in devices if d.status == DeviceStatus.FAULTY),
        critical_devices=sum(1 for d in devices if d.is_critical),
        compliance_issues=sum(1 for d in devices if d.compliance_status != "compliant"),
        pending_requests=sum(1 for r in requests if r.status == RequestStatus.PENDING),
        emergency_requests=sum(1 for r in requests if r.urgency_level in ESCALATING_URGENCIES),
        overdue_maintenances=sum(1 for s in schedules if s.is_overdue(today)),
        open_incidents=sum(1 for i in incidents if i.is_open),
        critical_incidents=sum(
            1 for i in incidents if i.severity == IncidentSeverity.CRITICAL and i.is_open
        ),
        expired_certificates=statuses[ComplianceStatus.EXPIRED],
        pending_renewals=statuses[ComplianceStatus.PENDING_RENEWAL],
    )

    logger.debug("dashboard_summary_built", requires_attention=summary.requires_attention)
    return summary


def _count_by(values: Iterable[str]) -> dict[str, int]:
    return dict(Counter(values))


def request_trend(requests: Iterable[Request], today: date, days: int) -> list[TrendPoint]:
    """Requests created per day over the last ``days`` days, oldest first, zero-filled."""
    if days <= 0:
        raise ValueError(f"Trend window must be positive, got {days} days")

    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    per_day = Counter(r.created_at.date() for r in requests)
    return [TrendPoint(day=day, count=per_day.get(day, 0)) for day in window]


def build_analytics(
    requests: Sequence[Request],
    devices: Sequence[Device],
    compliance_records: Sequence[ComplianceRecord],
    departments: Iterable[Department],
    today: date,
    trend_days: int = 7,
    *,
    incidents: Sequence[IncidentReport] = (),
    request_types: Iterable[RequestType] = (),
    evaluator: PolicyEvaluator | None = None,
) -> AnalyticsReport:
    """
    Aggregate the analytics view.

    Requests outside any known department are "Unassigned"; requests with a
    missing or unknown type are "Uncategorized".
    """
    department_names = {d.id: d.name for d in departments}
    type_names = {t.id: t.name for t in request_types}

    def _lookup(key: str | None, names: dict[str, str], fallback: str) -> str:
        if key is None:
            return fallback
        return names.get(key, fallback)

    report = AnalyticsReport(
        requests_by_type=_count_by(
            _lookup(r.request_type_id, type_names, UNCATEGORIZED_REQUEST_TYPE) for r in requests
        ),
        requests_by_status=_count_by(r.status.value for r in requests),
        requests_by_urgency=_count_by(r.urgency_level.value for r in requests),
        requests_by_department=_count_by(
            _lookup(r.department_id, department_names, UNASSIGNED_DEPARTMENT) for r in requests
        ),
        devices_by_status=_count_by(d.status.value for d in devices),
        incidents_by_severity=_count_by(i.severity.value for i in incidents),
        compliance_by_status=_count_by(
            s.value for s in current_compliance_statuses(compliance_records, today, evaluator)
        ),
        request_trend=request_trend(requests, today, trend_days),
    )

    logger.info(
        "analytics_built",
        requests=len(requests),
        devices=len(devices),
        incidents=len(incidents),
        compliance_records=len(compliance_records),
        trend_days=trend_days,
    )
    return report
