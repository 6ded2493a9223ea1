"""
End-to-end smoke run of the policy pipeline on sample hospital data.

This script checks:
1. Configuration loading and validation
2. Compliance status refresh
3. Maintenance date refresh (including a misconfigured equipment type)
4. Request escalation
5. Dashboard summary and analytics

Run with: uv run python policy_report.py
"""

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core.config import get_config, print_config_summary, validate_config
from core.domain.models import (
    ComplianceRecord,
    Department,
    Device,
    DeviceStatus,
    EquipmentType,
    IncidentReport,
    IncidentSeverity,
    MaintenanceSchedule,
    Priority,
    Request,
    RequestType,
    UrgencyLevel,
)
from core.observability import configure_logging
from core.services import PolicyEvaluator, RecordHooks, build_analytics, build_dashboard_summary

console = Console()

TODAY = date.today()
NOW = datetime.now(UTC)

DEPARTMENTS = [
    Department(id="dep-icu", name="Intensive Care Unit", code="ICU", is_critical=True),
    Department(id="dep-er", name="Emergency Department", code="ER", is_critical=True),
    Department(id="dep-adm", name="Administration", code="ADM"),
]

REQUEST_TYPES = [
    RequestType(id="rt-hw", name="Hardware"),
    RequestType(id="rt-net", name="Network"),
]

EQUIPMENT_TYPES = {
    "et-vent": EquipmentType(
        id="et-vent", name="Ventilator", is_medical_device=True, maintenance_interval_days=90
    ),
    "et-pc": EquipmentType(id="et-pc", name="Workstation", maintenance_interval_days=365),
    "et-bad": EquipmentType(id="et-bad", name="Unconfigured", maintenance_interval_days=0),
}

DEVICES = [
    Device(
        id="dev-1",
        name="Ventilator V-01",
        equipment_type_id="et-vent",
        is_critical=True,
        last_maintenance_date=TODAY - timedelta(days=80),
    ),
    Device(id="dev-2", name="Front desk PC", equipment_type_id="et-pc"),
    Device(
        id="dev-3",
        name="Infusion pump P-07",
        equipment_type_id="et-bad",
        status=DeviceStatus.FAULTY,
        compliance_status="non_compliant",
    ),
]

COMPLIANCE_RECORDS = [
    ComplianceRecord(
        id="cr-1", device_id="dev-1", compliance_type="electrical_safety",
        expiry_date=TODAY - timedelta(days=3),
    ),
    ComplianceRecord(
        id="cr-2", device_id="dev-1", compliance_type="calibration",
        expiry_date=TODAY + timedelta(days=12),
    ),
    ComplianceRecord(id="cr-3", device_id="dev-2", compliance_type="asset_audit"),
]

REQUESTS = [
    Request(
        id="req-1", title="Ventilator alarm fault", request_type_id="rt-hw",
        department_id="dep-icu", urgency_level=UrgencyLevel.EMERGENCY, priority=Priority.LOW,
    ),
    Request(
        id="req-2", title="New keyboard", request_type_id="rt-hw", department_id="dep-adm"
    ),
    Request(
        id="req-3", title="Monitor flicker", department_id="dep-er",
        priority=Priority.HIGH, created_at=NOW - timedelta(days=2),
    ),
]

SCHEDULES = [
    MaintenanceSchedule(id="ms-1", device_id="dev-1", scheduled_date=TODAY - timedelta(days=1)),
    MaintenanceSchedule(id="ms-2", device_id="dev-2", scheduled_date=TODAY + timedelta(days=30)),
]

INCIDENTS = [
    IncidentReport(id="inc-1", device_id="dev-3", severity=IncidentSeverity.CRITICAL),
]


def check_configuration() -> bool:
    console.print(Panel("Testing Configuration", style="blue"))
    try:
        validate_config()
        print_config_summary()
        return True
    except Exception as e:
        console.print(f"Configuration check failed: {e}", style="red")
        return False


def check_compliance(hooks: RecordHooks) -> bool:
    console.print(Panel("Compliance Refresh", style="blue"))

    refreshed = hooks.refresh_compliance(COMPLIANCE_RECORDS, TODAY)

    table = Table(title="Compliance Records")
    table.add_column("Record", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Expiry", style="yellow")
    table.add_column("Status", style="green")
    for record in refreshed:
        expiry = record.expiry_date.isoformat() if record.expiry_date else "N/A"
        table.add_row(record.id, record.compliance_type, expiry, record.status.value)

    console.print(table)
    return len(refreshed) == len(COMPLIANCE_RECORDS)


def check_maintenance(hooks: RecordHooks) -> bool:
    console.print(Panel("Maintenance Refresh", style="blue"))

    results = hooks.refresh_maintenance(DEVICES, EQUIPMENT_TYPES, TODAY)

    table = Table(title="Next Maintenance")
    table.add_column("Device", style="cyan")
    table.add_column("Next Maintenance", style="green")
    for device, result in zip(DEVICES, results, strict=True):
        if result.is_ok():
            next_date = result.unwrap().next_maintenance_date
            table.add_row(device.name, next_date.isoformat() if next_date else "N/A")
        else:
            table.add_row(device.name, f"[red]{result.unwrap_err()}[/red]")

    console.print(table)
    # Exactly the unconfigured pump should fail
    return [r.is_err() for r in results] == [False, False, True]


def check_escalation(hooks: RecordHooks) -> bool:
    console.print(Panel("Request Escalation", style="blue"))

    departments = {d.id: d for d in DEPARTMENTS}
    escalated = [
        hooks.before_request_write(r, departments.get(r.department_id or "")) for r in REQUESTS
    ]

    table = Table(title="Requests")
    table.add_column("Request", style="cyan")
    table.add_column("Urgency", style="magenta")
    table.add_column("Priority", style="yellow")
    table.add_column("Patient Impact", style="green")
    for request in escalated:
        table.add_row(
            request.title,
            request.urgency_level.value,
            request.priority.value,
            "yes" if request.patient_impact else "no",
        )

    console.print(table)
    return escalated[0].priority == Priority.URGENT and escalated[2].patient_impact


def check_dashboard(hooks: RecordHooks) -> bool:
    console.print(Panel("Dashboard", style="blue"))

    compliance = hooks.refresh_compliance(COMPLIANCE_RECORDS, TODAY)
    summary = build_dashboard_summary(
        DEVICES, REQUESTS, SCHEDULES, INCIDENTS, compliance, TODAY, hooks.evaluator
    )
    analytics = build_analytics(
        REQUESTS, DEVICES, compliance, DEPARTMENTS, TODAY,
        trend_days=get_config().policy.request_trend_days,
        incidents=INCIDENTS,
        request_types=REQUEST_TYPES,
        evaluator=hooks.evaluator,
    )

    summary_table = Table(title="Dashboard Summary")
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="white")
    for name, value in summary.model_dump().items():
        summary_table.add_row(name.replace("_", " ").title(), str(value))
    console.print(summary_table)

    trend_table = Table(title="Request Trend")
    trend_table.add_column("Day", style="cyan")
    trend_table.add_column("Requests", style="white")
    for point in analytics.request_trend:
        trend_table.add_row(point.day.isoformat(), str(point.count))
    console.print(trend_table)

    breakdown_table = Table(title="Breakdowns")
    breakdown_table.add_column("Chart", style="cyan")
    breakdown_table.add_column("Counts", style="white")
    breakdown_table.add_row("Requests by type", str(analytics.requests_by_type))
    breakdown_table.add_row("Incidents by severity", str(analytics.incidents_by_severity))
    breakdown_table.add_row("Compliance by status", str(analytics.compliance_by_status))
    console.print(breakdown_table)

    return summary.requires_attention


def run_all_checks() -> None:
    console.print(Panel("Hospital Asset Policy - Smoke Run", style="bold blue"))

    config = get_config()
    configure_logging(config.logging)
    hooks = RecordHooks(PolicyEvaluator(config.policy))

    checks: list[tuple[str, Callable[[], bool]]] = [
        ("Configuration", check_configuration),
        ("Compliance", lambda: check_compliance(hooks)),
        ("Maintenance", lambda: check_maintenance(hooks)),
        ("Escalation", lambda: check_escalation(hooks)),
        ("Dashboard", lambda: check_dashboard(hooks)),
    ]

    results = []
    for name, check in checks:
        console.print(f"\n{'=' * 60}")
        try:
            results.append((name, check()))
        except Exception as e:
            console.print(f"{name} failed with exception: {e}", style="red")
            results.append((name, False))

    console.print(f"\n{'=' * 60}")
    summary_table = Table(title="Results")
    summary_table.add_column("Check", style="cyan")
    summary_table.add_column("Result", style="white")
    passed = 0
    for name, ok in results:
        summary_table.add_row(name, "PASSED" if ok else "FAILED")
        passed += int(ok)
    console.print(summary_table)

    console.print(f"\nResults: {passed}/{len(results)} checks passed")


if __name__ == "__main__":
    try:
        run_all_checks()
    except KeyboardInterrupt:
        console.print("\nStopped by user", style="yellow")
