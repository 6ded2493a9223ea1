"""
Compliance, maintenance and escalation policy.

Three independent derivations, each a total, deterministic mapping from a
record's fields (plus the evaluation instant) to a value the caller writes back:

- compliance status from an expiry date
- next maintenance date from the last service date and an interval
- request priority / patient impact from urgency and department

The module-level functions are pure. ``PolicyEvaluator`` binds them to a
``PolicyConfig`` and adds debug logging; it holds no mutable state, so one
instance can be shared across request handlers.
"""

from datetime import date, datetime, timedelta

import structlog

from core.config import PolicyConfig
from core.domain.models import ComplianceStatus, Priority, UrgencyLevel

logger = structlog.get_logger(__name__)

ESCALATING_URGENCIES = frozenset({UrgencyLevel.EMERGENCY, UrgencyLevel.CRITICAL})


class InvalidConfiguration(ValueError):
    """Raised when a maintenance interval is zero or negative, or runs off the calendar."""

    def __init__(self, interval_days: int, message: str | None = None) -> None:
        self.interval_days = interval_days
        super().__init__(
            message or f"Maintenance interval must be positive, got {interval_days} days"
        )


def _as_date(value: date | datetime) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def derive_compliance_status(
    expiry_date: date | None,
    now: date | datetime,
    renewal_window_days: int = 30,
) -> ComplianceStatus:
    """
    Classify a compliance record by its expiry date.

    No expiry tracked means valid. An expiry before ``now`` is expired; one
    falling inside the renewal window is pending renewal.
    """
    if expiry_date is None:
        return ComplianceStatus.VALID

    today = _as_date(now)
    expiry = _as_date(expiry_date)

    if expiry < today:
        return ComplianceStatus.EXPIRED
    # Compare the gap so dates near date.max cannot overflow
    if expiry - today < timedelta(days=renewal_window_days):
        return ComplianceStatus.PENDING_RENEWAL
    return ComplianceStatus.VALID


def derive_next_maintenance_date(
    last_maintenance_date: date | None,
    interval_days: int,
    now: date | datetime,
) -> date:
    """
    Next service date: ``(last_maintenance_date or now) + interval_days``.

    Raises:
        InvalidConfiguration: the interval is not positive, or it pushes the
            date past ``date.max``.
    """
    if interval_days <= 0:
        raise InvalidConfiguration(interval_days)

    base = last_maintenance_date if last_maintenance_date is not None else now
    try:
        return _as_date(base) + timedelta(days=interval_days)
    except OverflowError as e:
        raise InvalidConfiguration(
            interval_days, f"Maintenance interval of {interval_days} days runs past {date.max}"
        ) from e


def derive_request_escalation(
    urgency_level: UrgencyLevel,
    department_is_critical: bool,
    current_priority: Priority,
    current_patient_impact: bool,
) -> tuple[Priority, bool]:
    """
    Raise priority and patient impact for high-urgency / critical-department requests.

    Only upward transitions happen: an already urgent priority stays urgent and
    patient impact, once set, is never reset.
    """
    priority = current_priority
    if urgency_level in ESCALATING_URGENCIES and Priority.URGENT.rank > priority.rank:
        priority = Priority.URGENT

    patient_impact = current_patient_impact or department_is_critical
    return priority, patient_impact


class PolicyEvaluator:
    """Configured entry point for the policy derivations."""

    def __init__(self, config: PolicyConfig | None = None) -> None:
        self.config = config or PolicyConfig()
        self.logger = logger.bind(component="policy_evaluator")

    def compliance_status(
        self, expiry_date: date | None, now: date | datetime
    ) -> ComplianceStatus:
        status = derive_compliance_status(expiry_date, now, self.config.renewal_window_days)
        self.logger.debug(
            "compliance_status_derived",
            expiry_date=expiry_date.isoformat() if expiry_date else None,
            status=status.value,
        )
        return status

    def next_maintenance_date(
        self,
        last_maintenance_date: date | None,
        interval_days: int | None,
        now: date | datetime,
    ) -> date:
        """Derive the next service date, using the configured default when no interval is given."""
        if interval_days is None:
            interval_days = self.config.default_maintenance_interval_days

        next_date = derive_next_maintenance_date(last_maintenance_date, interval_days, now)
        self.logger.debug(
            "next_maintenance_date_derived",
            interval_days=interval_days,
            next_maintenance_date=next_date.isoformat(),
        )
        return next_date

    def request_escalation(
        self,
        urgency_level: UrgencyLevel,
        department_is_critical: bool,
        current_priority: Priority,
        current_patient_impact: bool,
    ) -> tuple[Priority, bool]:
        priority, patient_impact = derive_request_escalation(
            urgency_level, department_is_critical, current_priority, current_patient_impact
        )
        if priority != current_priority or patient_impact != current_patient_impact:
            self.logger.debug(
                "request_escalated",
                urgency_level=urgency_level.value,
                priority_from=current_priority.value,
                priority_to=priority.value,
                patient_impact=patient_impact,
            )
        return priority, patient_impact
