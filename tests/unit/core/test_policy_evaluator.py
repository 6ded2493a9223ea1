"""
Tests for the compliance, maintenance and escalation policy.

Testing philosophy:
- Property-based tests for the date-window boundaries
- Worked examples for the documented cases
- Monotonicity checked over every priority / urgency combination
"""

from datetime import UTC, date, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from core.config import PolicyConfig
from core.domain.models import ComplianceStatus, Priority, UrgencyLevel
from core.services.policy_evaluator import (
    InvalidConfiguration,
    PolicyEvaluator,
    derive_compliance_status,
    derive_next_maintenance_date,
    derive_request_escalation,
)

calendar_dates = st.dates(min_value=date(2000, 1, 1), max_value=date(2100, 1, 1))


class TestComplianceStatus:
    @given(now=calendar_dates)
    def test_no_expiry_is_always_valid(self, now: date) -> None:
        assert derive_compliance_status(None, now) == ComplianceStatus.VALID

    @given(now=calendar_dates, days_past=st.integers(min_value=1, max_value=3650))
    def test_past_expiry_is_expired(self, now: date, days_past: int) -> None:
        expiry = now - timedelta(days=days_past)
        assert derive_compliance_status(expiry, now) == ComplianceStatus.EXPIRED

    @given(now=calendar_dates, days_left=st.integers(min_value=0, max_value=29))
    def test_expiry_inside_window_is_pending_renewal(self, now: date, days_left: int) -> None:
        expiry = now + timedelta(days=days_left)
        assert derive_compliance_status(expiry, now) == ComplianceStatus.PENDING_RENEWAL

    @given(now=calendar_dates, days_left=st.integers(min_value=30, max_value=3650))
    def test_expiry_beyond_window_is_valid(self, now: date, days_left: int) -> None:
        expiry = now + timedelta(days=days_left)
        assert derive_compliance_status(expiry, now) == ComplianceStatus.VALID

    @given(
        expiry=st.none() | calendar_dates,
        now=calendar_dates,
        window=st.integers(min_value=1, max_value=365),
    )
    def test_same_inputs_same_status(self, expiry: date | None, now: date, window: int) -> None:
        first = derive_compliance_status(expiry, now, window)
        second = derive_compliance_status(expiry, now, window)
        assert first == second

    def test_expiry_today_needs_renewal(self) -> None:
        today = date(2024, 5, 1)
        assert derive_compliance_status(today, today) == ComplianceStatus.PENDING_RENEWAL

    def test_custom_renewal_window(self) -> None:
        now = date(2024, 5, 1)
        expiry = now + timedelta(days=45)

        assert derive_compliance_status(expiry, now) == ComplianceStatus.VALID
        assert (
            derive_compliance_status(expiry, now, renewal_window_days=60)
            == ComplianceStatus.PENDING_RENEWAL
        )

    def test_expiry_near_calendar_end_does_not_overflow(self) -> None:
        now = date(9999, 12, 20)

        assert derive_compliance_status(date(9999, 12, 31), now) == (
            ComplianceStatus.PENDING_RENEWAL
        )
        assert derive_compliance_status(date.max, date.max) == ComplianceStatus.PENDING_RENEWAL

    def test_datetime_now_is_reduced_to_its_date(self) -> None:
        now = datetime(2024, 5, 1, 23, 59, tzinfo=UTC)
        assert derive_compliance_status(date(2024, 5, 1), now) == ComplianceStatus.PENDING_RENEWAL
        assert derive_compliance_status(date(2024, 4, 30), now) == ComplianceStatus.EXPIRED


class TestNextMaintenanceDate:
    def test_falls_back_to_evaluation_date(self) -> None:
        assert derive_next_maintenance_date(None, 90, date(2024, 1, 1)) == date(2024, 3, 31)

    def test_counts_from_last_maintenance(self) -> None:
        result = derive_next_maintenance_date(date(2024, 1, 1), 30, date(2024, 6, 1))
        assert result == date(2024, 1, 31)

    @pytest.mark.parametrize("interval_days", [0, -1, -365])
    def test_non_positive_interval_raises(self, interval_days: int) -> None:
        with pytest.raises(InvalidConfiguration) as exc_info:
            derive_next_maintenance_date(date(2024, 1, 1), interval_days, date(2024, 6, 1))

        assert exc_info.value.interval_days == interval_days

    def test_invalid_configuration_is_a_value_error(self) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            derive_next_maintenance_date(None, 0, date(2024, 1, 1))

    def test_interval_past_calendar_end_raises_invalid_configuration(self) -> None:
        with pytest.raises(InvalidConfiguration, match="runs past") as exc_info:
            derive_next_maintenance_date(date(9999, 12, 1), 90, date(2024, 1, 1))

        assert exc_info.value.interval_days == 90
        assert isinstance(exc_info.value.__cause__, OverflowError)

    def test_datetime_now_yields_a_date(self) -> None:
        now = datetime(2024, 1, 1, 18, 30, tzinfo=UTC)
        result = derive_next_maintenance_date(None, 1, now)
        assert result == date(2024, 1, 2)
        assert not isinstance(result, datetime)

    @given(
        last=st.none() | calendar_dates,
        interval=st.integers(min_value=1, max_value=3650),
        now=calendar_dates,
    )
    def test_result_is_interval_after_base(
        self, last: date | None, interval: int, now: date
    ) -> None:
        base = last if last is not None else now
        assert derive_next_maintenance_date(last, interval, now) - base == timedelta(days=interval)


class TestRequestEscalation:
    def test_emergency_raises_priority_to_urgent(self) -> None:
        result = derive_request_escalation(
            UrgencyLevel.EMERGENCY, False, Priority.LOW, False
        )
        assert result == (Priority.URGENT, False)

    def test_critical_department_sets_patient_impact(self) -> None:
        result = derive_request_escalation(UrgencyLevel.ROUTINE, True, Priority.HIGH, False)
        assert result == (Priority.HIGH, True)

    def test_critical_urgency_escalates(self) -> None:
        result = derive_request_escalation(UrgencyLevel.CRITICAL, True, Priority.MEDIUM, False)
        assert result == (Priority.URGENT, True)

    @pytest.mark.parametrize("urgency", [UrgencyLevel.ROUTINE, UrgencyLevel.URGENT])
    def test_lower_urgencies_leave_priority_alone(self, urgency: UrgencyLevel) -> None:
        result = derive_request_escalation(urgency, False, Priority.LOW, False)
        assert result == (Priority.LOW, False)

    @given(
        urgency=st.sampled_from(UrgencyLevel),
        critical=st.booleans(),
        priority=st.sampled_from(Priority),
        impact=st.booleans(),
    )
    def test_escalation_never_lowers(
        self, urgency: UrgencyLevel, critical: bool, priority: Priority, impact: bool
    ) -> None:
        new_priority, new_impact = derive_request_escalation(urgency, critical, priority, impact)

        assert new_priority.rank >= priority.rank
        assert new_impact or not impact

    @given(
        urgency=st.sampled_from(UrgencyLevel),
        critical=st.booleans(),
        priority=st.sampled_from(Priority),
        impact=st.booleans(),
    )
    def test_escalation_is_idempotent(
        self, urgency: UrgencyLevel, critical: bool, priority: Priority, impact: bool
    ) -> None:
        once = derive_request_escalation(urgency, critical, priority, impact)
        twice = derive_request_escalation(urgency, critical, *once)
        assert once == twice


class TestPolicyEvaluator:
    def test_uses_configured_renewal_window(self) -> None:
        evaluator = PolicyEvaluator(PolicyConfig(renewal_window_days=60))
        now = date(2024, 5, 1)

        status = evaluator.compliance_status(now + timedelta(days=45), now)

        assert status == ComplianceStatus.PENDING_RENEWAL

    def test_default_config_matches_thirty_day_window(self) -> None:
        evaluator = PolicyEvaluator()
        now = date(2024, 5, 1)

        assert evaluator.compliance_status(now + timedelta(days=29), now) == (
            ComplianceStatus.PENDING_RENEWAL
        )
        assert evaluator.compliance_status(now + timedelta(days=30), now) == (
            ComplianceStatus.VALID
        )

    def test_missing_interval_uses_configured_default(self) -> None:
        evaluator = PolicyEvaluator(PolicyConfig(default_maintenance_interval_days=10))

        result = evaluator.next_maintenance_date(None, None, date(2024, 1, 1))

        assert result == date(2024, 1, 11)

    def test_explicit_zero_interval_still_raises(self) -> None:
        evaluator = PolicyEvaluator()

        with pytest.raises(InvalidConfiguration):
            evaluator.next_maintenance_date(date(2024, 1, 1), 0, date(2024, 6, 1))

    def test_request_escalation_delegates(self) -> None:
        evaluator = PolicyEvaluator()

        result = evaluator.request_escalation(UrgencyLevel.EMERGENCY, True, Priority.URGENT, True)

        assert result == (Priority.URGENT, True)
