"""
Core services for the application.

This package contains the policy evaluator, the write-path hooks that apply it
to records, and the dashboard aggregations.
"""

from .dashboard import (
    AnalyticsReport,
    DashboardSummary,
    TrendPoint,
    build_analytics,
    build_dashboard_summary,
)
from .policy_evaluator import (
    InvalidConfiguration,
    PolicyEvaluator,
    derive_compliance_status,
    derive_next_maintenance_date,
    derive_request_escalation,
)
from .record_hooks import RecordHooks, Result

__all__ = [
    "AnalyticsReport",
    "DashboardSummary",
    "InvalidConfiguration",
    "PolicyEvaluator",
    "RecordHooks",
    "Result",
    "TrendPoint",
    "build_analytics",
    "build_dashboard_summary",
    "derive_compliance_status",
    "derive_next_maintenance_date",
    "derive_request_escalation",
]
