from __future__ import annotations
from typing import Any, Dict, List

from .base import Check, Finding
from ..azure.snapshots import APP_INSIGHTS, LOG_ANALYTICS, RetentionSnapshot

DEFAULT_MIN_RETENTION_DAYS = 90


class _RetentionCheck(Check):
    def evaluate(self, res: RetentionSnapshot, ctx: Dict[str, Any]) -> List[Finding]:
        min_days = int(ctx.get("min_retention_days", DEFAULT_MIN_RETENTION_DAYS))
        days = res.retention_in_days
        shown = "not set" if days is None else f"{days} days"
        return [self.result(
            days is not None and days >= min_days, res.name,
            f"{res.name} retention is {shown}",
            f"{res.name} retention is {shown} (minimum {min_days})",
            evidence=f"retentionInDays={days}",
        )]


class AppInsightsRetentionCheck(_RetentionCheck):
    check_id = "CV-MON-001"
    category = APP_INSIGHTS


class LogAnalyticsRetentionCheck(_RetentionCheck):
    check_id = "CV-MON-002"
    category = LOG_ANALYTICS
