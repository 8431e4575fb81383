from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from cashmemo.models import to_money
from cashmemo.models.activity_log import ActivityLog
from cashmemo.repositories.base import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityService:
    def __init__(self, repo: ActivityLogRepository) -> None:
        self.repo = repo

    def log(
        self,
        customer_name: str,
        activity_type: str,
        *,
        description: str = "",
        amount: Decimal | int = 0,
        on: date | None = None,
    ) -> ActivityLog:
        """Append an activity log entry. Raises on failure."""
        entry = ActivityLog(
            customer_name=customer_name,
            activity_type=activity_type,
            description=description,
            amount=to_money(amount),
        )
        if on is not None:
            entry.date = on
        result = self.repo.create(entry)
        logger.info(
            "Activity logged: customer=%s type=%s amount=%s",
            customer_name,
            activity_type,
            result.amount,
        )
        return result

    def safe_log(self, *args, **kwargs) -> ActivityLog | None:
        """Append an activity log entry, swallowing any exceptions."""
        try:
            return self.log(*args, **kwargs)
        except Exception:
            logger.exception("Failed to write activity log")
            return None

    def list_by_customer(self, customer_name: str) -> list[ActivityLog]:
        return self.repo.list_by_customer(customer_name)
