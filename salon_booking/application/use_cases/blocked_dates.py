from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

from salon_booking.application.exceptions import DateNotBookable
from salon_booking.application.ports.blocked_date_store import BlockedDateStorePort
from salon_booking.application.utils.blocked_dates import as_calendar_date, expand_range, is_blocked
from salon_booking.domain.entities.blocked_date import BlockedDate


@dataclass(frozen=True)
class BulkBlockResult:
    blocked: list[date] = field(default_factory=list)
    failed: list[date] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.blocked)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


class BlockedDatesUseCase:
    def __init__(
        self,
        store: BlockedDateStorePort,
        timezone: ZoneInfo,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._timezone = timezone
        self._today = today or (lambda: datetime.now(self._timezone).date())
        self._logger = logging.getLogger(__name__)

    def list_blocked(self, practitioner_id: str) -> list[BlockedDate]:
        return self._store.list_blocked(practitioner_id)

    def is_blocked(self, practitioner_id: str, value: date | datetime | str) -> bool:
        return is_blocked(value, self._store.dates(practitioner_id))

    def block_date(self, practitioner_id: str, value: date | datetime | str, reason: str | None = None) -> BlockedDate:
        blocked_date = as_calendar_date(value)
        self._reject_past(blocked_date)
        entry = BlockedDate(blocked_date=blocked_date, reason=reason or None)
        self._store.add(practitioner_id, entry)
        self._logger.info(
            "Date blocked",
            extra={"practitioner_id": practitioner_id, "date": blocked_date.isoformat(), "reason": reason},
        )
        return entry

    def block_range(
        self,
        practitioner_id: str,
        from_date: date | datetime | str,
        to_date: date | datetime | str,
        reason: str | None = None,
    ) -> BulkBlockResult:
        """
        Block every day from from_date to to_date inclusive, one row per day.
        A failed insert is counted and the remaining days are still attempted.
        """
        dates = expand_range(from_date, to_date)
        self._reject_past(dates[0])

        result = BulkBlockResult()
        for day in dates:
            try:
                self._store.add(practitioner_id, BlockedDate(blocked_date=day, reason=reason or None))
                result.blocked.append(day)
            except Exception as e:
                self._logger.error(
                    "Error blocking date",
                    extra={"practitioner_id": practitioner_id, "date": day.isoformat(), "error": str(e)},
                )
                result.failed.append(day)

        self._logger.info(
            "Date range blocked",
            extra={
                "practitioner_id": practitioner_id,
                "success_count": result.success_count,
                "failure_count": result.failure_count,
            },
        )
        return result

    def unblock(self, practitioner_id: str, value: date | datetime | str) -> bool:
        blocked_date = as_calendar_date(value)
        removed = self._store.remove(practitioner_id, blocked_date)
        self._logger.info(
            "Date unblocked" if removed else "Date was not blocked",
            extra={"practitioner_id": practitioner_id, "date": blocked_date.isoformat()},
        )
        return removed

    def _reject_past(self, first_date: date) -> None:
        if first_date < self._today():
            raise DateNotBookable(first_date, "Cannot block dates in the past")
