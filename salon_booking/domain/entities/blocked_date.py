from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class BlockedDate:
    blocked_date: date
    reason: str | None = None
