from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class CandidateSlot:
    start_time: time
    available: bool

    @property
    def time_24h(self) -> str:
        return self.start_time.strftime("%H:%M")

    def to_dict(self) -> dict[str, object]:
        return {"time": self.time_24h, "available": self.available}
