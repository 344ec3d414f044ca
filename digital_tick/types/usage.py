"""Usage metering types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Tier(str, Enum):
    """Plan classification for quota purposes."""

    METERED = "metered"
    UNLIMITED = "unlimited"


@dataclass
class UsageRecord:
    """Billable requests consumed by one identity within one accounting period."""

    period: str
    count: int = 0

    def to_dict(self) -> dict:
        return {"period": self.period, "count": self.count}

    @classmethod
    def from_dict(cls, data: dict) -> "UsageRecord":
        period = data["period"]
        count = int(data["count"])
        if not isinstance(period, str) or count < 0:
            raise ValueError(f"Invalid usage record: {data!r}")
        return cls(period=period, count=count)


@dataclass(frozen=True)
class Allowed:
    """Request admitted. Counters are None for the unlimited tier."""

    remaining: int | None = None
    used: int | None = None

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    """Request rejected because the period's allowance is spent."""

    limit: int
    used: int

    @property
    def allowed(self) -> bool:
        return False


QuotaDecision = Union[Allowed, Denied]
