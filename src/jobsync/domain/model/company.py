"""Company descriptor passed in by the transport layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True, slots=True)
class Company:
    id: str
    timezone: str = "UTC"

    @property
    def tz(self) -> tzinfo:
        """Company zone; unknown or blank zone names fall back to UTC."""

        try:
            return ZoneInfo(self.timezone) if self.timezone else UTC
        except (ZoneInfoNotFoundError, ValueError):
            return UTC

    def local_date(self, instant: datetime) -> date:
        return instant.astimezone(self.tz).date()
