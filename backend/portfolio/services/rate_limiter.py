import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

logger = logging.getLogger(__name__)

DAILY_REQUEST_LIMIT = 200


@dataclass
class RequestUsage:
    count: int
    limit: int
    remaining: int
    date: date

    def to_dict(self):
        return {"count": self.count, "limit": self.limit, "remaining": self.remaining}


class DailyRequestCounter:
    """Process-wide ceiling on chat completions per calendar day.

    One counter is shared by every caller. The reset happens lazily: the
    first call on a new day zeroes the count, there is no timer. State lives
    in this process only, so each instance of a scaled-out deployment counts
    on its own and a restart starts from zero.
    """

    def __init__(self, limit: int = DAILY_REQUEST_LIMIT, today: Callable[[], date] = date.today):
        self.limit = limit
        self._today = today
        self.count = 0
        self.date = today()

    def _roll_date(self) -> None:
        today = self._today()
        if today != self.date:
            logger.info(f"Daily chat counter reset: {self.date} had {self.count} requests")
            self.count = 0
            self.date = today

    def try_consume(self) -> bool:
        self._roll_date()
        if self.count >= self.limit:
            return False
        self.count += 1
        return True

    def usage(self) -> RequestUsage:
        self._roll_date()
        return RequestUsage(
            count=self.count,
            limit=self.limit,
            remaining=max(0, self.limit - self.count),
            date=self.date,
        )
