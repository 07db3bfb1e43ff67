"""
Request statistics and daily analyses counter
"""
import logging
import threading
from datetime import date
from typing import Callable

from domain.interfaces import UsageTrackerInterface

logger = logging.getLogger(__name__)


class UsageTracker(UsageTrackerInterface):
    """Process-wide counters, reset to the baseline when the day changes"""

    def __init__(self, daily_baseline: int = 450, today: Callable[[], date] = date.today):
        self.daily_baseline = daily_baseline
        self._today = today
        self._lock = threading.Lock()
        self._day = today()
        self._daily_count = daily_baseline
        self._requests = 0
        self._cache_hits = 0
        self._total_processing_ms = 0.0

    def _roll_day(self):
        today = self._today()
        if today != self._day:
            self._day = today
            self._daily_count = self.daily_baseline
            logger.info(f"Daily counter reset to baseline {self.daily_baseline}")

    def record_request(self) -> int:
        with self._lock:
            self._requests += 1
            return self._requests

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hits += 1

    def record_processing_time(self, elapsed_ms: float) -> None:
        with self._lock:
            self._total_processing_ms += elapsed_ms

    def add_analyses(self, count: int) -> int:
        with self._lock:
            self._roll_day()
            self._daily_count += count
            return self._daily_count

    def daily_counter(self) -> dict:
        with self._lock:
            self._roll_day()
            return {"count": self._daily_count, "date": self._day.isoformat()}

    def stats(self) -> dict:
        with self._lock:
            requests = self._requests
            hit_rate = (self._cache_hits / requests * 100) if requests else 0.0
            avg_ms = (self._total_processing_ms / requests) if requests else 0.0
            return {
                "totalRequests": requests,
                "cacheHits": self._cache_hits,
                "cacheHitRate": f"{hit_rate:.1f}%",
                "avgProcessingTime": f"{avg_ms:.2f}ms",
            }
