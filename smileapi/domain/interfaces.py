"""
Domain interfaces (ports)
"""
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .models import Detection


class LandmarkDetectorInterface(ABC):
    """Interface for the face detection / landmark extraction service"""

    @abstractmethod
    def detect(self, image: np.ndarray) -> List[Detection]:
        """Detect faces with 68-point landmarks in a decoded BGR image"""
        pass

    @abstractmethod
    def get_health(self) -> dict:
        """Get detector health details"""
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        """Check if the detector is ready"""
        pass


class ResultCacheInterface(ABC):
    """Interface for caching serialized analysis results"""

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """Return the cached result, or None when missing or expired"""
        pass

    @abstractmethod
    def set(self, key: str, value: dict) -> None:
        """Store a result"""
        pass


class UsageTrackerInterface(ABC):
    """Interface for request and usage counters"""

    @abstractmethod
    def record_request(self) -> int:
        """Count an incoming request; returns the running total"""
        pass

    @abstractmethod
    def record_cache_hit(self) -> None:
        pass

    @abstractmethod
    def record_processing_time(self, elapsed_ms: float) -> None:
        pass

    @abstractmethod
    def add_analyses(self, count: int) -> int:
        """Add scored faces to today's counter; returns the new count"""
        pass

    @abstractmethod
    def daily_counter(self) -> dict:
        """Today's counter as {"count", "date"}"""
        pass

    @abstractmethod
    def stats(self) -> dict:
        """Request statistics"""
        pass
