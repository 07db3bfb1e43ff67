"""
Smile analysis service - application layer
"""
import hashlib
import json
import logging
import time
from typing import List, Optional, Sequence

import numpy as np

from domain.assembler import assemble_detection
from domain.errors import (
    DegenerateGeometry,
    InvalidDimensions,
    InvalidExpression,
    InvalidPayload,
)
from domain.interfaces import (
    LandmarkDetectorInterface,
    ResultCacheInterface,
    UsageTrackerInterface,
)
from domain.models import (
    AnalysisResult,
    Detection,
    HealthStatus,
    RejectedFace,
    dimensions_valid,
)
from domain.policy import WeightPolicy

logger = logging.getLogger(__name__)


def payload_hash(payload: dict, policy_name: str) -> str:
    """Content hash of a request body under a given policy"""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.md5(f"{policy_name}:{canonical}".encode("utf-8")).hexdigest()


class SmileAnalysisService:
    """Service for scoring smiles on detected faces"""

    def __init__(
        self,
        policy: WeightPolicy,
        cache: Optional[ResultCacheInterface] = None,
        tracker: Optional[UsageTrackerInterface] = None,
        detector: Optional[LandmarkDetectorInterface] = None,
        max_faces: int = 20,
    ):
        self.policy = policy
        self.cache = cache
        self.tracker = tracker
        self.detector = detector
        self.max_faces = max_faces

    def analyze(
        self,
        detections: Sequence[Detection],
        image_width: float,
        image_height: float,
    ) -> AnalysisResult:
        """Score every detection, in detector order.

        A face with degenerate geometry or an out-of-range expression
        probability is rejected on its own; the rest of the batch is still
        scored.
        """
        if not dimensions_valid(image_width, image_height):
            raise InvalidDimensions(
                f"image dimensions must be finite and positive, got {image_width}x{image_height}"
            )

        start_time = time.time()
        result = AnalysisResult()

        for index, detection in enumerate(detections):
            try:
                result.people.append(
                    assemble_detection(detection, image_width, image_height, self.policy)
                )
            except (DegenerateGeometry, InvalidExpression) as e:
                logger.warning(f"Face {index} rejected: {e}")
                result.rejected.append(RejectedFace(
                    index=index,
                    error=type(e).__name__,
                    message=str(e),
                ))

        result.processing_time_ms = int((time.time() - start_time) * 1000)
        return result

    def analyze_payload(self, payload: dict) -> dict:
        """Score an analysis request body and return the response body"""
        start_time = time.time()
        request_number = self.tracker.record_request() if self.tracker else 0
        logger.info(f"Analysis request #{request_number}")

        if not isinstance(payload, dict):
            raise InvalidPayload("request body must be a JSON object")

        key = payload_hash(payload, self.policy.name)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                if self.tracker:
                    self.tracker.record_cache_hit()
                logger.info(f"Cache hit for request #{request_number}")
                return cached

        image_width, image_height, detections = self._parse_payload(payload)
        result = self.analyze(detections, image_width, image_height)
        response = result.to_dict()

        elapsed_ms = (time.time() - start_time) * 1000
        if self.tracker:
            self.tracker.record_processing_time(elapsed_ms)
            daily = self.tracker.add_analyses(len(result.people))
            logger.info(f"Daily count: {daily} (+{len(result.people)})")
        logger.info(
            f"Scored {len(result.people)} face(s), rejected {len(result.rejected)} "
            f"in {elapsed_ms:.1f}ms"
        )

        if self.cache is not None:
            self.cache.set(key, response)
        return response

    def analyze_frame(self, image: np.ndarray) -> AnalysisResult:
        """Detect faces in an already-decoded frame and score them"""
        if self.detector is None:
            raise RuntimeError("No landmark detector configured")

        height, width = image.shape[:2]
        detections = self.detector.detect(image)
        logger.info(f"Found {len(detections)} face(s) in {width}x{height} frame")
        return self.analyze(detections[:self.max_faces], width, height)

    def _parse_payload(self, payload: dict):
        try:
            image_width = float(payload["imageWidth"])
            image_height = float(payload["imageHeight"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidPayload(f"imageWidth and imageHeight are required numbers: {e}") from e

        faces = payload.get("faces", [])
        if not isinstance(faces, list):
            raise InvalidPayload("faces must be a list")
        if len(faces) > self.max_faces:
            raise InvalidPayload(f"at most {self.max_faces} faces per request, got {len(faces)}")

        detections: List[Detection] = [Detection.from_dict(face) for face in faces]
        return image_width, image_height, detections

    def get_health(self) -> HealthStatus:
        """Get service health status"""
        return HealthStatus(
            status="healthy",
            policy=self.policy.name,
            detector_ready=self.detector.is_ready() if self.detector else False,
        )

    def is_ready(self) -> bool:
        """Check if service is ready"""
        return self.detector.is_ready() if self.detector else True
