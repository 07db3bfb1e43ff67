"""
Domain models/entities
"""
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import InvalidDimensions, InvalidExpression, InvalidPayload
from .landmarks import LandmarkSet
from .policy import validate_expression


def dimensions_valid(image_width: float, image_height: float) -> bool:
    return all(math.isfinite(d) and d > 0 for d in (image_width, image_height))


@dataclass(frozen=True)
class BoundingBox:
    """Face bounding box (pixels, or 0-1 once normalized)"""
    x: float
    y: float
    width: float
    height: float

    def normalized(self, image_width: float, image_height: float) -> "BoundingBox":
        """Scale to fractions of the source image"""
        if not dimensions_valid(image_width, image_height):
            raise InvalidDimensions(
                f"image dimensions must be finite and positive, got {image_width}x{image_height}"
            )
        return BoundingBox(
            x=self.x / image_width,
            y=self.y / image_height,
            width=self.width / image_width,
            height=self.height / image_height,
        )

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data) -> "BoundingBox":
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidPayload(f"box needs numeric x, y, width, height: {e}") from e


@dataclass(frozen=True)
class Detection:
    """One face as reported by the landmark detector"""
    landmarks: LandmarkSet
    box: BoundingBox
    expressions: Optional[Dict[str, float]] = None
    confidence: float = 1.0

    @classmethod
    def from_dict(cls, data) -> "Detection":
        """Parse {"landmarks": [[x, y] x 68], "box": {...}, "expressions": {...}}"""
        if not isinstance(data, dict):
            raise InvalidPayload("each face must be an object")
        if "landmarks" not in data or "box" not in data:
            raise InvalidPayload("each face needs landmarks and box")

        expressions = data.get("expressions")
        if expressions is not None:
            if not isinstance(expressions, dict):
                raise InvalidPayload("expressions must map labels to probabilities")
            try:
                expressions = {str(k): float(v) for k, v in expressions.items()}
            except (TypeError, ValueError) as e:
                raise InvalidPayload(f"expression probabilities must be numeric: {e}") from e
            try:
                validate_expression(expressions)
            except InvalidExpression as e:
                raise InvalidPayload(str(e)) from e

        return cls(
            landmarks=LandmarkSet.from_points(data["landmarks"]),
            box=BoundingBox.from_dict(data["box"]),
            expressions=expressions,
        )


@dataclass(frozen=True)
class FaceResult:
    """Scored face"""
    score: int
    is_genuine: bool
    verdict: str
    metrics: Dict[str, int]
    bounding_box: BoundingBox

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "score": self.score,
            "isGenuine": self.is_genuine,
            "verdict": self.verdict,
            "metrics": dict(self.metrics),
            "boundingBox": self.bounding_box.to_dict(),
        }


@dataclass(frozen=True)
class RejectedFace:
    """Face dropped from the response because it could not be scored"""
    index: int
    error: str
    message: str

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "error": self.error,
            "message": self.message,
        }


@dataclass
class AnalysisResult:
    """Result of scoring every face of one image"""
    people: List[FaceResult] = field(default_factory=list)
    rejected: List[RejectedFace] = field(default_factory=list)
    processing_time_ms: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        data = {"people": [p.to_dict() for p in self.people]}
        if self.rejected:
            data["rejected"] = [r.to_dict() for r in self.rejected]
        return data


@dataclass
class HealthStatus:
    """Service health status"""
    status: str
    policy: str
    detector_ready: bool

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "policy": self.policy,
            "detectorReady": self.detector_ready,
        }
