"""
Face result assembly
"""
from typing import Mapping, Optional

from .landmarks import LandmarkSet
from .metrics import compute_metrics
from .models import BoundingBox, Detection, FaceResult
from .policy import WeightPolicy, score


def assemble_face_result(
    landmarks: LandmarkSet,
    box: BoundingBox,
    image_width: float,
    image_height: float,
    policy: WeightPolicy,
    expression: Optional[Mapping[str, float]] = None,
) -> FaceResult:
    """Score one face and package it with its normalized bounding box.

    Raises InvalidDimensions for a non-positive image size and
    DegenerateGeometry when an active metric cannot be computed.
    """
    normalized_box = box.normalized(image_width, image_height)
    metrics = compute_metrics(landmarks, policy.active_metrics)
    final = score(metrics, policy, expression)
    return FaceResult(
        score=final.score,
        is_genuine=final.is_genuine,
        verdict=final.verdict,
        metrics=metrics,
        bounding_box=normalized_box,
    )


def assemble_detection(
    detection: Detection,
    image_width: float,
    image_height: float,
    policy: WeightPolicy,
) -> FaceResult:
    return assemble_face_result(
        detection.landmarks,
        detection.box,
        image_width,
        image_height,
        policy,
        detection.expressions,
    )
