"""Tests for the smile analysis service."""

from datetime import date

import numpy as np
import pytest

from application.smile_service import SmileAnalysisService, payload_hash
from domain.errors import (
    InvalidDimensions,
    InvalidExpression,
    InvalidLandmarks,
    InvalidPayload,
)
from domain.interfaces import LandmarkDetectorInterface
from domain.models import BoundingBox, Detection
from domain.policy import BLEND_POLICY, DUCHENNE_POLICY
from infrastructure.result_cache import InMemoryResultCache
from infrastructure.usage_tracker import UsageTracker
from tests.fixtures.synthetic_landmarks import (
    make_face_payload,
    make_face_points,
    make_landmarks,
)


class MockDetector(LandmarkDetectorInterface):
    def __init__(self, detections=None, ready=True):
        self.detections = detections or []
        self.ready = ready
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        return list(self.detections)

    def get_health(self):
        return {"status": "ok"}

    def is_ready(self):
        return self.ready


def _service(**kwargs):
    params = dict(
        policy=DUCHENNE_POLICY,
        cache=InMemoryResultCache(),
        tracker=UsageTracker(daily_baseline=450, today=lambda: date(2026, 1, 1)),
    )
    params.update(kwargs)
    return SmileAnalysisService(**params)


def _payload(*faces):
    return {"imageWidth": 640, "imageHeight": 480, "faces": list(faces)}


class TestAnalyze:
    def test_zero_faces_is_empty_result(self):
        result = _service().analyze([], 640, 480)
        assert result.people == []
        assert result.to_dict() == {"people": []}

    def test_output_mirrors_detector_order(self):
        detections = [
            Detection(landmarks=make_landmarks(eye_width=20), box=BoundingBox(0, 0, 64, 48)),
            Detection(landmarks=make_landmarks(eye_width=40), box=BoundingBox(64, 48, 64, 48)),
        ]
        result = _service().analyze(detections, 640, 480)
        assert [p.metrics["eyeConstriction"] for p in result.people] == [100, 0]
        assert result.people[1].bounding_box == BoundingBox(0.1, 0.1, 0.1, 0.1)

    def test_degenerate_face_does_not_abort_batch(self):
        detections = [
            Detection(landmarks=make_landmarks(collapse_left_eye=True), box=BoundingBox(0, 0, 10, 10)),
            Detection(landmarks=make_landmarks(), box=BoundingBox(0, 0, 10, 10)),
        ]
        result = _service().analyze(detections, 640, 480)
        assert len(result.people) == 1
        assert result.people[0].score == 57
        assert [r.index for r in result.rejected] == [0]
        assert result.rejected[0].error == "DegenerateGeometry"
        assert result.to_dict()["rejected"][0]["index"] == 0

    def test_invalid_dimensions(self):
        with pytest.raises(InvalidDimensions):
            _service().analyze([], 0, 480)

    @pytest.mark.parametrize("width, height", [
        (float("nan"), 480), (640, float("inf")), (float("-inf"), 480),
    ])
    def test_non_finite_dimensions(self, width, height):
        with pytest.raises(InvalidDimensions):
            _service().analyze([], width, height)

    @pytest.mark.parametrize("probability", [3.0, -0.1, float("nan")])
    def test_bad_expression_rejects_only_that_face(self, probability):
        detections = [
            Detection(landmarks=make_landmarks(), box=BoundingBox(0, 0, 10, 10),
                      expressions={"happy": probability}),
            Detection(landmarks=make_landmarks(), box=BoundingBox(0, 0, 10, 10),
                      expressions={"happy": 0.92}),
        ]
        result = _service(policy=BLEND_POLICY).analyze(detections, 640, 480)
        assert len(result.people) == 1
        assert result.people[0].score <= 100
        assert [r.index for r in result.rejected] == [0]
        assert result.rejected[0].error == "InvalidExpression"


class TestAnalyzePayload:
    def test_scores_faces(self):
        response = _service().analyze_payload(_payload(make_face_payload()))
        assert len(response["people"]) == 1
        person = response["people"][0]
        assert person["score"] == 57
        assert person["boundingBox"] == {"x": 0.3125, "y": 0.25, "width": 0.375, "height": 0.5}
        assert "rejected" not in response

    def test_no_faces(self):
        assert _service().analyze_payload(_payload()) == {"people": []}

    def test_expressions_feed_blend_policy(self):
        service = _service(policy=BLEND_POLICY)
        response = service.analyze_payload(_payload(make_face_payload(expressions={"happy": 0.92})))
        assert response["people"][0]["score"] == 78
        assert response["people"][0]["verdict"] == "Genuine Joy! 😄"

    def test_cache_hit_skips_scoring(self):
        service = _service()
        payload = _payload(make_face_payload())
        first = service.analyze_payload(payload)
        second = service.analyze_payload(payload)
        assert first == second
        stats = service.tracker.stats()
        assert stats["totalRequests"] == 2
        assert stats["cacheHits"] == 1
        assert stats["cacheHitRate"] == "50.0%"
        # cached responses are not counted again
        assert service.tracker.daily_counter()["count"] == 451

    def test_without_collaborators(self):
        service = SmileAnalysisService(policy=DUCHENNE_POLICY)
        response = service.analyze_payload(_payload(make_face_payload(), make_face_payload()))
        assert len(response["people"]) == 2

    def test_daily_counter_counts_scored_faces(self):
        service = _service()
        service.analyze_payload(_payload(make_face_payload(), make_face_payload()))
        assert service.tracker.daily_counter() == {"count": 452, "date": "2026-01-01"}

    @pytest.mark.parametrize("payload", [
        {"faces": []},
        {"imageWidth": "wide", "imageHeight": 480, "faces": []},
        {"imageWidth": 640, "imageHeight": 480, "faces": {}},
        {"imageWidth": 640, "imageHeight": 480, "faces": [{"landmarks": []}]},
        {"imageWidth": 640, "imageHeight": 480, "faces": ["face"]},
        {"imageWidth": 640, "imageHeight": 480,
         "faces": [{"landmarks": make_face_points(), "box": {"x": 1}}]},
        {"imageWidth": 640, "imageHeight": 480,
         "faces": [make_face_payload(expressions={"happy": "very"})]},
        {"imageWidth": 640, "imageHeight": 480,
         "faces": [make_face_payload(expressions={"happy": 3.0})]},
        {"imageWidth": 640, "imageHeight": 480,
         "faces": [make_face_payload(expressions={"happy": float("nan")})]},
    ])
    def test_malformed_payload(self, payload):
        with pytest.raises(InvalidPayload):
            _service().analyze_payload(payload)

    @pytest.mark.parametrize("width", ["nan", "inf", float("nan")])
    def test_non_finite_payload_dimensions(self, width):
        payload = {"imageWidth": width, "imageHeight": 480, "faces": []}
        with pytest.raises(InvalidDimensions):
            _service().analyze_payload(payload)

    def test_wrong_landmark_count(self):
        with pytest.raises(InvalidLandmarks):
            _service().analyze_payload(_payload(make_face_payload(points=make_face_points()[:60])))

    def test_too_many_faces(self):
        service = _service(max_faces=1)
        with pytest.raises(InvalidPayload):
            service.analyze_payload(_payload(make_face_payload(), make_face_payload()))

    def test_payload_hash_depends_on_policy(self):
        payload = _payload(make_face_payload())
        assert payload_hash(payload, "duchenne") == payload_hash(dict(payload), "duchenne")
        assert payload_hash(payload, "duchenne") != payload_hash(payload, "blend")


class TestAnalyzeFrame:
    def test_uses_detector(self):
        detector = MockDetector([
            Detection(landmarks=make_landmarks(), box=BoundingBox(200, 120, 240, 240)),
        ])
        service = _service(detector=detector)
        result = service.analyze_frame(np.zeros((480, 640, 3), dtype=np.uint8))
        assert detector.calls == 1
        assert result.people[0].bounding_box == BoundingBox(0.3125, 0.25, 0.375, 0.5)

    def test_no_detector(self):
        with pytest.raises(RuntimeError):
            _service().analyze_frame(np.zeros((480, 640, 3), dtype=np.uint8))

    def test_readiness_follows_detector(self):
        assert _service().is_ready() is True
        assert _service(detector=MockDetector(ready=False)).is_ready() is False
        assert _service(detector=MockDetector()).get_health().detector_ready is True
