"""Tests for the landmark set and index table."""

import numpy as np
import pytest

from domain.errors import InvalidLandmarks
from domain.landmarks import LandmarkSet, Point2D, REGION_SIZES, centroid


class TestLandmarkSet:
    def test_region_sizes(self, landmarks):
        assert len(landmarks.jaw) == 17
        assert len(landmarks.nose) == 9
        assert len(landmarks.left_eye) == 6
        assert len(landmarks.right_eye) == 6
        assert len(landmarks.mouth) == 20

    def test_named_accessors_follow_ibug_indices(self, face_points):
        landmarks = LandmarkSet.from_points(face_points)
        assert landmarks.left_mouth_corner() == Point2D(*face_points[48])
        assert landmarks.right_mouth_corner() == Point2D(*face_points[54])
        assert landmarks.upper_lip_center() == Point2D(*face_points[62])
        assert landmarks.lower_lip_center() == Point2D(*face_points[66])
        assert landmarks.nose_bridge() == Point2D(*face_points[27])
        assert landmarks.nose_tip() == Point2D(*face_points[30])
        assert landmarks.nose_base() == Point2D(*face_points[33])
        assert landmarks.left_eye[0] == Point2D(*face_points[36])
        assert landmarks.right_eye[0] == Point2D(*face_points[42])

    def test_accepts_numpy_with_depth(self, face_points):
        """(68, 3) arrays from 3D landmark models keep only x and y."""
        array = np.hstack([np.asarray(face_points), np.ones((68, 1))])
        assert LandmarkSet.from_points(array) == LandmarkSet.from_points(face_points)

    def test_points_are_immutable(self, landmarks):
        with pytest.raises(AttributeError):
            landmarks.nose_tip().x = 0.0  # type: ignore[misc]

    @pytest.mark.parametrize("count", [0, 67, 69])
    def test_wrong_point_count(self, face_points, count):
        points = (face_points * 2)[:count]
        with pytest.raises(InvalidLandmarks):
            LandmarkSet.from_points(points)

    def test_non_numeric_points(self):
        with pytest.raises(InvalidLandmarks):
            LandmarkSet.from_points([["a", "b"]] * 68)

    def test_region_constructor_checks_counts(self, landmarks):
        with pytest.raises(InvalidLandmarks):
            LandmarkSet(
                jaw=landmarks.jaw,
                nose=landmarks.nose[:-1],
                left_eye=landmarks.left_eye,
                right_eye=landmarks.right_eye,
                mouth=landmarks.mouth,
            )

    def test_region_table_matches_scheme(self):
        assert sum(REGION_SIZES.values()) == 58


def test_centroid():
    assert centroid([Point2D(0, 0), Point2D(2, 4)]) == Point2D(1, 2)
