"""
Facial landmark set and the detector's 68-point index table
"""
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from .errors import InvalidLandmarks

# iBUG 68-point scheme, as produced by the landmark extractor.
# Bump the version whenever an index below changes.
LANDMARK_SCHEME = "ibug68-v1"
TOTAL_POINTS = 68

REGION_SLICES: Dict[str, slice] = {
    "jaw": slice(0, 17),
    "nose": slice(27, 36),
    "left_eye": slice(36, 42),
    "right_eye": slice(42, 48),
    "mouth": slice(48, 68),
}

REGION_SIZES: Dict[str, int] = {
    name: region.stop - region.start for name, region in REGION_SLICES.items()
}

# Positions inside each region
EYE_CORNER_A = 0
EYE_UPPER_LID = 1
EYE_CORNER_B = 3
EYE_LOWER_LID = 4
EYE_LOWER_LID_INNER = 5

NOSE_BRIDGE = 0
NOSE_TIP = 3
NOSE_BASE = 6

MOUTH_LEFT_CORNER = 0
MOUTH_RIGHT_CORNER = 6
MOUTH_UPPER_LIP_CENTER = 14
MOUTH_LOWER_LIP_CENTER = 18


@dataclass(frozen=True)
class Point2D:
    """Image pixel coordinate"""
    x: float
    y: float


Region = Tuple[Point2D, ...]


def _to_region(name: str, points) -> Region:
    region = tuple(
        p if isinstance(p, Point2D) else Point2D(float(p[0]), float(p[1]))
        for p in points
    )
    if len(region) != REGION_SIZES[name]:
        raise InvalidLandmarks(
            f"{name} expects {REGION_SIZES[name]} points, got {len(region)}"
        )
    return region


def centroid(points: Sequence[Point2D]) -> Point2D:
    """Mean position of a group of points"""
    return Point2D(
        sum(p.x for p in points) / len(points),
        sum(p.y for p in points) / len(points),
    )


class LandmarkSet:
    """Read-only landmark regions of one detected face.

    Formulas reach points through the named accessors so that a change in
    the detector's scheme only touches the index table above.
    """

    __slots__ = ("_jaw", "_nose", "_left_eye", "_right_eye", "_mouth")

    def __init__(self, jaw, nose, left_eye, right_eye, mouth):
        self._jaw = _to_region("jaw", jaw)
        self._nose = _to_region("nose", nose)
        self._left_eye = _to_region("left_eye", left_eye)
        self._right_eye = _to_region("right_eye", right_eye)
        self._mouth = _to_region("mouth", mouth)

    @classmethod
    def from_points(cls, points) -> "LandmarkSet":
        """Build from a flat 68-point sequence or an (68, 2+) array"""
        try:
            array = np.asarray(points, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidLandmarks(f"landmarks are not numeric: {e}") from e

        if array.ndim != 2 or array.shape[0] != TOTAL_POINTS or array.shape[1] < 2:
            raise InvalidLandmarks(
                f"expected {TOTAL_POINTS} points of (x, y), got shape {array.shape}"
            )

        xy = array[:, :2].tolist()
        return cls(**{name: xy[region] for name, region in REGION_SLICES.items()})

    # Regions

    @property
    def jaw(self) -> Region:
        return self._jaw

    @property
    def nose(self) -> Region:
        return self._nose

    @property
    def left_eye(self) -> Region:
        return self._left_eye

    @property
    def right_eye(self) -> Region:
        return self._right_eye

    @property
    def mouth(self) -> Region:
        return self._mouth

    def eyes(self) -> Tuple[Region, Region]:
        return self._left_eye, self._right_eye

    # Named points

    def nose_bridge(self) -> Point2D:
        return self._nose[NOSE_BRIDGE]

    def nose_tip(self) -> Point2D:
        return self._nose[NOSE_TIP]

    def nose_base(self) -> Point2D:
        return self._nose[NOSE_BASE]

    def left_mouth_corner(self) -> Point2D:
        return self._mouth[MOUTH_LEFT_CORNER]

    def right_mouth_corner(self) -> Point2D:
        return self._mouth[MOUTH_RIGHT_CORNER]

    def upper_lip_center(self) -> Point2D:
        return self._mouth[MOUTH_UPPER_LIP_CENTER]

    def lower_lip_center(self) -> Point2D:
        return self._mouth[MOUTH_LOWER_LIP_CENTER]

    @staticmethod
    def eye_corners(eye: Region) -> Tuple[Point2D, Point2D]:
        return eye[EYE_CORNER_A], eye[EYE_CORNER_B]

    @staticmethod
    def eye_lids(eye: Region) -> Tuple[Point2D, Point2D]:
        """Upper lid point and the lower lid point opposite it"""
        return eye[EYE_UPPER_LID], eye[EYE_LOWER_LID_INNER]

    @staticmethod
    def eye_bottom(eye: Region) -> Point2D:
        return eye[EYE_LOWER_LID]

    def __eq__(self, other) -> bool:
        if not isinstance(other, LandmarkSet):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s) for s in self.__slots__)

    def __repr__(self) -> str:
        return f"LandmarkSet(scheme={LANDMARK_SCHEME!r})"
