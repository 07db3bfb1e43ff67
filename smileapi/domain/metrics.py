"""
Landmark metrics

Every metric maps a LandmarkSet to an integer score in [0, 100]:
stabilized distances -> ratio -> clamp((ratio - offset) / scale) -> percent.
"""
import math
from typing import Callable, Dict, Mapping, Optional

from .errors import DegenerateGeometry
from .landmarks import LandmarkSet, centroid

MetricFunction = Callable[[LandmarkSet], int]

EYE_CONSTRICTION = "eyeConstriction"
CHEEK_RAISE = "cheekRaise"
MOUTH_CURVE = "mouthCurve"
SYMMETRY = "symmetry"
LIP_CORNER_ELEVATION = "lipCornerElevation"
NOSE_LIP_DISTANCE = "noseLipDistance"

METRIC_NAMES = (
    EYE_CONSTRICTION,
    CHEEK_RAISE,
    MOUTH_CURVE,
    SYMMETRY,
    LIP_CORNER_ELEVATION,
    NOSE_LIP_DISTANCE,
)

CANONICAL = "canonical"


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity (2.5 -> 3, -2.5 -> -2)"""
    return int(math.floor(value + 0.5))


def stabilize(value: float) -> float:
    """Quantize a distance to 0.1 px to suppress sub-pixel detector jitter.

    NaN and infinities pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    return math.floor(value * 10 + 0.5) / 10


def _ratio(metric: str, numerator: float, denominator: float) -> float:
    if denominator == 0:
        raise DegenerateGeometry(metric, "ratio denominator collapsed to zero")
    return numerator / denominator


def _percent(metric: str, ratio: float, offset: float = 0.0, scale: float = 1.0) -> int:
    if not math.isfinite(ratio):
        raise DegenerateGeometry(metric, f"ratio is not finite ({ratio})")
    unit = max(0.0, min(1.0, (ratio - offset) / scale))
    return round_half_up(unit * 100)


def _eye_aspect_ratio(landmarks: LandmarkSet) -> float:
    ratios = []
    for eye in landmarks.eyes():
        corner_a, corner_b = landmarks.eye_corners(eye)
        upper, lower = landmarks.eye_lids(eye)
        width = stabilize(abs(corner_b.x - corner_a.x))
        height = stabilize(abs(upper.y - lower.y))
        ratios.append(_ratio(EYE_CONSTRICTION, width, height))
    return stabilize(sum(ratios) / len(ratios))


def _corner_avg_y(landmarks: LandmarkSet) -> float:
    return stabilize(
        (landmarks.left_mouth_corner().y + landmarks.right_mouth_corner().y) / 2
    )


def eye_constriction(landmarks: LandmarkSet) -> int:
    """Score falls as the averaged eye width/height ratio grows past 2"""
    return _percent(EYE_CONSTRICTION, _eye_aspect_ratio(landmarks), offset=4.0, scale=-2.0)


def eye_constriction_aspect(landmarks: LandmarkSet) -> int:
    return _percent(EYE_CONSTRICTION, _eye_aspect_ratio(landmarks), offset=3.0, scale=3.0)


def cheek_raise(landmarks: LandmarkSet) -> int:
    """Eye-bottom to nose-tip drop relative to the nose-tip to upper-lip drop"""
    nose_tip = landmarks.nose_tip()
    drops = [
        stabilize(abs(landmarks.eye_bottom(eye).y - nose_tip.y))
        for eye in landmarks.eyes()
    ]
    eye_to_nose = stabilize(sum(drops) / len(drops))
    nose_to_mouth = stabilize(abs(landmarks.upper_lip_center().y - nose_tip.y))
    return _percent(CHEEK_RAISE, _ratio(CHEEK_RAISE, eye_to_nose, nose_to_mouth))


def cheek_raise_bridge(landmarks: LandmarkSet) -> int:
    bridge = landmarks.nose_bridge()
    eye_bottom = sum(landmarks.eye_bottom(eye).y for eye in landmarks.eyes()) / 2
    eye_to_bridge = stabilize(eye_bottom - bridge.y)
    face_height = stabilize(landmarks.upper_lip_center().y - bridge.y)
    ratio = _ratio(CHEEK_RAISE, eye_to_bridge, face_height)
    return _percent(CHEEK_RAISE, ratio, scale=1 / 1.5)


def mouth_curve(landmarks: LandmarkSet) -> int:
    """Lift of the mouth corners above the upper-lip center, in mouth heights"""
    upper = landmarks.upper_lip_center()
    height = stabilize(abs(landmarks.lower_lip_center().y - upper.y))
    lift = stabilize(upper.y - _corner_avg_y(landmarks))
    return _percent(MOUTH_CURVE, _ratio(MOUTH_CURVE, lift, height), offset=-0.5)


def mouth_curve_aspect(landmarks: LandmarkSet) -> int:
    width = stabilize(abs(landmarks.right_mouth_corner().x - landmarks.left_mouth_corner().x))
    height = stabilize(abs(landmarks.lower_lip_center().y - landmarks.upper_lip_center().y))
    return _percent(MOUTH_CURVE, _ratio(MOUTH_CURVE, width, height), offset=2.0, scale=3.0)


def symmetry(landmarks: LandmarkSet) -> int:
    """Tilt of the eye-center line and the mouth-corner line, 100 when both are level"""
    left_eye = centroid(landmarks.left_eye)
    right_eye = centroid(landmarks.right_eye)
    eye_dy = stabilize(abs(stabilize(left_eye.y) - stabilize(right_eye.y)))
    eye_dx = stabilize(abs(stabilize(right_eye.x) - stabilize(left_eye.x)))
    eye_symmetry = 1 - _ratio(SYMMETRY, eye_dy, eye_dx)

    left_corner = landmarks.left_mouth_corner()
    right_corner = landmarks.right_mouth_corner()
    mouth_dy = stabilize(abs(left_corner.y - right_corner.y))
    mouth_dx = stabilize(abs(right_corner.x - left_corner.x))
    mouth_symmetry = 1 - _ratio(SYMMETRY, mouth_dy, mouth_dx)

    return _percent(SYMMETRY, stabilize((eye_symmetry + mouth_symmetry) / 2))


def symmetry_jaw(landmarks: LandmarkSet) -> int:
    jaw = landmarks.jaw
    center_x = landmarks.nose_tip().x
    left = right = 0.0
    for i in range((len(jaw) + 1) // 2):
        left += abs(jaw[i].x - center_x)
        right += abs(jaw[-1 - i].x - center_x)
    left, right = stabilize(left), stabilize(right)
    return _percent(SYMMETRY, _ratio(SYMMETRY, min(left, right), max(left, right)))


def lip_corner_elevation(landmarks: LandmarkSet) -> int:
    nose_tip = landmarks.nose_tip()
    lip_to_nose = stabilize(abs(landmarks.upper_lip_center().y - nose_tip.y))
    corner_to_nose = stabilize(abs(_corner_avg_y(landmarks) - nose_tip.y))
    ratio = _ratio(LIP_CORNER_ELEVATION, corner_to_nose, lip_to_nose)
    return _percent(LIP_CORNER_ELEVATION, ratio, offset=0.5)


def nose_lip_compression(landmarks: LandmarkSet) -> int:
    """Nose-tip to upper-lip gap against twice the nose height, inverted"""
    nose_tip = landmarks.nose_tip()
    tip_to_lip = stabilize(abs(landmarks.upper_lip_center().y - nose_tip.y))
    nose_height = stabilize(abs(landmarks.nose_base().y - nose_tip.y))
    ratio = _ratio(NOSE_LIP_DISTANCE, tip_to_lip, nose_height * 2)
    return _percent(NOSE_LIP_DISTANCE, ratio, offset=1.0, scale=-1.0)


# metric name -> formula name -> function
FORMULAS: Dict[str, Dict[str, MetricFunction]] = {
    EYE_CONSTRICTION: {CANONICAL: eye_constriction, "aspect": eye_constriction_aspect},
    CHEEK_RAISE: {CANONICAL: cheek_raise, "bridge": cheek_raise_bridge},
    MOUTH_CURVE: {CANONICAL: mouth_curve, "aspect": mouth_curve_aspect},
    SYMMETRY: {CANONICAL: symmetry, "jaw": symmetry_jaw},
    LIP_CORNER_ELEVATION: {CANONICAL: lip_corner_elevation},
    NOSE_LIP_DISTANCE: {CANONICAL: nose_lip_compression},
}


def resolve_formula(metric: str, formula: Optional[str] = None) -> MetricFunction:
    """Look up a metric implementation; KeyError for unknown names"""
    return FORMULAS[metric][formula or CANONICAL]


def compute_metrics(
    landmarks: LandmarkSet,
    metrics: Mapping[str, Optional[str]],
) -> Dict[str, int]:
    """Evaluate the given metrics (name -> formula) in the order given.

    Raises DegenerateGeometry from the first metric that cannot be computed.
    """
    return {
        name: resolve_formula(name, formula)(landmarks)
        for name, formula in metrics.items()
    }
