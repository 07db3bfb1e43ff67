"""
Scoring policy: weights, genuineness rule and verdict tables
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InvalidExpression, InvalidWeightPolicy
from .metrics import FORMULAS, CANONICAL, round_half_up

WEIGHT_TOLERANCE = 1e-6

VerdictTable = Tuple[Tuple[int, str], ...]


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_expression(expression: Optional[Mapping[str, float]]) -> None:
    """Every probability must be a finite number in [0, 1]"""
    for label, probability in (expression or {}).items():
        if not _is_number(probability) or not 0.0 <= probability <= 1.0:
            raise InvalidExpression(
                f"probability for {label!r} must be in [0, 1], got {probability!r}"
            )


def _validate_verdicts(name: str, table: VerdictTable) -> VerdictTable:
    try:
        table = tuple((int(threshold), str(label)) for threshold, label in table)
    except (TypeError, ValueError) as e:
        raise InvalidWeightPolicy(f"{name} rows must be (threshold, label): {e}") from e
    if not table:
        raise InvalidWeightPolicy(f"{name} is empty")
    thresholds = [threshold for threshold, _ in table]
    if any(a <= b for a, b in zip(thresholds, thresholds[1:])):
        raise InvalidWeightPolicy(f"{name} thresholds must be strictly descending: {thresholds}")
    if thresholds[-1] != 0:
        raise InvalidWeightPolicy(f"{name} must end with a 0 threshold, got {thresholds[-1]}")
    return table


def classify(score: int, table: VerdictTable) -> str:
    """Label of the highest threshold not above the score"""
    for threshold, label in table:
        if score >= threshold:
            return label
    return table[-1][1]


@dataclass(frozen=True)
class GenuinenessRule:
    """Conditions deciding whether a smile counts as genuine.

    match="all" needs every condition, match="any" needs at least one.
    A missing expression probability never satisfies expression_above.
    """
    match: str = "all"
    metric_above: Mapping[str, float] = field(default_factory=dict)
    score_at_least: Optional[int] = None
    expression_above: Optional[float] = None
    expression_label: str = "happy"

    def conditions(self, score: int, metrics: Mapping[str, int],
                   expression: Optional[Mapping[str, float]]):
        for name, threshold in self.metric_above.items():
            yield metrics.get(name, 0) > threshold
        if self.score_at_least is not None:
            yield score >= self.score_at_least
        if self.expression_above is not None:
            probability = (expression or {}).get(self.expression_label)
            yield probability is not None and probability > self.expression_above

    def evaluate(self, score: int, metrics: Mapping[str, int],
                 expression: Optional[Mapping[str, float]] = None) -> bool:
        results = list(self.conditions(score, metrics, expression))
        if not results:
            return False
        return all(results) if self.match == "all" else any(results)


@dataclass(frozen=True)
class ExpressionBlend:
    """Mix of the geometric sub-score with an expression probability"""
    geometry_weight: float = 0.4
    expression_weight: float = 0.6
    label: str = "happy"


@dataclass(frozen=True)
class FinalScore:
    score: int
    is_genuine: bool
    verdict: str
    geometric: float
    expression: Optional[float] = None


@dataclass(frozen=True)
class WeightPolicy:
    """Immutable scoring configuration; validated on construction"""
    name: str
    weights: Mapping[str, float]
    verdicts: VerdictTable
    genuine: GenuinenessRule
    genuine_verdicts: Optional[VerdictTable] = None
    blend: Optional[ExpressionBlend] = None
    formulas: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.weights:
            raise InvalidWeightPolicy(f"policy {self.name!r} has no active metrics")

        for metric, weight in self.weights.items():
            if metric not in FORMULAS:
                raise InvalidWeightPolicy(f"unknown metric {metric!r}")
            if not math.isfinite(weight) or weight < 0:
                raise InvalidWeightPolicy(f"weight for {metric!r} must be non-negative, got {weight}")

        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise InvalidWeightPolicy(f"weights of policy {self.name!r} sum to {total}, expected 1.0")

        for metric, formula in self.formulas.items():
            if metric not in self.weights:
                raise InvalidWeightPolicy(f"formula given for inactive metric {metric!r}")
            if formula not in FORMULAS[metric]:
                raise InvalidWeightPolicy(f"unknown formula {formula!r} for {metric!r}")

        for metric, threshold in self.genuine.metric_above.items():
            if metric not in self.weights:
                raise InvalidWeightPolicy(f"genuineness rule uses inactive metric {metric!r}")
            if not _is_number(threshold):
                raise InvalidWeightPolicy(f"threshold for {metric!r} must be a number, got {threshold!r}")
        for attr in ("score_at_least", "expression_above"):
            value = getattr(self.genuine, attr)
            if value is not None and not _is_number(value):
                raise InvalidWeightPolicy(f"genuineness {attr} must be a number, got {value!r}")
        if self.genuine.match not in ("all", "any"):
            raise InvalidWeightPolicy(f"genuineness match must be 'all' or 'any', got {self.genuine.match!r}")

        if self.blend is not None:
            blend_total = self.blend.geometry_weight + self.blend.expression_weight
            if abs(blend_total - 1.0) > WEIGHT_TOLERANCE:
                raise InvalidWeightPolicy(f"blend weights sum to {blend_total}, expected 1.0")

        object.__setattr__(self, "weights", dict(self.weights))
        object.__setattr__(self, "formulas", dict(self.formulas))
        object.__setattr__(self, "verdicts", _validate_verdicts("verdicts", self.verdicts))
        if self.genuine_verdicts is not None:
            object.__setattr__(
                self, "genuine_verdicts",
                _validate_verdicts("genuine_verdicts", self.genuine_verdicts),
            )

    @property
    def active_metrics(self) -> Dict[str, str]:
        """Active metric name -> formula name, in weight order"""
        return {metric: self.formulas.get(metric, CANONICAL) for metric in self.weights}

    def verdict(self, score: int, is_genuine: bool) -> str:
        if is_genuine and self.genuine_verdicts is not None:
            return classify(score, self.genuine_verdicts)
        return classify(score, self.verdicts)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "weights": dict(self.weights),
            "formulas": dict(self.formulas),
            "verdicts": [list(row) for row in self.verdicts],
            "genuine": {
                "match": self.genuine.match,
                "metricAbove": dict(self.genuine.metric_above),
                "scoreAtLeast": self.genuine.score_at_least,
                "expressionAbove": self.genuine.expression_above,
                "expressionLabel": self.genuine.expression_label,
            },
        }
        if self.genuine_verdicts is not None:
            data["genuineVerdicts"] = [list(row) for row in self.genuine_verdicts]
        if self.blend is not None:
            data["blend"] = {
                "geometryWeight": self.blend.geometry_weight,
                "expressionWeight": self.blend.expression_weight,
                "label": self.blend.label,
            }
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeightPolicy":
        """Build a policy from its JSON form (see to_dict)"""
        try:
            genuine = data.get("genuine") or {}
            blend = data.get("blend")
            genuine_verdicts = data.get("genuineVerdicts")
            return cls(
                name=data.get("name", "custom"),
                weights={k: float(v) for k, v in data["weights"].items()},
                formulas=dict(data.get("formulas") or {}),
                verdicts=tuple(tuple(row) for row in data["verdicts"]),
                genuine_verdicts=(
                    tuple(tuple(row) for row in genuine_verdicts)
                    if genuine_verdicts is not None else None
                ),
                genuine=GenuinenessRule(
                    match=genuine.get("match", "all"),
                    metric_above={k: float(v) for k, v in (genuine.get("metricAbove") or {}).items()},
                    score_at_least=(
                        int(genuine["scoreAtLeast"])
                        if genuine.get("scoreAtLeast") is not None else None
                    ),
                    expression_above=(
                        float(genuine["expressionAbove"])
                        if genuine.get("expressionAbove") is not None else None
                    ),
                    expression_label=genuine.get("expressionLabel", "happy"),
                ),
                blend=ExpressionBlend(
                    geometry_weight=float(blend.get("geometryWeight", 0.4)),
                    expression_weight=float(blend.get("expressionWeight", 0.6)),
                    label=blend.get("label", "happy"),
                ) if blend is not None else None,
            )
        except InvalidWeightPolicy:
            raise
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise InvalidWeightPolicy(f"malformed policy definition: {e}") from e


def score(
    metrics: Mapping[str, int],
    policy: WeightPolicy,
    expression: Optional[Mapping[str, float]] = None,
) -> FinalScore:
    """Combine metric scores into the final score, genuineness and verdict.

    Raises InvalidExpression for a probability outside [0, 1].
    """
    validate_expression(expression)
    geometric = sum(weight * metrics.get(name, 0) for name, weight in policy.weights.items())

    expression_score = None
    if policy.blend is not None:
        probability = (expression or {}).get(policy.blend.label, 0.0)
        expression_score = probability * 100
        final = round_half_up(
            geometric * policy.blend.geometry_weight
            + expression_score * policy.blend.expression_weight
        )
    else:
        final = round_half_up(geometric)

    is_genuine = policy.genuine.evaluate(final, metrics, expression)
    return FinalScore(
        score=final,
        is_genuine=is_genuine,
        verdict=policy.verdict(final, is_genuine),
        geometric=geometric,
        expression=expression_score,
    )


# Current tuning: geometry only, six metrics
DUCHENNE_POLICY = WeightPolicy(
    name="duchenne",
    weights={
        "eyeConstriction": 0.40,
        "cheekRaise": 0.25,
        "mouthCurve": 0.15,
        "symmetry": 0.10,
        "lipCornerElevation": 0.05,
        "noseLipDistance": 0.05,
    },
    verdicts=(
        (80, "Excellent genuine Duchenne smile!"),
        (65, "Good smile with genuine qualities"),
        (50, "Moderate smile, could be more natural"),
        (35, "Somewhat forced smile"),
        (0, "Appears to be a posed smile"),
    ),
    genuine=GenuinenessRule(
        match="all",
        metric_above={"eyeConstriction": 60, "cheekRaise": 50},
    ),
)

# Earlier tuning: four metrics blended with the expression classifier
BLEND_POLICY = WeightPolicy(
    name="blend",
    weights={
        "eyeConstriction": 0.25,
        "cheekRaise": 0.25,
        "mouthCurve": 0.35,
        "symmetry": 0.15,
    },
    formulas={
        "eyeConstriction": "aspect",
        "cheekRaise": "bridge",
        "mouthCurve": "aspect",
        "symmetry": "jaw",
    },
    verdicts=(
        (35, "Polite Smile 😐"),
        (0, "Fake Smile! 😬"),
    ),
    genuine_verdicts=(
        (75, "Genuine Joy! 😄"),
        (0, "Real Smile 😊"),
    ),
    genuine=GenuinenessRule(match="any", score_at_least=55, expression_above=0.5),
    blend=ExpressionBlend(geometry_weight=0.4, expression_weight=0.6, label="happy"),
)

PRESETS: Dict[str, WeightPolicy] = {
    DUCHENNE_POLICY.name: DUCHENNE_POLICY,
    BLEND_POLICY.name: BLEND_POLICY,
}
