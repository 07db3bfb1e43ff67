"""
Domain errors
"""


class SmileScoringError(ValueError):
    """Base class for scoring engine errors"""


class DegenerateGeometry(SmileScoringError):
    """A metric ratio denominator collapsed to zero (or the ratio is not finite)"""

    def __init__(self, metric: str, detail: str):
        self.metric = metric
        self.detail = detail
        super().__init__(f"{metric}: {detail}")


class InvalidDimensions(SmileScoringError):
    """Image width or height is not a finite positive number"""


class InvalidWeightPolicy(SmileScoringError):
    """Weight policy is inconsistent; raised at configuration time"""


class InvalidLandmarks(SmileScoringError):
    """Landmark regions do not match the detector's point scheme"""


class InvalidPayload(SmileScoringError):
    """Analysis request body is malformed"""


class InvalidExpression(SmileScoringError):
    """Expression probability is not a finite value in [0, 1]"""
