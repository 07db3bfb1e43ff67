"""
Scoring policy loading
"""
import json
import logging

from domain.errors import InvalidWeightPolicy
from domain.policy import PRESETS, WeightPolicy

logger = logging.getLogger(__name__)


def load_policy(config) -> WeightPolicy:
    """Resolve the configured weight policy; raises InvalidWeightPolicy"""
    if config.WEIGHT_POLICY_FILE:
        logger.info(f"Loading weight policy from {config.WEIGHT_POLICY_FILE}")
        try:
            with open(config.WEIGHT_POLICY_FILE, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidWeightPolicy(
                f"cannot read policy file {config.WEIGHT_POLICY_FILE}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise InvalidWeightPolicy("policy file must contain a JSON object")
        return WeightPolicy.from_dict(data)

    try:
        return PRESETS[config.SCORING_POLICY]
    except KeyError:
        raise InvalidWeightPolicy(
            f"unknown scoring policy {config.SCORING_POLICY!r}, "
            f"expected one of {sorted(PRESETS)}"
        ) from None
