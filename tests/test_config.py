"""Tests for configuration and policy loading."""

import json

import pytest

from config import load_policy
from domain.errors import InvalidWeightPolicy
from domain.policy import BLEND_POLICY, DUCHENNE_POLICY


class TestLoadPolicy:
    def test_presets(self, testing_config):
        assert load_policy(testing_config) is DUCHENNE_POLICY
        testing_config.SCORING_POLICY = "blend"
        assert load_policy(testing_config) is BLEND_POLICY

    def test_unknown_preset(self, testing_config):
        testing_config.SCORING_POLICY = "vibes"
        with pytest.raises(InvalidWeightPolicy):
            load_policy(testing_config)

    def test_policy_file(self, testing_config, tmp_path):
        data = BLEND_POLICY.to_dict()
        data["name"] = "tuned"
        path = tmp_path / "policy.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        testing_config.WEIGHT_POLICY_FILE = str(path)

        policy = load_policy(testing_config)
        assert policy.name == "tuned"
        assert policy.weights == BLEND_POLICY.weights

    def test_bad_policy_file(self, testing_config, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text("{not json", encoding="utf-8")
        testing_config.WEIGHT_POLICY_FILE = str(path)
        with pytest.raises(InvalidWeightPolicy):
            load_policy(testing_config)

    def test_missing_policy_file(self, testing_config, tmp_path):
        testing_config.WEIGHT_POLICY_FILE = str(tmp_path / "absent.json")
        with pytest.raises(InvalidWeightPolicy):
            load_policy(testing_config)


class TestCreateApp:
    def test_invalid_policy_fails_at_startup(self, testing_config, tmp_path):
        from app import create_app

        data = DUCHENNE_POLICY.to_dict()
        data["weights"]["symmetry"] = 0.5
        path = tmp_path / "policy.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        testing_config.WEIGHT_POLICY_FILE = str(path)

        with pytest.raises(InvalidWeightPolicy):
            create_app(testing_config)
