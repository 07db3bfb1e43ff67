"""Shared pytest fixtures."""

import pytest

from config import Config
from tests.fixtures.synthetic_landmarks import make_face_points, make_landmarks


class TestingConfig(Config):
    DEBUG = False
    SCORING_POLICY = "duchenne"
    WEIGHT_POLICY_FILE = ""
    CACHE_ENABLED = True
    CACHE_TTL = 3600
    CACHE_MAX_ENTRIES = 100
    DAILY_BASELINE = 450
    MAX_FACES = 5
    DETECTOR_ENABLED = False


@pytest.fixture
def face_points():
    return make_face_points()


@pytest.fixture
def landmarks():
    return make_landmarks()


@pytest.fixture
def testing_config():
    return TestingConfig()


@pytest.fixture
def client(testing_config):
    from app import create_app

    app = create_app(testing_config)
    app.config["TESTING"] = True
    return app.test_client()
