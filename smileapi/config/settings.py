"""
Application configuration settings
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _split(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Base configuration"""
    # Flask
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 3001))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 10 * 1024 * 1024))  # 10MB
    CORS_ORIGINS = _split(os.getenv(
        "CORS_ORIGINS",
        "https://realsmile.online,https://smile-score-clean.vercel.app,http://localhost:3000",
    ))

    # Scoring
    SCORING_POLICY = os.getenv("SCORING_POLICY", "duchenne")  # duchenne, blend
    WEIGHT_POLICY_FILE = os.getenv("WEIGHT_POLICY_FILE", "")  # JSON policy, overrides SCORING_POLICY
    MAX_FACES = int(os.getenv("MAX_FACES", 20))  # Max faces scored per request

    # Result cache
    CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
    CACHE_TTL = int(os.getenv("CACHE_TTL", 3600))  # seconds
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", 1000))

    # Usage counter
    DAILY_BASELINE = int(os.getenv("DAILY_BASELINE", 450))

    # InsightFace detector (optional, for callers holding decoded frames)
    DETECTOR_ENABLED = os.getenv("DETECTOR_ENABLED", "false").lower() == "true"
    MODEL_NAME = os.getenv("INSIGHTFACE_MODEL", "buffalo_l")  # buffalo_l, buffalo_s
    DET_SIZE = int(os.getenv("DET_SIZE", 416))  # Detection size
    MIN_CONFIDENCE = float(os.getenv("MIN_CONFIDENCE", 0.15))  # Min detection confidence

    # GPU settings
    USE_GPU = os.getenv("USE_GPU", "false").lower() == "true"
    GPU_ID = int(os.getenv("GPU_ID", 0))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


def get_config():
    """Get configuration based on environment"""
    env = os.getenv("FLASK_ENV", "development")
    if env == "production":
        return ProductionConfig()
    return DevelopmentConfig()
