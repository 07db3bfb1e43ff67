"""
Smile Score API - landmark-based smile authenticity service
Main application entry point
"""
import logging
import sys

from flask import Flask
from flask_cors import CORS

from config import get_config, load_policy
from infrastructure.result_cache import InMemoryResultCache
from infrastructure.usage_tracker import UsageTracker
from application.smile_service import SmileAnalysisService
from api.routes import api, init_routes

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


def create_detector(config):
    """Build the optional InsightFace landmark detector"""
    if not config.DETECTOR_ENABLED:
        return None

    from infrastructure.insightface_detector import InsightFaceDetector

    logger.info("Initializing landmark detector...")
    try:
        return InsightFaceDetector()
    except Exception as e:
        logger.error(f"Failed to initialize detector: {e}")
        raise


def create_app(config=None, detector=None) -> Flask:
    """Application factory"""
    config = config or get_config()

    # Fails fast on an invalid weight policy
    policy = load_policy(config)
    logger.info(f"Scoring policy: {policy.name} ({', '.join(policy.active_metrics)})")

    # Create Flask app
    app = Flask(__name__)
    app.config['DEBUG'] = config.DEBUG
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH

    # Enable CORS
    CORS(app, origins=config.CORS_ORIGINS)

    # Initialize infrastructure
    cache = None
    if config.CACHE_ENABLED:
        cache = InMemoryResultCache(
            ttl_seconds=config.CACHE_TTL,
            max_entries=config.CACHE_MAX_ENTRIES,
        )
    tracker = UsageTracker(daily_baseline=config.DAILY_BASELINE)
    if detector is None:
        detector = create_detector(config)

    # Initialize application service
    smile_service = SmileAnalysisService(
        policy=policy,
        cache=cache,
        tracker=tracker,
        detector=detector,
        max_faces=config.MAX_FACES,
    )

    # Initialize routes with service
    init_routes(smile_service)

    # Register blueprint
    app.register_blueprint(api)

    logger.info("Application initialized successfully")
    return app


def main():
    """Main entry point"""
    config = get_config()

    logger.info(f"Starting Smile Score API on {config.HOST}:{config.PORT}")
    logger.info(f"Cache enabled: {config.CACHE_ENABLED} ({config.CACHE_TTL}s TTL)")
    logger.info(f"Detector enabled: {config.DETECTOR_ENABLED}")

    app = create_app(config)
    app.run(
        host=config.HOST,
        port=config.PORT,
        debug=config.DEBUG,
        threaded=True,
    )


if __name__ == '__main__':
    main()
