"""
API routes/handlers
"""
import logging
from flask import Blueprint, request, jsonify

from application.smile_service import SmileAnalysisService
from domain.errors import SmileScoringError

logger = logging.getLogger(__name__)

# Create blueprint
api = Blueprint('api', __name__)

# Service instance (injected)
smile_service: SmileAnalysisService = None


def init_routes(service: SmileAnalysisService):
    """Initialize routes with service dependency"""
    global smile_service
    smile_service = service


@api.route('/', methods=['GET'])
def index():
    """Service status and statistics"""
    tracker = smile_service.tracker
    return jsonify({
        "status": "ok",
        "message": "RealSmile API Server v2.0",
        "policy": smile_service.policy.name,
        "dailyAnalyses": tracker.daily_counter()["count"] if tracker else None,
        "stats": tracker.stats() if tracker else {},
    })


@api.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    status = smile_service.get_health()
    return jsonify(status.to_dict())


@api.route('/ready', methods=['GET'])
def ready():
    """Readiness check endpoint"""
    if smile_service.is_ready():
        return jsonify({"ready": True})
    return jsonify({"ready": False}), 503


@api.route('/api/counter', methods=['GET'])
def counter():
    """Faces analyzed today"""
    if smile_service.tracker is None:
        return jsonify({"error": "Usage tracking disabled"}), 404
    return jsonify(smile_service.tracker.daily_counter())


@api.route('/api/analyze', methods=['POST'])
def analyze():
    """Score smiles from detected face landmarks"""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({
            "error": "No landmarks provided",
            "message": "Request body must be a JSON object with imageWidth, imageHeight and faces",
        }), 400

    try:
        result = smile_service.analyze_payload(data)
    except SmileScoringError as e:
        logger.info(f"Rejected analysis request: {e}")
        return jsonify({
            "error": type(e).__name__,
            "message": str(e),
        }), 400
    except Exception as e:
        logger.exception(f"Analysis error: {e}")
        return jsonify({
            "error": "Analysis failed",
            "message": str(e),
        }), 500

    return jsonify(result)
