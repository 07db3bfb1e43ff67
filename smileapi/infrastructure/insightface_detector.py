"""
InsightFace implementation of the landmark detector
"""
import logging
from typing import List

import numpy as np

from domain.errors import InvalidLandmarks
from domain.interfaces import LandmarkDetectorInterface
from domain.landmarks import LandmarkSet, LANDMARK_SCHEME
from domain.models import BoundingBox, Detection
from config import get_config

logger = logging.getLogger(__name__)


class InsightFaceDetector(LandmarkDetectorInterface):
    """Landmark detector using the InsightFace 68-point 3D landmark model"""

    def __init__(self, model=None):
        self.config = get_config()
        self.model = model
        self.is_initialized = model is not None
        self.model_name = self.config.MODEL_NAME
        if self.model is None:
            self._initialize()

    def _initialize(self):
        """Initialize the InsightFace model"""
        try:
            from insightface.app import FaceAnalysis

            logger.info(f"Initializing InsightFace model: {self.model_name}")

            # Determine providers based on GPU setting
            if self.config.USE_GPU:
                providers = [
                    ('CUDAExecutionProvider', {'device_id': self.config.GPU_ID}),
                    'CPUExecutionProvider'
                ]
            else:
                providers = ['CPUExecutionProvider']

            # landmark_3d_68 carries the iBUG 68-point layout
            self.model = FaceAnalysis(
                name=self.model_name,
                allowed_modules=['detection', 'landmark_3d_68'],
                providers=providers,
            )

            self.model.prepare(
                ctx_id=self.config.GPU_ID if self.config.USE_GPU else -1,
                det_size=(self.config.DET_SIZE, self.config.DET_SIZE),
            )

            self.is_initialized = True
            logger.info("InsightFace model initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize InsightFace: {e}")
            self.is_initialized = False
            raise

    def detect(self, image: np.ndarray) -> List[Detection]:
        """Detect faces and their landmarks, in detector order"""
        if not self.is_initialized:
            raise RuntimeError("Model not initialized")

        faces = self.model.get(image, max_num=self.config.MAX_FACES)

        detections: List[Detection] = []
        for index, face in enumerate(faces):
            confidence = float(face.det_score) if hasattr(face, 'det_score') else 0.0
            if confidence < self.config.MIN_CONFIDENCE:
                continue

            points = getattr(face, 'landmark_3d_68', None)
            if points is None:
                logger.warning(f"Face {index} has no 68-point landmarks, skipping")
                continue

            try:
                landmarks = LandmarkSet.from_points(np.asarray(points)[:, :2])
            except InvalidLandmarks as e:
                logger.warning(f"Face {index} landmarks rejected: {e}")
                continue

            x1, y1, x2, y2 = (float(v) for v in face.bbox)
            detections.append(Detection(
                landmarks=landmarks,
                box=BoundingBox(x=x1, y=y1, width=x2 - x1, height=y2 - y1),
                confidence=confidence,
            ))

        logger.info(f"Detected {len(detections)} face(s) of {len(faces)} candidate(s)")
        return detections

    def get_health(self) -> dict:
        """Get health status"""
        return {
            "status": "ok" if self.is_initialized else "error",
            "model": self.model_name,
            "landmarkScheme": LANDMARK_SCHEME,
        }

    def is_ready(self) -> bool:
        """Check if detector is ready"""
        return self.is_initialized
