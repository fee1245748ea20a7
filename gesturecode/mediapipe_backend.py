"""
Hand landmark backends built on MediaPipe.
"""
import logging
from pathlib import Path
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .types import HandObservation
from .landmarks import observation_from_landmarks

logger = logging.getLogger(__name__)


MIN_MODEL_BYTES = 1024


class MediaPipeBackendError(Exception):
    """Raised when a MediaPipe backend cannot be created."""

    MODEL_NOT_FOUND = "model_not_found"
    INVALID_MODEL = "invalid_model"
    INITIALIZATION_FAILED = "initialization_failed"

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = reason if not detail else f"{reason}: {detail}"
        super().__init__(message)


def resolve_model_path(model_path: str) -> Path:
    """Resolve a model path against the working directory, then the package directory."""
    path = Path(model_path).expanduser()
    if path.is_absolute() or path.exists():
        return path
    packaged = Path(__file__).parent / path
    return packaged if packaged.exists() else path


def _to_rgb(frame_bgr: np.ndarray) -> np.ndarray:
    # Crops are views into the full frame; MediaPipe needs contiguous memory
    return np.ascontiguousarray(cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB))


class MediaPipeTasksBackend:
    """Hand landmarks from the MediaPipe Tasks HandLandmarker in IMAGE mode."""

    def __init__(self, model_path: str, max_hands: int = 2,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5):
        self.max_hands = max_hands

        path = resolve_model_path(model_path)
        if not path.exists():
            raise MediaPipeBackendError(MediaPipeBackendError.MODEL_NOT_FOUND, str(path))
        if path.stat().st_size <= MIN_MODEL_BYTES:
            raise MediaPipeBackendError(MediaPipeBackendError.INVALID_MODEL, str(path))

        base_options = python.BaseOptions(model_asset_path=str(path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.IMAGE,
            num_hands=max_hands,
            min_hand_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        try:
            self.landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise MediaPipeBackendError(MediaPipeBackendError.INITIALIZATION_FAILED, str(e)) from e

        logger.info("✅ MediaPipe HandLandmarker initialized (max_hands=%d)", max_hands)

    def detect_hands(self, frame: np.ndarray) -> List[HandObservation]:
        """
        Detect hands in a BGR frame.

        Args:
            frame: Input frame in BGR format

        Returns:
            One observation per detected hand, y flipped to grow upward
        """
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=_to_rgb(frame))
        result = self.landmarker.detect(mp_image)

        hands = []
        for hand_landmarks in result.hand_landmarks or []:
            observation = observation_from_landmarks([(lm.x, lm.y) for lm in hand_landmarks])
            if observation is not None:
                hands.append(observation)
        return hands

    def reset_state(self) -> None:
        # IMAGE mode keeps nothing between frames
        pass

    def close(self) -> None:
        self.landmarker.close()


class MediaPipeSolutionsBackend:
    """Hand landmarks from the legacy ``mp.solutions.hands`` tracker."""

    def __init__(self, max_hands: int = 2,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5):
        self.max_hands = max_hands
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self.mp_hands = mp.solutions.hands
        self.hands: Optional[object] = None
        self._open()
        logger.info("✅ MediaPipe Hands (legacy) initialized (max_hands=%d)", max_hands)

    def _open(self) -> None:
        try:
            self.hands = self.mp_hands.Hands(
                static_image_mode=False,
                max_num_hands=self.max_hands,
                min_detection_confidence=self.min_detection_confidence,
                min_tracking_confidence=self.min_tracking_confidence,
            )
        except (RuntimeError, ValueError) as e:
            raise MediaPipeBackendError(MediaPipeBackendError.INITIALIZATION_FAILED, str(e)) from e

    def detect_hands(self, frame: np.ndarray) -> List[HandObservation]:
        """Detect hands in a BGR frame."""
        results = self.hands.process(_to_rgb(frame))
        if not results.multi_hand_landmarks:
            return []

        hands = []
        for hand_landmarks in results.multi_hand_landmarks:
            points = [(lm.x, lm.y) for lm in hand_landmarks.landmark]
            observation = observation_from_landmarks(points)
            if observation is not None:
                hands.append(observation)
        return hands

    def reset_state(self) -> None:
        """Drop the tracker's temporal state by recreating it."""
        self.close()
        self._open()

    def close(self) -> None:
        if self.hands is not None:
            self.hands.close()
            self.hands = None
