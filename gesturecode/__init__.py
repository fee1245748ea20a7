"""
GestureCode hand gesture recognition

Classifies static hand gestures and short motion actions from per-frame hand
joint observations, debounces them, and dispatches the mapped key presses.
"""

__version__ = "0.1.0"

from .types import (
    ActionGesture,
    ControllerProto,
    FrameResult,
    Gesture,
    HandLandmarkBackend,
    HandObservation,
    Joint,
    JointPoint,
    KeyAction,
)
from .config import Cfg, load_config, sanitize_config
from .classifier import Classification, classify
from .gestures import GestureEngine, select_candidate
from .actions import MotionPathDetector, SwipePinchDetector, create_action_detector
from .pipeline import FramePipeline
from .backend import BackendUnavailableError, create_backend
from .controller_mock import MockController, dispatch_action, dispatch_gesture

__all__ = [
    "ActionGesture",
    "ControllerProto",
    "FrameResult",
    "Gesture",
    "HandLandmarkBackend",
    "HandObservation",
    "Joint",
    "JointPoint",
    "KeyAction",
    "Cfg",
    "load_config",
    "sanitize_config",
    "Classification",
    "classify",
    "GestureEngine",
    "select_candidate",
    "MotionPathDetector",
    "SwipePinchDetector",
    "create_action_detector",
    "FramePipeline",
    "BackendUnavailableError",
    "create_backend",
    "MockController",
    "dispatch_action",
    "dispatch_gesture",
]
