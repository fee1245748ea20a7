"""
Landmark backend selection with fallback.

Concrete backends are imported lazily so the core package works without
OpenCV or MediaPipe installed.
"""
import logging
from typing import Callable, Dict, List, Optional

from .types import HandLandmarkBackend
from .config import Cfg

logger = logging.getLogger(__name__)


BackendFactory = Callable[[Cfg], HandLandmarkBackend]


class BackendUnavailableError(RuntimeError):
    """No configured landmark backend could be created."""

    def __init__(self, attempts: Dict[str, Exception]):
        self.attempts = attempts
        details = "; ".join(f"{name}: {error}" for name, error in attempts.items())
        super().__init__(f"No hand landmark backend available ({details})")


def _mediapipe_tasks(cfg: Cfg) -> HandLandmarkBackend:
    from .mediapipe_backend import MediaPipeTasksBackend
    return MediaPipeTasksBackend(
        model_path=cfg.backend.model_path,
        max_hands=cfg.backend.max_hands,
        min_detection_confidence=cfg.backend.min_detection_confidence,
        min_tracking_confidence=cfg.backend.min_tracking_confidence,
    )


def _mediapipe_solutions(cfg: Cfg) -> HandLandmarkBackend:
    from .mediapipe_backend import MediaPipeSolutionsBackend
    return MediaPipeSolutionsBackend(
        max_hands=cfg.backend.max_hands,
        min_detection_confidence=cfg.backend.min_detection_confidence,
        min_tracking_confidence=cfg.backend.min_tracking_confidence,
    )


BACKEND_FACTORIES: Dict[str, BackendFactory] = {
    "mediapipe_tasks": _mediapipe_tasks,
    "mediapipe_solutions": _mediapipe_solutions,
}


def backend_order(cfg: Cfg) -> List[str]:
    """Preferred backend followed by the fallbacks, without duplicates."""
    order = []
    for name in [cfg.backend.preferred, *cfg.backend.fallbacks]:
        if name not in order:
            order.append(name)
    return order


def create_backend(cfg: Cfg,
                   factories: Optional[Dict[str, BackendFactory]] = None) -> HandLandmarkBackend:
    """
    Create the first backend that initializes successfully.

    Args:
        cfg: Configuration; ``cfg.backend`` names the preferred backend and fallbacks
        factories: Name to factory mapping, defaults to BACKEND_FACTORIES

    Returns:
        A ready backend

    Raises:
        ValueError: If a configured backend name is unknown
        BackendUnavailableError: If every backend failed to initialize
    """
    factories = BACKEND_FACTORIES if factories is None else factories
    order = backend_order(cfg)

    unknown = [name for name in order if name not in factories]
    if unknown:
        raise ValueError(f"Unknown landmark backend(s): {', '.join(unknown)}")

    attempts: Dict[str, Exception] = {}
    for name in order:
        try:
            backend = factories[name](cfg)
        except ImportError as e:
            logger.warning("⚠️ Backend %s unavailable, missing dependency: %s", name, e)
            attempts[name] = e
            continue
        except Exception as e:
            logger.warning("⚠️ Backend %s failed to initialize: %s", name, e)
            attempts[name] = e
            continue

        if attempts:
            logger.info("Falling back to %s backend", name)
        return backend

    raise BackendUnavailableError(attempts)
