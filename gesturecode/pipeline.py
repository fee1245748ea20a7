"""
Frame pipeline tying a landmark backend to the gesture and action detectors.

At most one frame is processed at a time; frames submitted while another is in
flight are dropped rather than queued, so hold timings are never measured on
stale frames.
"""
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from .types import ActionGesture, FrameResult, Gesture, HandLandmarkBackend, HandObservation
from .config import Cfg, sanitize_config
from .classifier import classify
from .gestures import GestureEngine
from .actions import ActionDetector, create_action_detector
from .landmarks import (
    Rect,
    clamped_region,
    crop_to_region,
    expanded_region,
    hand_bounding_box,
    remap_observation,
    union_region,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Frame counters for one pipeline."""
    submitted: int = 0
    processed: int = 0
    dropped: int = 0
    skipped: int = 0
    backend_errors: int = 0


class FramePipeline:
    """
    Runs frames through a backend, the gesture engine and an action detector.

    Features:
    - Capacity-1 admission gate with a single worker thread
    - Backend failures treated as frames without hands
    - Reduced backend calls while a gesture is stable
    - Detection restricted to tracked hand regions between full passes
    - Static gestures held back while an action is being displayed
    """

    def __init__(self, backend: HandLandmarkBackend, cfg: Cfg,
                 on_gesture_confirmed: Optional[Callable[[Gesture], None]] = None,
                 on_action_confirmed: Optional[Callable[[ActionGesture], None]] = None):
        self.backend = backend
        self.cfg = cfg
        self.on_gesture_confirmed = on_gesture_confirmed
        self.on_action_confirmed = on_action_confirmed

        self.engine = GestureEngine(cfg)
        self.action_detector: ActionDetector = create_action_detector(cfg)

        self.frame_index = 0
        self.last_full_detection_frame = 0
        self._tracking_regions: List[Rect] = []
        self.stats = PipelineStats()

        self._gate = threading.Semaphore(1)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gesturecode")

    # Observable state

    @property
    def current_gesture(self) -> Gesture:
        return self.engine.current_gesture

    @property
    def confidence(self) -> float:
        return self.engine.confidence

    @property
    def current_action(self) -> ActionGesture:
        return self.action_detector.current_action

    @property
    def is_processing(self) -> bool:
        return self.engine.is_processing

    @property
    def tracking_regions(self) -> List[Rect]:
        return list(self._tracking_regions)

    # Lifecycle

    def submit(self, frame: Any, timestamp: Optional[float] = None) -> Optional["Future[FrameResult]"]:
        """
        Hand a frame to the worker thread unless one is already in flight.

        Args:
            frame: Image passed to the backend
            timestamp: Capture time in seconds; defaults to now

        Returns:
            Future resolving to the FrameResult, or None if the frame was dropped
        """
        if not self._gate.acquire(blocking=False):
            self.stats.dropped += 1
            logger.debug("Frame dropped, previous frame still in flight")
            return None

        if timestamp is None:
            timestamp = time.time()

        self.stats.submitted += 1
        self.engine.is_processing = True
        try:
            return self._executor.submit(self._run, frame, timestamp)
        except RuntimeError:
            self._finish()
            raise

    def _run(self, frame: Any, timestamp: float) -> FrameResult:
        try:
            return self.process_frame(frame, timestamp)
        finally:
            self._finish()

    def _finish(self) -> None:
        self.engine.is_processing = False
        self._gate.release()

    def close(self) -> None:
        """Wait for the in-flight frame and stop the worker thread."""
        self._executor.shutdown(wait=True)

    def reset(self) -> None:
        """Return every detector and the backend to their initial state."""
        self.engine.reset()
        self.action_detector.reset()
        self._clear_tracking()
        self.frame_index = 0
        self.backend.reset_state()

    def set_backend(self, backend: HandLandmarkBackend) -> None:
        """Switch to another backend; all detector state is reset."""
        logger.info("Switching landmark backend to %s", type(backend).__name__)
        self.backend = backend
        self.reset()

    def update_config(self, cfg: Cfg) -> None:
        """Apply new settings between frames."""
        sanitize_config(cfg)
        strategy_changed = cfg.actions.strategy != self.action_detector.name
        self.cfg = cfg
        self.engine.update_config(cfg)
        if strategy_changed:
            logger.info("Action strategy changed to %s", cfg.actions.strategy)
            self.action_detector = create_action_detector(cfg)
        else:
            self.action_detector.update_config(cfg)

    # Processing

    def process_frame(self, frame: Any, now: float) -> FrameResult:
        """
        Process one frame synchronously on the calling thread.

        Args:
            frame: Image passed to the backend
            now: Frame timestamp in seconds

        Returns:
            FrameResult describing what happened on this frame
        """
        self.frame_index += 1
        self.stats.processed += 1

        if self.engine.check_stale(now):
            self._clear_tracking()

        settings = self.cfg.gestures
        force_full = self.frame_index - self.last_full_detection_frame >= settings.full_detection_interval
        if self._should_skip(force_full):
            self.stats.skipped += 1
            return FrameResult(
                timestamp=now,
                current_gesture=self.engine.current_gesture,
                confidence=self.engine.confidence,
                skipped=True,
            )

        region = None
        if settings.roi_detection and not force_full and self._tracking_regions:
            region = clamped_region(union_region(self._tracking_regions))

        hands = self._detect(frame, region)
        if region is not None and not hands:
            # Lost the hand inside the tracked region, look at the whole frame
            region = None
            hands = self._detect(frame, None)

        result = self.process_observations(hands, now, full_detection=region is None)
        if region is not None:
            result.metadata["region"] = region
        return result

    def process_observations(self, hands: Sequence[HandObservation], now: float,
                             full_detection: bool = True) -> FrameResult:
        """
        Run the detectors on hands already produced by a backend.

        Args:
            hands: Observed hands in discovery order
            now: Frame timestamp in seconds
            full_detection: Whether the hands came from a whole-frame pass

        Returns:
            FrameResult with any confirmed gesture or action
        """
        if not self.cfg.gestures.enabled:
            self.engine.reset()
            self.action_detector.reset()
            self._clear_tracking()
            return FrameResult(timestamp=now, hands=len(hands))

        if self.engine.check_stale(now):
            self._clear_tracking()

        min_confidence = self.cfg.gestures.sensitivity
        classifications = [classify(hand, min_confidence) for hand in hands]
        valid_hands = [hand for hand, c in zip(hands, classifications) if c.valid]

        gesture = self.engine.process(classifications, now)
        if valid_hands:
            self._update_tracking(valid_hands)
            if full_detection:
                self.last_full_detection_frame = self.frame_index
        else:
            self._clear_tracking()

        action = self.action_detector.process(hands, now)

        if gesture is not None and self.action_detector.should_suppress_gestures(now):
            logger.debug("Gesture %s suppressed while action is active", gesture.label)
            gesture = None

        if gesture is not None:
            self._emit(self.on_gesture_confirmed, gesture)
        if action is not None:
            self._emit(self.on_action_confirmed, action)

        return FrameResult(
            timestamp=now,
            gesture=gesture,
            action=action,
            current_gesture=self.engine.current_gesture,
            confidence=self.engine.confidence,
            hands=len(hands),
            metadata={
                "stable_gesture": self.engine.stable_gesture,
                "stable_frames": self.engine.stable_frames,
                "valid_hands": len(valid_hands),
            },
        )

    def _detect(self, frame: Any, region: Optional[Rect]) -> List[HandObservation]:
        try:
            if region is None:
                return list(self.backend.detect_hands(frame))
            crop, snapped = crop_to_region(frame, region)
            return [remap_observation(hand, snapped) for hand in self.backend.detect_hands(crop)]
        except Exception as e:
            self.stats.backend_errors += 1
            logger.warning("Hand detection failed: %s", e)
            return []

    def _should_skip(self, force_full: bool) -> bool:
        settings = self.cfg.gestures
        if force_full or not self._tracking_regions:
            return False
        if self.engine.stable_frames < settings.stable_frame_threshold:
            return False
        return self.frame_index % (max(0, settings.frame_skip_when_stable) + 1) != 0

    def _update_tracking(self, hands: Sequence[HandObservation]) -> None:
        padding = self.cfg.gestures.roi_padding_ratio
        regions = []
        for hand in hands:
            box = hand_bounding_box(hand, self.cfg.gestures.sensitivity)
            if box is not None:
                regions.append(clamped_region(expanded_region(box, padding)))
        self._tracking_regions = regions[:max(1, self.backend.max_hands)]

    def _clear_tracking(self) -> None:
        self._tracking_regions = []
        self.last_full_detection_frame = 0

    def _emit(self, callback: Optional[Callable[[Any], None]], event: Any) -> None:
        if callback is None:
            return
        try:
            callback(event)
        except Exception:
            logger.exception("Event callback failed for %s", event)
