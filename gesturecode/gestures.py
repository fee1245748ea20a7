"""
Gesture stability and debounce engine.

Turns per-frame classifications of every visible hand into at most one
confirmed gesture per frame, requiring a gesture to be held steadily before it
fires and spacing repeated confirmations by a cooldown.
"""
import logging
from typing import Callable, Optional, Sequence, Tuple

from .types import Gesture
from .config import Cfg, sanitize_config
from .classifier import Classification

logger = logging.getLogger(__name__)


GestureCallback = Callable[[Gesture], None]


def select_candidate(candidates: Sequence[Classification],
                     stable_gesture: Gesture = Gesture.NONE) -> Tuple[Gesture, float]:
    """
    Pick the gesture to track from the candidates of every hand.

    Args:
        candidates: Valid, non-none classifications in discovery order
        stable_gesture: Gesture that has been stable over recent frames

    Returns:
        (gesture, confidence); (NONE, 0.0) when there are no candidates
    """
    if not candidates:
        return Gesture.NONE, 0.0

    open_hands = [c for c in candidates if c.gesture is Gesture.FIVE_FINGERS]
    if len(open_hands) >= 2:
        return Gesture.DOUBLE_OPEN_HANDS, min(open_hands[0].confidence, open_hands[1].confidence)

    if stable_gesture is not Gesture.NONE:
        matching = [c for c in candidates if c.gesture is stable_gesture]
        if matching:
            best = max(matching, key=lambda c: c.confidence)
            return best.gesture, best.confidence

    best = max(candidates, key=lambda c: c.confidence)
    return best.gesture, best.confidence


class GestureEngine:
    """
    Debounces static gesture classifications.

    Features:
    - Multi-hand candidate selection with double-open-hands detection
    - Stability counter used to bias selection and to allow frame skipping
    - Hold-duration and cooldown debounce
    - Idle reset when no valid hand has been seen for the stale timeout
    """

    def __init__(self, cfg: Cfg, on_gesture_confirmed: Optional[GestureCallback] = None):
        self.cfg = cfg
        self.on_gesture_confirmed = on_gesture_confirmed

        # Observable state
        self.current_gesture = Gesture.NONE
        self.confidence = 0.0
        self.is_processing = False

        # Stability tracking
        self.stable_gesture = Gesture.NONE
        self.stable_frames = 0

        # Debounce
        self.held_gesture = Gesture.NONE
        self.hold_start: Optional[float] = None
        self.last_trigger_time: Optional[float] = None
        self.last_valid_time: Optional[float] = None

    def update_config(self, cfg: Cfg) -> None:
        """Swap in a new configuration; takes effect on the next frame."""
        self.cfg = sanitize_config(cfg)

    @property
    def is_idle(self) -> bool:
        return (self.current_gesture is Gesture.NONE
                and self.held_gesture is Gesture.NONE
                and self.hold_start is None
                and self.stable_frames == 0)

    def check_stale(self, now: float) -> bool:
        """
        Reset to idle if no valid hand was seen for longer than the stale timeout.

        Returns:
            True if a reset happened
        """
        if self.last_valid_time is None:
            return False
        if now - self.last_valid_time > self.cfg.gestures.stale_timeout:
            logger.debug("No valid hand for %.2fs, resetting", now - self.last_valid_time)
            self.handle_no_observation()
            return True
        return False

    def process(self, classifications: Sequence[Classification], now: float) -> Optional[Gesture]:
        """
        Process the classifications of every hand in one frame.

        Args:
            classifications: One classification per observed hand, in discovery order
            now: Frame timestamp in seconds

        Returns:
            The gesture confirmed on this frame, if any
        """
        self.check_stale(now)

        valid = [c for c in classifications if c.valid]
        if not valid:
            self.handle_no_observation()
            return None

        self.last_valid_time = now
        candidates = [c for c in valid if c.gesture is not Gesture.NONE]
        gesture, confidence = select_candidate(candidates, self.stable_gesture)

        self._update_stability(gesture, confidence)
        return self._update_gesture(gesture, confidence, now)

    def handle_no_observation(self) -> None:
        """Forget the tracked hand: stability, staleness clock and held gesture."""
        self.last_valid_time = None
        self.stable_gesture = Gesture.NONE
        self.stable_frames = 0
        self._reset_gesture()

    def reset(self) -> None:
        """Full reset to idle. Safe to call repeatedly."""
        self.handle_no_observation()
        self.last_trigger_time = None

    def _update_stability(self, gesture: Gesture, confidence: float) -> None:
        if gesture is Gesture.NONE or confidence < self.cfg.gestures.sensitivity:
            self.stable_gesture = Gesture.NONE
            self.stable_frames = 0
            return

        if gesture is self.stable_gesture:
            self.stable_frames += 1
        else:
            self.stable_gesture = gesture
            self.stable_frames = 1

    def _update_gesture(self, gesture: Gesture, confidence: float, now: float) -> Optional[Gesture]:
        self.current_gesture = gesture
        self.confidence = confidence

        if gesture is Gesture.NONE:
            self._reset_gesture()
            return None

        if gesture is not self.held_gesture or self.hold_start is None:
            self.held_gesture = gesture
            self.hold_start = now
            return None

        settings = self.cfg.gestures
        if now - self.hold_start < settings.hold_duration:
            return None
        if self.last_trigger_time is not None and now - self.last_trigger_time < settings.cooldown:
            return None

        self.last_trigger_time = now
        self.hold_start = now
        logger.info("Gesture confirmed: %s (%.2f)", gesture.label, confidence)
        if self.on_gesture_confirmed is not None:
            self.on_gesture_confirmed(gesture)
        return gesture

    def _reset_gesture(self) -> None:
        # Last trigger time survives so the cooldown still applies
        self.current_gesture = Gesture.NONE
        self.confidence = 0.0
        self.held_gesture = Gesture.NONE
        self.hold_start = None
