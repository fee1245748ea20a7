"""
Motion action detection from short hand trajectories.

Two strategies share one per-frame contract:
- SwipePinchDetector: wrist swipes and an edge-triggered thumb/index pinch
- MotionPathDetector: air-tap, backhand wave, pinch-drag-left and circle
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Sequence

from .types import ActionGesture, HandObservation, Joint
from .config import Cfg, sanitize_config
from .landmarks import (
    Point,
    distance,
    hand_bounding_box,
    midpoint,
    path_length,
    radius_variation,
    value_range,
)

logger = logging.getLogger(__name__)


ActionCallback = Callable[[ActionGesture], None]


@dataclass
class TimedPoint:
    """A point sampled at a specific time."""
    timestamp: float
    point: Point


@dataclass
class TimedValue:
    """A scalar sampled at a specific time."""
    timestamp: float
    value: float


def select_primary_hand(hands: Sequence[HandObservation],
                        min_confidence: float) -> Optional[HandObservation]:
    """
    Pick the hand whose index tip is tracked with the highest confidence.

    Args:
        hands: Observed hands in discovery order
        min_confidence: Index tip confidence required to be considered

    Returns:
        Best hand, the first hand if none qualifies, or None for no hands
    """
    best = None
    best_confidence = 0.0
    for hand in hands:
        tip = hand.get(Joint.INDEX_TIP)
        if tip is None or tip.confidence < min_confidence:
            continue
        if best is None or tip.confidence > best_confidence:
            best = hand
            best_confidence = tip.confidence
    if best is not None:
        return best
    return hands[0] if hands else None


class ActionDetector:
    """
    Base class holding the shared cooldown and event plumbing.

    Subclasses implement ``_detect`` and ``_clear_tracking``.
    """

    name = "base"

    def __init__(self, cfg: Cfg, on_action_confirmed: Optional[ActionCallback] = None):
        self.cfg = cfg
        self.on_action_confirmed = on_action_confirmed

        self.current_action = ActionGesture.NONE
        self.confidence = 0.0
        self.last_trigger_time: Optional[float] = None
        self.display_until: Optional[float] = None

    def update_config(self, cfg: Cfg) -> None:
        self.cfg = sanitize_config(cfg)

    @property
    def cooldown(self) -> float:
        return self.cfg.actions.effective_cooldown

    def can_trigger(self, now: float) -> bool:
        """True when no action fired yet or the cooldown has elapsed."""
        if self.last_trigger_time is None:
            return True
        return now - self.last_trigger_time >= self.cooldown

    def should_suppress_gestures(self, now: float) -> bool:
        """Whether static gestures should be held back at ``now``."""
        return False

    def process(self, hands: Sequence[HandObservation], now: float) -> Optional[ActionGesture]:
        """
        Process the hands observed in one frame.

        Args:
            hands: Observed hands in discovery order, possibly empty
            now: Frame timestamp in seconds

        Returns:
            The action confirmed on this frame, if any
        """
        if not (self.cfg.gestures.enabled and self.cfg.actions.enabled):
            self.reset()
            return None

        self._expire_current_action(now)
        return self._detect(hands, now)

    def reset(self) -> None:
        """Clear histories, cooldown and edge state. Safe to call repeatedly."""
        self._clear_tracking()
        self.last_trigger_time = None
        self.display_until = None
        self.current_action = ActionGesture.NONE
        self.confidence = 0.0

    def _detect(self, hands: Sequence[HandObservation], now: float) -> Optional[ActionGesture]:
        raise NotImplementedError

    def _clear_tracking(self) -> None:
        raise NotImplementedError

    def _trigger(self, action: ActionGesture, now: float, confidence: float = 1.0) -> ActionGesture:
        self.last_trigger_time = now
        self.display_until = now + self.cfg.actions.display_duration
        self.current_action = action
        self.confidence = confidence
        self._clear_tracking()

        logger.info("Action confirmed: %s", action.label)
        if self.on_action_confirmed is not None:
            self.on_action_confirmed(action)
        return action

    def _expire_current_action(self, now: float) -> None:
        if self.display_until is not None and now > self.display_until:
            self.display_until = None
            self.current_action = ActionGesture.NONE
            self.confidence = 0.0


class SwipePinchDetector(ActionDetector):
    """
    Detects horizontal wrist swipes and thumb/index pinches.

    The pinch is latched below ``pinch_threshold`` and released above the
    larger ``pinch_release_threshold``; swipes are not evaluated while latched.
    """

    name = "swipe_pinch"

    def __init__(self, cfg: Cfg, on_action_confirmed: Optional[ActionCallback] = None):
        self.samples: Deque[TimedPoint] = deque()
        self.is_pinched = False
        super().__init__(cfg, on_action_confirmed)

    def _clear_tracking(self) -> None:
        self.samples.clear()
        self.is_pinched = False

    def _detect(self, hands: Sequence[HandObservation], now: float) -> Optional[ActionGesture]:
        hand = select_primary_hand(hands, self.cfg.gestures.sensitivity)
        if hand is None:
            self._clear_tracking()
            return None

        wrist = hand.get(Joint.WRIST)
        if wrist is None:
            return None

        if self._detect_pinch(hand, now):
            return self._trigger(ActionGesture.PINCH, now)

        self.samples.append(TimedPoint(now, wrist.location))
        self._prune(now)

        if self.is_pinched:
            return None
        return self._detect_swipe(now)

    def _trigger(self, action: ActionGesture, now: float, confidence: float = 1.0) -> ActionGesture:
        # The pinch latch outlives the sample window
        latched = self.is_pinched
        result = super()._trigger(action, now, confidence)
        self.is_pinched = latched
        return result

    def _detect_pinch(self, hand: HandObservation, now: float) -> bool:
        thumb = hand.get(Joint.THUMB_TIP)
        index = hand.get(Joint.INDEX_TIP)
        if thumb is None or index is None:
            return False

        settings = self.cfg.actions.swipe_pinch
        gap = distance(thumb.location, index.location)

        if not self.is_pinched and gap < settings.pinch_threshold and self.can_trigger(now):
            self.is_pinched = True
            return True

        if self.is_pinched and gap > settings.pinch_release_threshold:
            self.is_pinched = False
        return False

    def _detect_swipe(self, now: float) -> Optional[ActionGesture]:
        if len(self.samples) < 2 or not self.can_trigger(now):
            return None

        settings = self.cfg.actions.swipe_pinch
        first = self.samples[0].point
        last = self.samples[-1].point
        dx = last[0] - first[0]
        dy = last[1] - first[1]

        if abs(dx) < settings.swipe_distance or abs(dy) > settings.swipe_vertical_tolerance:
            return None

        action = ActionGesture.SWIPE_LEFT if dx < 0 else ActionGesture.SWIPE_RIGHT
        return self._trigger(action, now)

    def _prune(self, now: float) -> None:
        window = self.cfg.actions.swipe_pinch.swipe_window
        while self.samples and now - self.samples[0].timestamp > window:
            self.samples.popleft()


class MotionPathDetector(ActionDetector):
    """
    Detects air-taps, backhand waves, leftward pinch drags and circles.

    Keeps windowed histories of the index tip path, the pinch midpoint path,
    and the hand bounding box center and area.
    """

    name = "motion_path"

    def __init__(self, cfg: Cfg, on_action_confirmed: Optional[ActionCallback] = None):
        self.index_path: Deque[TimedPoint] = deque()
        self.pinch_path: Deque[TimedPoint] = deque()
        self.center_path: Deque[TimedPoint] = deque()
        self.area_series: Deque[TimedValue] = deque()
        super().__init__(cfg, on_action_confirmed)

    def should_suppress_gestures(self, now: float) -> bool:
        if not self.cfg.actions.enabled:
            return False
        if self.display_until is not None and now < self.display_until:
            return True
        return self.last_trigger_time is not None and not self.can_trigger(now)

    def _clear_tracking(self) -> None:
        self.index_path.clear()
        self.pinch_path.clear()
        self.center_path.clear()
        self.area_series.clear()

    def _detect(self, hands: Sequence[HandObservation], now: float) -> Optional[ActionGesture]:
        self._prune(now - self.cfg.actions.window)

        min_confidence = self.cfg.gestures.sensitivity
        hand = select_primary_hand(hands, min_confidence)
        if hand is None:
            self._clear_tracking()
            return None

        self._record(hand, now, min_confidence)

        if not self.can_trigger(now):
            return None
        if self.display_until is not None and now < self.display_until:
            return None

        if self._detect_air_tap(now):
            return self._trigger(ActionGesture.AIR_TAP, now)
        if self._detect_backhand_wave():
            return self._trigger(ActionGesture.BACKHAND_WAVE, now)
        if self._detect_pinch_drag_left():
            return self._trigger(ActionGesture.PINCH_DRAG_LEFT, now)
        if self._detect_circle():
            return self._trigger(ActionGesture.CIRCLE, now)
        return None

    def _record(self, hand: HandObservation, now: float, min_confidence: float) -> None:
        box = hand_bounding_box(hand, min_confidence)
        if box is not None:
            self.center_path.append(TimedPoint(now, (box.mid_x, box.mid_y)))
            self.area_series.append(TimedValue(now, box.area))

        index = hand.get(Joint.INDEX_TIP)
        if index is None or index.confidence < min_confidence:
            return
        self.index_path.append(TimedPoint(now, index.location))

        thumb = hand.get(Joint.THUMB_TIP)
        if thumb is None or thumb.confidence < min_confidence:
            return
        if distance(index.location, thumb.location) < self.cfg.actions.motion_path.pinch_threshold:
            self.pinch_path.append(TimedPoint(now, midpoint(index.location, thumb.location)))

    def _prune(self, cutoff: float) -> None:
        for history in (self.index_path, self.pinch_path, self.center_path, self.area_series):
            while history and history[0].timestamp < cutoff:
                history.popleft()

    def _detect_air_tap(self, now: float) -> bool:
        settings = self.cfg.actions.motion_path
        start = now - settings.air_tap_max_duration
        areas = [s.value for s in self.area_series if s.timestamp >= start]
        if len(areas) < 3:
            return False

        first, last = areas[0], areas[-1]
        if first <= 0 or last <= 0:
            return False

        peak_index = max(range(len(areas)), key=lambda i: areas[i])
        if peak_index == 0 or peak_index == len(areas) - 1:
            return False

        peak = areas[peak_index]
        if peak < first * (1 + settings.air_tap_area_increase):
            return False
        if last > peak * (1 - settings.air_tap_area_decrease):
            return False

        xs = [s.point[0] for s in self.index_path if s.timestamp >= start]
        if len(xs) >= 2 and value_range(xs) > settings.air_tap_max_horizontal_drift:
            return False
        return True

    def _detect_backhand_wave(self) -> bool:
        settings = self.cfg.actions.motion_path
        if len(self.center_path) < settings.wave_min_points:
            return False

        xs = [s.point[0] for s in self.center_path]
        if value_range(xs) < settings.wave_amplitude:
            return False

        changes = 0
        last_sign = 0
        for prev, cur in zip(xs, xs[1:]):
            dx = cur - prev
            if abs(dx) < settings.wave_deadzone:
                continue
            sign = 1 if dx > 0 else -1
            if last_sign and sign != last_sign:
                changes += 1
            last_sign = sign
        return changes >= settings.wave_direction_changes

    def _detect_pinch_drag_left(self) -> bool:
        settings = self.cfg.actions.motion_path
        if len(self.pinch_path) < 3:
            return False

        first = self.pinch_path[0].point
        last = self.pinch_path[-1].point
        if first[0] - last[0] < settings.drag_left_distance:
            return False
        return value_range([s.point[1] for s in self.pinch_path]) <= settings.drag_max_y_drift

    def _detect_circle(self) -> bool:
        settings = self.cfg.actions.motion_path
        if len(self.index_path) < settings.circle_min_points:
            return False

        points = [s.point for s in self.index_path]
        if distance(points[0], points[-1]) > settings.circle_closure_threshold:
            return False
        if path_length(points) < settings.circle_min_path_length:
            return False

        variation = radius_variation(points)
        return variation is not None and variation <= settings.circle_roundness_std_ratio


DETECTORS = {
    SwipePinchDetector.name: SwipePinchDetector,
    MotionPathDetector.name: MotionPathDetector,
}


def create_action_detector(cfg: Cfg,
                           on_action_confirmed: Optional[ActionCallback] = None) -> ActionDetector:
    """Build the detector named by ``cfg.actions.strategy``."""
    try:
        detector_cls = DETECTORS[cfg.actions.strategy]
    except KeyError:
        raise ValueError(f"Unknown action strategy: {cfg.actions.strategy!r}") from None
    return detector_cls(cfg, on_action_confirmed)
