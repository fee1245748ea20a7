"""
Type definitions for hand gesture recognition system.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, runtime_checkable


class Joint(Enum):
    """Tracked hand joints. Closed set shared by every backend."""
    WRIST = "wrist"
    THUMB_TIP = "thumb_tip"
    THUMB_IP = "thumb_ip"
    INDEX_TIP = "index_tip"
    INDEX_PIP = "index_pip"
    MIDDLE_TIP = "middle_tip"
    MIDDLE_PIP = "middle_pip"
    RING_TIP = "ring_tip"
    RING_PIP = "ring_pip"
    LITTLE_TIP = "little_tip"
    LITTLE_PIP = "little_pip"


@dataclass(frozen=True)
class JointPoint:
    """A joint location in normalized [0..1] coordinates, y growing upward."""
    x: float
    y: float
    confidence: float

    @property
    def location(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class HandObservation:
    """One hand as reported by a landmark backend for a single frame."""
    joints: Mapping[Joint, JointPoint]
    overall_confidence: float = 0.0

    def get(self, joint: Joint) -> Optional[JointPoint]:
        return self.joints.get(joint)


class Gesture(Enum):
    """Static hand poses recognized by the classifier."""
    ONE_FINGER = "one_finger"
    PEACE_SIGN = "peace_sign"
    THREE_FINGERS = "three_fingers"
    FOUR_FINGERS = "four_fingers"
    FIVE_FINGERS = "five_fingers"
    CLOSED_FIST = "closed_fist"
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    PINKY_UP = "pinky_up"
    DOUBLE_OPEN_HANDS = "double_open_hands"
    NONE = "none"

    @property
    def action(self) -> "KeyAction":
        return GESTURE_ACTIONS[self]

    @property
    def label(self) -> str:
        return GESTURE_ACTIONS[self].label

    @property
    def triggers_voice_input(self) -> bool:
        return GESTURE_ACTIONS[self].kind == "voice"

    @property
    def is_number_gesture(self) -> bool:
        return self in NUMBER_GESTURES


class ActionGesture(Enum):
    """Motion gestures detected from short trajectories."""
    SWIPE_LEFT = "swipe_left"
    SWIPE_RIGHT = "swipe_right"
    PINCH = "pinch"
    AIR_TAP = "air_tap"
    BACKHAND_WAVE = "backhand_wave"
    PINCH_DRAG_LEFT = "pinch_drag_left"
    CIRCLE = "circle"
    NONE = "none"

    @property
    def action(self) -> "KeyAction":
        return ACTION_GESTURE_ACTIONS[self]

    @property
    def label(self) -> str:
        return ACTION_GESTURE_ACTIONS[self].label


@dataclass(frozen=True)
class KeyAction:
    """What an effector should do when a gesture is confirmed.

    ``kind`` is one of "key", "voice", "click" or "none". Key codes are macOS
    virtual key codes; ``key`` is a portable key name for other effectors.
    """
    kind: str
    label: str
    description: str
    emoji: str = ""
    key: Optional[str] = None
    key_code: Optional[int] = None
    modifiers: Tuple[str, ...] = ()


GESTURE_ACTIONS: Dict[Gesture, KeyAction] = {
    Gesture.ONE_FINGER: KeyAction("key", "One Finger", "Type '1'", "☝️", key="1", key_code=18),
    Gesture.PEACE_SIGN: KeyAction("key", "Peace Sign", "Type '2'", "✌️", key="2", key_code=19),
    Gesture.THREE_FINGERS: KeyAction("key", "Three Fingers", "Type '3'", "🤟", key="3", key_code=20),
    Gesture.FOUR_FINGERS: KeyAction("key", "Four Fingers", "Type '4'", "🖖", key="4", key_code=21),
    Gesture.FIVE_FINGERS: KeyAction("key", "Five Fingers", "Type '5'", "🖐️", key="5", key_code=23),
    Gesture.CLOSED_FIST: KeyAction(
        "key", "Closed Fist", "Press Shift+Tab", "✊", key="tab", key_code=48, modifiers=("shift",)
    ),
    Gesture.THUMBS_UP: KeyAction("voice", "Thumbs Up", "Toggle Voice Input", "👍"),
    Gesture.THUMBS_DOWN: KeyAction("key", "Thumbs Down", "Press Escape", "👎", key="escape", key_code=53),
    Gesture.PINKY_UP: KeyAction("key", "Pinky Up", "Press Enter", "🤙", key="enter", key_code=36),
    Gesture.DOUBLE_OPEN_HANDS: KeyAction("key", "Double Open Hands", "Press Tab", "🙌", key="tab", key_code=48),
    Gesture.NONE: KeyAction("none", "None", "No action", "❓"),
}

ACTION_GESTURE_ACTIONS: Dict[ActionGesture, KeyAction] = {
    ActionGesture.SWIPE_LEFT: KeyAction("key", "Swipe Left", "Press Left Arrow", "⬅️", key="left", key_code=123),
    ActionGesture.SWIPE_RIGHT: KeyAction("key", "Swipe Right", "Press Right Arrow", "➡️", key="right", key_code=124),
    ActionGesture.PINCH: KeyAction("click", "Pinch", "Pinch (Click)", "🤏"),
    ActionGesture.AIR_TAP: KeyAction("key", "Air Tap", "Press Enter", "☝️", key="enter", key_code=36),
    ActionGesture.BACKHAND_WAVE: KeyAction(
        "key", "Backhand Wave", "Press Shift+Tab", "🤚", key="tab", key_code=48, modifiers=("shift",)
    ),
    ActionGesture.PINCH_DRAG_LEFT: KeyAction("key", "Pinch Drag Left", "Press Escape", "🤏", key="escape", key_code=53),
    ActionGesture.CIRCLE: KeyAction("key", "Circle", "Press Page Down", "⭕️", key="page_down", key_code=121),
    ActionGesture.NONE: KeyAction("none", "None", "No action", "❓"),
}

NUMBER_GESTURES = frozenset({
    Gesture.ONE_FINGER,
    Gesture.PEACE_SIGN,
    Gesture.THREE_FINGERS,
    Gesture.FOUR_FINGERS,
    Gesture.FIVE_FINGERS,
})

# Every variant must carry metadata
assert set(GESTURE_ACTIONS) == set(Gesture), "GESTURE_ACTIONS is missing a Gesture"
assert set(ACTION_GESTURE_ACTIONS) == set(ActionGesture), "ACTION_GESTURE_ACTIONS is missing an ActionGesture"


@dataclass
class FrameResult:
    """Outcome of processing one frame through the pipeline."""
    timestamp: float
    gesture: Optional[Gesture] = None         # confirmed this frame
    action: Optional[ActionGesture] = None    # confirmed this frame
    current_gesture: Gesture = Gesture.NONE
    confidence: float = 0.0
    hands: int = 0
    skipped: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class HandLandmarkBackend(Protocol):
    """Pose-estimation backend that turns a frame into hand observations."""

    max_hands: int

    def detect_hands(self, frame: Any) -> List[HandObservation]:
        """Return zero or more hands found in ``frame``. May raise."""
        ...

    def reset_state(self) -> None:
        """Drop any tracking state kept between frames."""
        ...


@runtime_checkable
class ControllerProto(Protocol):
    """Abstract protocol for controllers that execute gesture commands."""

    async def press_key(self, key: str, modifiers: Tuple[str, ...] = ()) -> None:
        """Press and release ``key`` with optional modifier keys held."""
        ...

    async def toggle_voice(self) -> None:
        """Toggle voice recording on or off."""
        ...

    async def click(self) -> None:
        """Perform a primary mouse click."""
        ...
