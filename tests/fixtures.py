"""
Synthetic hand observations and backends for tests.
"""
import threading
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from gesturecode.types import HandObservation, Joint, JointPoint

# Timestamps step by 1/32 s so hold and cooldown arithmetic stays exact
STEP = 1.0 / 32

FINGER_X = {
    "thumb": 0.35,
    "index": 0.45,
    "middle": 0.50,
    "ring": 0.55,
    "little": 0.60,
}

PIP_Y = 0.5
EXTENDED_TIP_Y = 0.6
CURLED_TIP_Y = 0.45
THUMB_TIP_Y = {"up": 0.6, "down": 0.4, "neutral": 0.5}


def make_hand(thumb: str = "neutral", index: bool = False, middle: bool = False,
              ring: bool = False, little: bool = False, confidence: float = 0.9,
              gate_confidence: Optional[float] = None,
              wrist: Tuple[float, float] = (0.5, 0.2),
              omit: Iterable[Joint] = ()) -> HandObservation:
    """
    Build a hand with the given fingers extended.

    ``gate_confidence`` overrides the confidence of the thumb, index and
    middle tips only.
    """
    tip_conf = confidence if gate_confidence is None else gate_confidence

    def tip_y(extended: bool) -> float:
        return EXTENDED_TIP_Y if extended else CURLED_TIP_Y

    joints = {
        Joint.WRIST: JointPoint(wrist[0], wrist[1], confidence),
        Joint.THUMB_IP: JointPoint(FINGER_X["thumb"], PIP_Y, confidence),
        Joint.THUMB_TIP: JointPoint(FINGER_X["thumb"], THUMB_TIP_Y[thumb], tip_conf),
        Joint.INDEX_PIP: JointPoint(FINGER_X["index"], PIP_Y, confidence),
        Joint.INDEX_TIP: JointPoint(FINGER_X["index"], tip_y(index), tip_conf),
        Joint.MIDDLE_PIP: JointPoint(FINGER_X["middle"], PIP_Y, confidence),
        Joint.MIDDLE_TIP: JointPoint(FINGER_X["middle"], tip_y(middle), tip_conf),
        Joint.RING_PIP: JointPoint(FINGER_X["ring"], PIP_Y, confidence),
        Joint.RING_TIP: JointPoint(FINGER_X["ring"], tip_y(ring), confidence),
        Joint.LITTLE_PIP: JointPoint(FINGER_X["little"], PIP_Y, confidence),
        Joint.LITTLE_TIP: JointPoint(FINGER_X["little"], tip_y(little), confidence),
    }
    for joint in omit:
        joints.pop(joint, None)
    return HandObservation(joints=joints, overall_confidence=confidence)


def peace_sign(**kwargs) -> HandObservation:
    return make_hand(index=True, middle=True, **kwargs)


def open_hand(**kwargs) -> HandObservation:
    return make_hand(thumb="up", index=True, middle=True, ring=True, little=True, **kwargs)


def joints_hand(points: Dict[Joint, Tuple[float, float]], confidence: float = 0.9) -> HandObservation:
    """Build a hand from explicit joint locations."""
    joints = {joint: JointPoint(x, y, confidence) for joint, (x, y) in points.items()}
    return HandObservation(joints=joints, overall_confidence=confidence)


def times(count: int, start: float = 0.0, step: float = STEP) -> List[float]:
    return [start + i * step for i in range(count)]


class FakeBackend:
    """Backend returning scripted hands and recording every call."""

    def __init__(self, hands: Sequence[HandObservation] = (), max_hands: int = 2):
        self.max_hands = max_hands
        self.hands = list(hands)
        self.frames: List[object] = []
        self.reset_count = 0
        self.error: Optional[Exception] = None

    def detect_hands(self, frame) -> List[HandObservation]:
        self.frames.append(frame)
        if self.error is not None:
            raise self.error
        return list(self.hands)

    def reset_state(self) -> None:
        self.reset_count += 1


class BlockingBackend(FakeBackend):
    """Backend that waits on an event before returning."""

    def __init__(self, hands: Sequence[HandObservation] = (), max_hands: int = 2):
        super().__init__(hands, max_hands)
        self.started = threading.Event()
        self.release = threading.Event()

    def detect_hands(self, frame) -> List[HandObservation]:
        self.started.set()
        self.release.wait(timeout=5)
        return super().detect_hands(frame)
