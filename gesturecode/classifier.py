"""
Static hand gesture classification from finger extension flags.
"""
from dataclasses import dataclass

from .types import Gesture, HandObservation, Joint
from .landmarks import ThumbState, is_finger_extended, thumb_state


REQUIRED_JOINTS = (
    Joint.THUMB_TIP, Joint.THUMB_IP,
    Joint.INDEX_TIP, Joint.INDEX_PIP,
    Joint.MIDDLE_TIP, Joint.MIDDLE_PIP,
    Joint.RING_TIP, Joint.RING_PIP,
    Joint.LITTLE_TIP, Joint.LITTLE_PIP,
)

# Joints whose confidence gates the whole classification
GATING_JOINTS = (Joint.THUMB_TIP, Joint.INDEX_TIP, Joint.MIDDLE_TIP)

CLOSED_FIST_CONFIDENCE = 0.8


@dataclass(frozen=True)
class Classification:
    """Result of classifying one hand."""
    gesture: Gesture
    confidence: float
    valid: bool


INVALID = Classification(Gesture.NONE, 0.0, False)


def _mean(*values: float) -> float:
    return sum(values) / len(values)


def classify(hand: HandObservation, min_confidence: float) -> Classification:
    """
    Classify a single hand into a static gesture.

    Args:
        hand: Joint observation for one hand
        min_confidence: Gating joints must be strictly above this confidence

    Returns:
        Classification; ``valid`` is False when joints are missing or unreliable
    """
    joints = hand.joints
    if any(j not in joints for j in REQUIRED_JOINTS):
        return INVALID
    if any(joints[j].confidence <= min_confidence for j in GATING_JOINTS):
        return INVALID

    thumb_tip = joints[Joint.THUMB_TIP]
    index_tip = joints[Joint.INDEX_TIP]
    middle_tip = joints[Joint.MIDDLE_TIP]
    ring_tip = joints[Joint.RING_TIP]
    little_tip = joints[Joint.LITTLE_TIP]

    thumb = thumb_state(thumb_tip, joints[Joint.THUMB_IP])
    index = is_finger_extended(index_tip, joints[Joint.INDEX_PIP])
    middle = is_finger_extended(middle_tip, joints[Joint.MIDDLE_PIP])
    ring = is_finger_extended(ring_tip, joints[Joint.RING_PIP])
    little = is_finger_extended(little_tip, joints[Joint.LITTLE_PIP])

    no_fingers = not (index or middle or ring or little)
    all_fingers = index and middle and ring and little

    if thumb is ThumbState.UP and no_fingers:
        return Classification(Gesture.THUMBS_UP, thumb_tip.confidence, True)
    if thumb is ThumbState.DOWN and no_fingers:
        return Classification(Gesture.THUMBS_DOWN, thumb_tip.confidence, True)
    if thumb is ThumbState.NEUTRAL and little and not (index or middle or ring):
        return Classification(Gesture.PINKY_UP, little_tip.confidence, True)
    if thumb is ThumbState.UP and all_fingers:
        confidence = _mean(thumb_tip.confidence, index_tip.confidence, middle_tip.confidence,
                           ring_tip.confidence, little_tip.confidence)
        return Classification(Gesture.FIVE_FINGERS, confidence, True)
    if all_fingers:
        confidence = _mean(index_tip.confidence, middle_tip.confidence,
                           ring_tip.confidence, little_tip.confidence)
        return Classification(Gesture.FOUR_FINGERS, confidence, True)
    if no_fingers:
        return Classification(Gesture.CLOSED_FIST, CLOSED_FIST_CONFIDENCE, True)
    if index and not (middle or ring or little):
        return Classification(Gesture.ONE_FINGER, index_tip.confidence, True)
    if index and middle and not (ring or little):
        return Classification(Gesture.PEACE_SIGN, _mean(index_tip.confidence, middle_tip.confidence), True)
    if index and middle and ring and not little:
        confidence = _mean(index_tip.confidence, middle_tip.confidence, ring_tip.confidence)
        return Classification(Gesture.THREE_FINGERS, confidence, True)

    return Classification(Gesture.NONE, 0.0, True)
