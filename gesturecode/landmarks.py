"""
Hand joint geometry helpers.

Everything here works on normalized [0..1] coordinates with y growing upward,
and is independent of the landmark backend that produced the points.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from .types import HandObservation, Joint, JointPoint


Point = Tuple[float, float]

FINGER_EXTENSION_MARGIN = 0.03
THUMB_MARGIN = 0.05

# 21-landmark hand topology indices for the joints we track
LANDMARK_INDEX = {
    Joint.WRIST: 0,
    Joint.THUMB_IP: 3,
    Joint.THUMB_TIP: 4,
    Joint.INDEX_PIP: 6,
    Joint.INDEX_TIP: 8,
    Joint.MIDDLE_PIP: 10,
    Joint.MIDDLE_TIP: 12,
    Joint.RING_PIP: 14,
    Joint.RING_TIP: 16,
    Joint.LITTLE_PIP: 18,
    Joint.LITTLE_TIP: 20,
}


class ThumbState(Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in normalized coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


UNIT_RECT = Rect(0.0, 0.0, 1.0, 1.0)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def is_finger_extended(tip: JointPoint, pip: JointPoint,
                       margin: float = FINGER_EXTENSION_MARGIN) -> bool:
    """
    Check whether a finger is extended.

    Args:
        tip: Finger tip joint
        pip: Proximal interphalangeal joint of the same finger
        margin: Minimum height of the tip above the PIP joint

    Returns:
        True if the tip sits clearly above the PIP joint
    """
    return tip.y > pip.y + margin


def thumb_state(tip: JointPoint, ip: JointPoint, margin: float = THUMB_MARGIN) -> ThumbState:
    """Classify the thumb as pointing up, down or neither."""
    if tip.y > ip.y + margin:
        return ThumbState.UP
    if tip.y < ip.y - margin:
        return ThumbState.DOWN
    return ThumbState.NEUTRAL


def hand_bounding_box(hand: HandObservation, min_confidence: float) -> Optional[Rect]:
    """
    Bounding box of all joints with confidence >= min_confidence.

    Returns:
        The box, or None when no joint qualifies or the box is degenerate
    """
    points = [p for p in hand.joints.values() if p.confidence >= min_confidence]
    if not points:
        return None

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    width = max(xs) - min(xs)
    height = max(ys) - min(ys)
    if width <= 0 or height <= 0:
        return None
    return Rect(min(xs), min(ys), width, height)


def union_region(regions: Sequence[Rect]) -> Rect:
    """Smallest rectangle covering every region; the unit square when empty."""
    regions = [r for r in regions if not r.is_empty]
    if not regions:
        return UNIT_RECT
    min_x = min(r.x for r in regions)
    min_y = min(r.y for r in regions)
    max_x = max(r.max_x for r in regions)
    max_y = max(r.max_y for r in regions)
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def expanded_region(region: Rect, padding_ratio: float) -> Rect:
    """Grow a region by ``padding_ratio`` of its size on every side."""
    if region.is_empty:
        return UNIT_RECT
    pad_x = region.width * padding_ratio
    pad_y = region.height * padding_ratio
    return Rect(region.x - pad_x, region.y - pad_y,
                region.width + 2 * pad_x, region.height + 2 * pad_y)


def clamped_region(region: Rect) -> Rect:
    """Intersect a region with the unit square."""
    min_x = max(0.0, region.x)
    min_y = max(0.0, region.y)
    max_x = min(1.0, region.max_x)
    max_y = min(1.0, region.max_y)
    if max_x <= min_x or max_y <= min_y:
        return UNIT_RECT
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def crop_to_region(frame: np.ndarray, region: Rect) -> Tuple[np.ndarray, Rect]:
    """
    Crop an image to a normalized region.

    Args:
        frame: Image array, rows running top to bottom
        region: Region in y-up normalized coordinates

    Returns:
        (crop, snapped region) where the snapped region matches the pixel bounds
    """
    height, width = frame.shape[:2]
    x0 = max(0, int(math.floor(region.x * width)))
    x1 = min(width, int(math.ceil(region.max_x * width)))
    row0 = max(0, int(math.floor((1.0 - region.max_y) * height)))
    row1 = min(height, int(math.ceil((1.0 - region.y) * height)))
    if x1 <= x0 or row1 <= row0:
        return frame, UNIT_RECT

    snapped = Rect(x0 / width, 1.0 - row1 / height, (x1 - x0) / width, (row1 - row0) / height)
    return frame[row0:row1, x0:x1], snapped


def remap_observation(hand: HandObservation, region: Rect) -> HandObservation:
    """Map an observation made inside ``region`` back to full-frame coordinates."""
    joints = {
        joint: JointPoint(
            x=region.x + p.x * region.width,
            y=region.y + p.y * region.height,
            confidence=p.confidence,
        )
        for joint, p in hand.joints.items()
    }
    return HandObservation(joints=joints, overall_confidence=hand.overall_confidence)


def path_length(points: Sequence[Point]) -> float:
    """Total length of a polyline."""
    return sum(distance(points[i - 1], points[i]) for i in range(1, len(points)))


def value_range(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return max(values) - min(values)


def radius_variation(points: Sequence[Point]) -> Optional[float]:
    """
    Coefficient of variation of distances from the centroid.

    Returns:
        std / mean of the radii, or None when the mean radius is zero
    """
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return None
    center = arr.mean(axis=0)
    radii = np.linalg.norm(arr - center, axis=1)
    mean = float(radii.mean())
    if mean <= 0:
        return None
    return float(radii.std()) / mean


def observation_from_landmarks(points: Sequence[Sequence[float]],
                               confidence: float = 1.0) -> Optional[HandObservation]:
    """
    Convert a 21-point landmark list into a HandObservation.

    Args:
        points: Landmarks as (x, y, ...) in image coordinates with y growing downward
        confidence: Confidence assigned to every joint

    Returns:
        Observation with y flipped to grow upward, or None if the list is too short
    """
    if len(points) <= max(LANDMARK_INDEX.values()):
        return None

    joints = {}
    for joint, index in LANDMARK_INDEX.items():
        x, y = float(points[index][0]), float(points[index][1])
        joints[joint] = JointPoint(x=x, y=1.0 - y, confidence=confidence)

    overall = sum(p.confidence for p in joints.values()) / len(joints)
    return HandObservation(joints=joints, overall_confidence=overall)
