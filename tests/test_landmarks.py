"""
Test cases for hand joint geometry helpers.
"""
import unittest

import numpy as np

from gesturecode.landmarks import (
    LANDMARK_INDEX,
    Rect,
    UNIT_RECT,
    ThumbState,
    clamped_region,
    crop_to_region,
    distance,
    expanded_region,
    hand_bounding_box,
    is_finger_extended,
    observation_from_landmarks,
    path_length,
    radius_variation,
    remap_observation,
    thumb_state,
    union_region,
)
from gesturecode.types import HandObservation, Joint, JointPoint

from tests.fixtures import joints_hand


class TestFingerState(unittest.TestCase):

    def test_finger_extension_margin(self):
        pip = JointPoint(0.5, 0.5, 1.0)
        self.assertTrue(is_finger_extended(JointPoint(0.5, 0.54, 1.0), pip))
        self.assertFalse(is_finger_extended(JointPoint(0.5, 0.52, 1.0), pip))
        self.assertFalse(is_finger_extended(JointPoint(0.5, 0.4, 1.0), pip))

    def test_thumb_state(self):
        ip = JointPoint(0.4, 0.5, 1.0)
        self.assertEqual(thumb_state(JointPoint(0.4, 0.6, 1.0), ip), ThumbState.UP)
        self.assertEqual(thumb_state(JointPoint(0.4, 0.4, 1.0), ip), ThumbState.DOWN)
        self.assertEqual(thumb_state(JointPoint(0.4, 0.52, 1.0), ip), ThumbState.NEUTRAL)


class TestBoundingBox(unittest.TestCase):

    def test_box_of_confident_joints(self):
        hand = HandObservation(joints={
            Joint.WRIST: JointPoint(0.2, 0.1, 0.9),
            Joint.INDEX_TIP: JointPoint(0.6, 0.5, 0.9),
            Joint.LITTLE_TIP: JointPoint(0.9, 0.9, 0.1),
        })
        box = hand_bounding_box(hand, 0.7)
        self.assertAlmostEqual(box.x, 0.2)
        self.assertAlmostEqual(box.y, 0.1)
        self.assertAlmostEqual(box.width, 0.4)
        self.assertAlmostEqual(box.height, 0.4)

    def test_filter_is_inclusive(self):
        hand = HandObservation(joints={
            Joint.WRIST: JointPoint(0.2, 0.2, 0.7),
            Joint.INDEX_TIP: JointPoint(0.4, 0.4, 0.7),
        })
        self.assertIsNotNone(hand_bounding_box(hand, 0.7))

    def test_degenerate_box(self):
        flat = joints_hand({Joint.WRIST: (0.2, 0.5), Joint.INDEX_TIP: (0.6, 0.5)})
        self.assertIsNone(hand_bounding_box(flat, 0.7))
        self.assertIsNone(hand_bounding_box(joints_hand({}), 0.7))


class TestRegions(unittest.TestCase):

    def test_expanded_region(self):
        region = expanded_region(Rect(0.4, 0.4, 0.2, 0.2), 0.15)
        self.assertAlmostEqual(region.x, 0.37)
        self.assertAlmostEqual(region.width, 0.26)

    def test_clamped_region(self):
        region = clamped_region(Rect(-0.1, 0.8, 0.5, 0.4))
        self.assertAlmostEqual(region.x, 0.0)
        self.assertAlmostEqual(region.width, 0.4)
        self.assertAlmostEqual(region.max_y, 1.0)

    def test_clamped_outside_falls_back_to_unit(self):
        self.assertEqual(clamped_region(Rect(1.2, 1.2, 0.1, 0.1)), UNIT_RECT)

    def test_union_region(self):
        region = union_region([Rect(0.1, 0.1, 0.2, 0.2), Rect(0.5, 0.6, 0.1, 0.1)])
        self.assertAlmostEqual(region.x, 0.1)
        self.assertAlmostEqual(region.max_x, 0.6)
        self.assertAlmostEqual(region.max_y, 0.7)
        self.assertEqual(union_region([]), UNIT_RECT)


class TestPaths(unittest.TestCase):

    def test_path_length(self):
        self.assertAlmostEqual(path_length([(0, 0), (0.3, 0.4), (0.3, 0.0)]), 0.9)
        self.assertEqual(path_length([(0.5, 0.5)]), 0.0)

    def test_radius_variation(self):
        square = [(0.4, 0.4), (0.6, 0.4), (0.6, 0.6), (0.4, 0.6)]
        self.assertAlmostEqual(radius_variation(square), 0.0)
        self.assertIsNone(radius_variation([(0.5, 0.5), (0.5, 0.5)]))

    def test_distance(self):
        self.assertAlmostEqual(distance((0.0, 0.0), (0.3, 0.4)), 0.5)


class TestLandmarkConversion(unittest.TestCase):

    def test_maps_indices_and_flips_y(self):
        points = [(i / 100.0, i / 50.0, 0.0) for i in range(21)]
        hand = observation_from_landmarks(points)

        self.assertEqual(set(hand.joints), set(Joint))
        tip = hand.get(Joint.INDEX_TIP)
        self.assertAlmostEqual(tip.x, 0.08)
        self.assertAlmostEqual(tip.y, 1.0 - 0.16)
        self.assertEqual(tip.confidence, 1.0)
        self.assertEqual(hand.overall_confidence, 1.0)
        self.assertEqual(LANDMARK_INDEX[Joint.WRIST], 0)

    def test_short_landmark_list(self):
        self.assertIsNone(observation_from_landmarks([(0.5, 0.5)] * 10))


class TestCropping(unittest.TestCase):

    def test_crop_uses_image_rows_top_down(self):
        frame = np.zeros((100, 200, 3), dtype=np.uint8)
        # Upper-right quarter in y-up coordinates
        crop, snapped = crop_to_region(frame, Rect(0.5, 0.5, 0.5, 0.5))
        self.assertEqual(crop.shape, (50, 100, 3))
        self.assertEqual(snapped, Rect(0.5, 0.5, 0.5, 0.5))

    def test_empty_crop_returns_full_frame(self):
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        crop, snapped = crop_to_region(frame, Rect(0.5, 0.5, 0.0, 0.0))
        self.assertIs(crop, frame)
        self.assertEqual(snapped, UNIT_RECT)

    def test_remap_to_full_frame(self):
        hand = joints_hand({Joint.INDEX_TIP: (0.5, 0.5)})
        remapped = remap_observation(hand, Rect(0.2, 0.4, 0.4, 0.2))
        tip = remapped.get(Joint.INDEX_TIP)
        self.assertAlmostEqual(tip.x, 0.4)
        self.assertAlmostEqual(tip.y, 0.5)
        self.assertEqual(tip.confidence, 0.9)


if __name__ == '__main__':
    unittest.main()
