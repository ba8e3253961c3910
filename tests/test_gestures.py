"""
Tests for Gesture Classification
=================================
"""

import pytest

from handpose_demo.detection.hand_detector import HandLandmarks, Landmark, LandmarkIndex
from handpose_demo.recognition.gesture_classifier import (
    Gesture,
    GestureClassifier,
    classify,
    status_for,
)


class TestClassify:
    """Fingertip ordering rules."""
    
    def test_open_hand(self, make_hand):
        """Strictly increasing tip y (thumb highest) is an open hand."""
        hand = make_hand(tip_ys=(0.1, 0.2, 0.3, 0.4, 0.5))
        assert classify(hand) is Gesture.OPEN_HAND
    
    def test_closed_fist(self, make_hand):
        """Strictly decreasing tip y is a closed fist."""
        hand = make_hand(tip_ys=(0.5, 0.4, 0.3, 0.2, 0.1))
        assert classify(hand) is Gesture.CLOSED_FIST
    
    @pytest.mark.parametrize("tip_ys", [
        (0.1, 0.3, 0.2, 0.4, 0.5),
        (0.5, 0.1, 0.4, 0.2, 0.3),
        (0.3, 0.3, 0.3, 0.3, 0.3),
    ])
    def test_unordered_is_unrecognized(self, make_hand, tip_ys):
        """Anything that is not monotonic is unrecognized."""
        assert classify(make_hand(tip_ys=tip_ys)) is Gesture.UNRECOGNIZED
    
    def test_ties_are_not_tolerated(self, make_hand):
        """A single equal pair breaks the strict ordering."""
        assert classify(make_hand(tip_ys=(0.1, 0.2, 0.2, 0.4, 0.5))) is Gesture.UNRECOGNIZED
        assert classify(make_hand(tip_ys=(0.5, 0.4, 0.4, 0.2, 0.1))) is Gesture.UNRECOGNIZED
    
    def test_near_tie_still_counts(self, make_hand):
        """No epsilon: a tiny difference is still strictly increasing."""
        hand = make_hand(tip_ys=(0.1, 0.2, 0.3, 0.4, 0.4 + 1e-9))
        assert classify(hand) is Gesture.OPEN_HAND
    
    def test_ignores_non_fingertip_landmarks(self, make_hand):
        """Only landmarks 4, 8, 12, 16, 20 matter."""
        a = make_hand(tip_ys=(0.1, 0.2, 0.3, 0.4, 0.5), base=(0.5, 0.9))
        b = make_hand(tip_ys=(0.1, 0.2, 0.3, 0.4, 0.5), base=(0.1, 0.0))
        assert classify(a) is classify(b) is Gesture.OPEN_HAND
    
    def test_idempotent(self, make_hand):
        hand = make_hand(tip_ys=(0.5, 0.4, 0.3, 0.2, 0.1))
        assert classify(hand) is classify(hand)
    
    def test_short_landmark_set_rejected(self):
        hand = HandLandmarks(
            landmarks=[Landmark(0.5, 0.5)] * 10,
            handedness="Left",
            confidence=0.9,
        )
        with pytest.raises(ValueError):
            classify(hand)


class TestStatus:
    """Status helpers and texts."""
    
    def test_no_hand_is_none_detected(self):
        assert status_for(None) is Gesture.NONE_DETECTED
    
    def test_status_for_hand(self, make_hand):
        assert status_for(make_hand()) is Gesture.OPEN_HAND
    
    def test_status_texts(self):
        assert Gesture.NONE_DETECTED.status_text == "No hand detected."
        assert Gesture.OPEN_HAND.status_text == "Hand Open Detected!"
        assert Gesture.CLOSED_FIST.status_text == "Closed Fist Detected!"
        assert Gesture.UNRECOGNIZED.status_text == "No specific gesture detected."
    
    def test_classifier_wrapper(self, make_hand):
        classifier = GestureClassifier()
        assert classifier.classify(None) is Gesture.NONE_DETECTED
        assert classifier.classify(make_hand(tip_ys=(0.5, 0.4, 0.3, 0.2, 0.1))) is Gesture.CLOSED_FIST


class TestLandmark:
    """Test suite for Landmark and HandLandmarks helpers."""
    
    def test_to_pixel(self):
        lm = Landmark(x=0.5, y=0.5, z=0.0)
        assert lm.to_pixel(1280, 720) == (640, 360)
    
    def test_to_pixel_edges(self):
        assert Landmark(x=0.0, y=0.0).to_pixel(100, 100) == (0, 0)
        assert Landmark(x=1.0, y=1.0).to_pixel(100, 100) == (100, 100)
    
    def test_scaled_keeps_fraction(self):
        assert Landmark(x=0.25, y=0.5).scaled(3, 3) == (0.75, 1.5)
    
    def test_get_pixel(self, make_hand):
        hand = make_hand(index_tip=(0.5, 0.25))
        assert hand.get_pixel(LandmarkIndex.INDEX_TIP) == (320, 120)
        assert len(hand.pixels()) == 21


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
