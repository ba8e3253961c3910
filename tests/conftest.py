"""Shared fixtures for the test suite."""

import pytest

from handpose_demo.detection.hand_detector import FINGERTIPS, HandLandmarks, Landmark


def create_mock_hand(
    tip_ys=(0.2, 0.3, 0.4, 0.5, 0.6),
    index_tip=None,
    image_width: int = 640,
    image_height: int = 480,
    base=(0.5, 0.7),
) -> HandLandmarks:
    """
    Build a 21-landmark hand.
    
    Args:
        tip_ys: Normalized y of thumb, index, middle, ring and pinky tips
        index_tip: Optional (x, y) overriding the index fingertip
        base: (x, y) used for every non-fingertip landmark
    """
    landmarks = [Landmark(x=base[0], y=base[1], z=0.0) for _ in range(21)]
    for offset, (index, y) in enumerate(zip(FINGERTIPS, tip_ys)):
        landmarks[index] = Landmark(x=0.3 + 0.1 * offset, y=y, z=0.0)
    if index_tip is not None:
        landmarks[8] = Landmark(x=index_tip[0], y=index_tip[1], z=0.0)
    return HandLandmarks(
        landmarks=landmarks,
        handedness="Right",
        confidence=0.95,
        image_width=image_width,
        image_height=image_height,
    )


@pytest.fixture
def make_hand():
    """Factory for mock hands."""
    return create_mock_hand
