"""
Gesture Classifier
===================

Coarse open-hand / closed-fist recognition from the vertical order of the
five fingertips. Image y grows downwards, so "increasing" means each finger
from thumb to pinky sits lower on screen than the one before it.

The comparison is exact (no tolerance), so near-ties and any hand
orientation other than the one the ordering assumes come out as
``UNRECOGNIZED``.
"""

import logging
from enum import Enum
from typing import Optional

from ..detection.hand_detector import FINGERTIPS, HandLandmarks

logger = logging.getLogger(__name__)


class Gesture(Enum):
    """Gesture labels with the status text shown to the user."""
    OPEN_HAND = "Hand Open Detected!"
    CLOSED_FIST = "Closed Fist Detected!"
    NONE_DETECTED = "No hand detected."
    UNRECOGNIZED = "No specific gesture detected."
    
    @property
    def status_text(self) -> str:
        return self.value


def _strictly_increasing(values) -> bool:
    return all(a < b for a, b in zip(values, values[1:]))


def _strictly_decreasing(values) -> bool:
    return all(a > b for a, b in zip(values, values[1:]))


def classify(hand: HandLandmarks) -> Gesture:
    """
    Classify a hand from its fingertip y-coordinates.
    
    Only landmarks 4, 8, 12, 16 and 20 are read.
    
    Args:
        hand: Detected hand; must contain at least 21 landmarks
        
    Returns:
        OPEN_HAND, CLOSED_FIST or UNRECOGNIZED
        
    Raises:
        ValueError: the landmark set is too short to contain all fingertips
    """
    if len(hand.landmarks) <= max(FINGERTIPS):
        raise ValueError(
            f"Expected at least {max(FINGERTIPS) + 1} landmarks, got {len(hand.landmarks)}")
    
    tips_y = [hand.get(index).y for index in FINGERTIPS]
    
    if _strictly_increasing(tips_y):
        return Gesture.OPEN_HAND
    if _strictly_decreasing(tips_y):
        return Gesture.CLOSED_FIST
    return Gesture.UNRECOGNIZED


def status_for(hand: Optional[HandLandmarks]) -> Gesture:
    """Gesture for an optional hand: ``NONE_DETECTED`` when there is none."""
    if hand is None:
        return Gesture.NONE_DETECTED
    return classify(hand)


class GestureClassifier:
    """
    Stateless wrapper around ``classify`` for the render loop.
    
    Example:
        >>> classifier = GestureClassifier()
        >>> gesture = classifier.classify(hand)
        >>> print(gesture.status_text)
    """
    
    def classify(self, hand: Optional[HandLandmarks]) -> Gesture:
        gesture = status_for(hand)
        logger.debug(f"Classified: {gesture.name}")
        return gesture
