"""Gesture recognition module."""
from .gesture_classifier import Gesture, GestureClassifier, classify, status_for

__all__ = ["Gesture", "GestureClassifier", "classify", "status_for"]
