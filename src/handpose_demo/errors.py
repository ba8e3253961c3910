"""
Error Types
============

Setup failures that stop the render loop before it starts ticking.
A missing hand is not an error; it is reported as ``Gesture.NONE_DETECTED``.
"""


class HandPoseDemoError(Exception):
    """Base class for all demo errors."""


class SetupError(HandPoseDemoError):
    """A setup step (camera or model) failed. Terminal for the render loop."""

    #: Text shown to the user in the blocking notification.
    user_message = "Setup failed."


class PermissionDeniedError(SetupError):
    """Camera exists but access was refused."""

    user_message = ("Unable to access the webcam. Please ensure it is "
                    "connected and permissions are granted.")


class DeviceUnavailableError(SetupError):
    """Camera could not be opened or cannot satisfy the requested constraints."""

    user_message = ("Unable to open the webcam. Please check that it is "
                    "connected and supports the requested resolution.")


class ModelLoadError(SetupError):
    """Hand landmark model could not be downloaded or created."""

    user_message = ("Failed to load the hand landmark model. "
                    "Please check your internet connection.")
