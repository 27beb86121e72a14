"""
ProctorWatch Exceptions

Configuration errors are raised synchronously while building a monitor and
are fatal to construction. Runtime errors from cameras and models are not
retried.
"""


class ProctorWatchError(Exception):
    """Base class for all proctorwatch errors."""


class ConfigurationError(ProctorWatchError):
    """Invalid monitor options. The monitor must be rebuilt with valid options."""


class FpsRangeError(ConfigurationError):
    """Sampling rate outside the supported range."""

    def __init__(self, fps, minimum: int, maximum: int):
        self.fps = fps
        super().__init__(f"fps must be between {minimum} and {maximum}, got {fps}")


class GazeSensitivityRangeError(ConfigurationError):
    """Gaze sensitivity percent outside the supported range."""

    def __init__(self, percent, minimum: int, maximum: int):
        self.percent = percent
        super().__init__(
            f"gaze_sensitivity_percent must be between {minimum} and {maximum}, got {percent}"
        )


class ImageFormatError(ConfigurationError):
    """Unknown snapshot encoding."""

    def __init__(self, image_type, accepted):
        self.image_type = image_type
        super().__init__(
            f"image_type must be one of {', '.join(accepted)}, got {image_type!r}"
        )


class MissingParameterError(ConfigurationError):
    """A required option was not supplied."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"{name} is required {reason}")


class StrokeColorError(ConfigurationError):
    """Annotation colour could not be parsed."""

    def __init__(self, color):
        self.color = color
        super().__init__(f"stroke_color is not a recognised colour: {color!r}")


class CameraUnavailableError(ProctorWatchError):
    """No usable video input device."""


class ModelLoadError(ProctorWatchError):
    """Pretrained weights could not be loaded."""
