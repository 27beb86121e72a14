"""
ProctorWatch Configuration Classes

Pydantic-based configuration with validation and defaults.
Single source of truth for all configuration values.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Optional

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from proctorwatch.utils.errors import (
    FpsRangeError,
    GazeSensitivityRangeError,
    ImageFormatError,
    MissingParameterError,
    StrokeColorError,
)


# ============================================================================
# Constants - Single source of truth for default values
# ============================================================================

# Sampling
MIN_FPS = 1
MAX_FPS = 5
DEFAULT_FPS = 3
DEFAULT_REFRESH_HZ = 60.0

# Snapshots
IMAGE_TYPES = {
    "jpeg": "image/jpeg",
    "png": "image/png",
}
DEFAULT_IMAGE_TYPE = "jpeg"
DEFAULT_STROKE_COLOR = "#2bedff"

# Gaze
MIN_GAZE_SENSITIVITY = 5
MAX_GAZE_SENSITIVITY = 60
DEFAULT_GAZE_SENSITIVITY = 25
NO_PERSON_CONFIDENCE = 0.3

# Model paths
DEFAULT_DETECTOR_MODEL = "yolo11n.pt"
DEFAULT_POSE_MODEL = "yolo11n-pose.pt"
POSE_BACKENDS = ("yolo", "mediapipe")

# Detection thresholds
DEFAULT_DETECTOR_CONFIDENCE = 0.5
DEFAULT_POSE_CONFIDENCE = 0.5

# Capture defaults
DEFAULT_CAMERA_INDEX = 0
DEFAULT_FRAME_WIDTH = 640
DEFAULT_FRAME_HEIGHT = 480


# ============================================================================
# Base Configuration
# ============================================================================

class BaseConfig(BaseModel):
    """Base configuration class for model configs."""

    model_config = ConfigDict(extra="allow")

    verbose: bool = Field(default=True, description="Enable verbose output")
    device: str = Field(default="auto", description="Device to use (auto, cpu, cuda, mps)")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.model_dump()})"


# ============================================================================
# Monitor Options
# ============================================================================

class MonitorConfig(BaseModel):
    """
    Options for a single proctoring monitor.

    Immutable once built. Range checks raise the matching
    ``ConfigurationError`` subclass instead of a pydantic ``ValidationError``
    so callers can tell the failures apart. Both snake_case names and the
    camelCase names (``gazeSensitivityPercent``, ``queueCoolDownPeriod``...)
    are accepted.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    fps: float = Field(default=DEFAULT_FPS, description="Frames sampled per second")
    image_type: str = Field(default=DEFAULT_IMAGE_TYPE, description="Snapshot encoding (jpeg, png)")
    stroke_color: str = Field(default=DEFAULT_STROKE_COLOR, description="Annotation colour")
    gaze_sensitivity_percent: float = Field(
        default=DEFAULT_GAZE_SENSITIVITY,
        description="Ear confidence percent below which the candidate is looking away",
    )
    queue_events: bool = Field(default=False, description="Batch events and flush periodically")
    queue_cool_down_period: Optional[float] = Field(
        default=None,
        description="Seconds between queue flushes",
    )

    @field_validator("fps")
    @classmethod
    def _check_fps(cls, value: float) -> float:
        if not MIN_FPS <= value <= MAX_FPS:
            raise FpsRangeError(value, MIN_FPS, MAX_FPS)
        return value

    @field_validator("image_type")
    @classmethod
    def _check_image_type(cls, value: str) -> str:
        if value not in IMAGE_TYPES:
            raise ImageFormatError(value, list(IMAGE_TYPES))
        return value

    @field_validator("stroke_color")
    @classmethod
    def _check_stroke_color(cls, value: str) -> str:
        try:
            ImageColor.getrgb(value)
        except ValueError:
            raise StrokeColorError(value) from None
        return value

    @field_validator("gaze_sensitivity_percent")
    @classmethod
    def _check_gaze_sensitivity(cls, value: float) -> float:
        if not MIN_GAZE_SENSITIVITY <= value <= MAX_GAZE_SENSITIVITY:
            raise GazeSensitivityRangeError(value, MIN_GAZE_SENSITIVITY, MAX_GAZE_SENSITIVITY)
        return value

    @model_validator(mode="after")
    def _check_queue(self) -> "MonitorConfig":
        period = self.queue_cool_down_period
        if self.queue_events and (
            period is None or not math.isfinite(period) or period <= 0
        ):
            raise MissingParameterError(
                "queue_cool_down_period",
                "and must be a positive finite number when queue_events is enabled",
            )
        return self

    @property
    def interval_ms(self) -> float:
        """Minimum milliseconds between sampled frames."""
        return 1000 / self.fps

    @property
    def min_gaze_confidence(self) -> float:
        return self.gaze_sensitivity_percent / 100

    @property
    def mime_type(self) -> str:
        return IMAGE_TYPES[self.image_type]

    @property
    def stroke_bgr(self) -> tuple[int, int, int]:
        """Annotation colour in OpenCV channel order."""
        r, g, b = ImageColor.getrgb(self.stroke_color)[:3]
        return (b, g, r)


# ============================================================================
# Detection Service Configurations
# ============================================================================

class DetectorConfig(BaseConfig):
    """Configuration for the object detector."""

    model_path: str = Field(default=DEFAULT_DETECTOR_MODEL, description="Path to YOLO weights")
    confidence: float = Field(default=DEFAULT_DETECTOR_CONFIDENCE, description="Minimum box confidence")


class PoseConfig(BaseConfig):
    """Configuration for the pose estimator."""

    backend: str = Field(default="yolo", description="Pose backend: yolo, mediapipe")
    model_path: str = Field(default=DEFAULT_POSE_MODEL, description="Path to YOLO pose weights")
    confidence: float = Field(default=DEFAULT_POSE_CONFIDENCE, description="Minimum person confidence")
    model_complexity: int = Field(default=1, description="MediaPipe pose model complexity (0-2)")

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        if value not in POSE_BACKENDS:
            raise ValueError(f"backend must be one of {POSE_BACKENDS}")
        return value


# ============================================================================
# Main Settings (Environment Variable Support)
# ============================================================================

class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Every field can be overridden with a ``PROCTORWATCH_`` prefixed
    environment variable or a ``.env`` file. Monitor options read here are
    only validated when ``to_monitor_config`` is called.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROCTORWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Monitor defaults
    fps: float = DEFAULT_FPS
    image_type: str = DEFAULT_IMAGE_TYPE
    stroke_color: str = DEFAULT_STROKE_COLOR
    gaze_sensitivity_percent: float = DEFAULT_GAZE_SENSITIVITY
    queue_events: bool = False
    queue_cool_down_period: Optional[float] = None
    refresh_hz: float = DEFAULT_REFRESH_HZ

    # Models
    detector_model_path: str = DEFAULT_DETECTOR_MODEL
    detector_confidence: float = DEFAULT_DETECTOR_CONFIDENCE
    pose_backend: str = "yolo"
    pose_model_path: str = DEFAULT_POSE_MODEL
    pose_confidence: float = DEFAULT_POSE_CONFIDENCE
    device: str = "auto"

    # Capture
    camera_index: int = DEFAULT_CAMERA_INDEX
    frame_width: int = DEFAULT_FRAME_WIDTH
    frame_height: int = DEFAULT_FRAME_HEIGHT

    # Logging
    log_level: str = "INFO"

    def to_monitor_config(self, **overrides) -> MonitorConfig:
        """Build validated monitor options, applying any overrides."""
        options = {
            "fps": self.fps,
            "image_type": self.image_type,
            "stroke_color": self.stroke_color,
            "gaze_sensitivity_percent": self.gaze_sensitivity_percent,
            "queue_events": self.queue_events,
            "queue_cool_down_period": self.queue_cool_down_period,
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return MonitorConfig(**options)

    def to_detector_config(self) -> DetectorConfig:
        """Convert settings to DetectorConfig."""
        return DetectorConfig(
            model_path=self.detector_model_path,
            confidence=self.detector_confidence,
            device=self.device,
        )

    def to_pose_config(self) -> PoseConfig:
        """Convert settings to PoseConfig."""
        return PoseConfig(
            backend=self.pose_backend,
            model_path=self.pose_model_path,
            confidence=self.pose_confidence,
            device=self.device,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
