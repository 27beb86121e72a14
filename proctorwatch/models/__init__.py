"""
ProctorWatch Models Module

Detection services: YOLO object detector and pose estimators.
"""

from proctorwatch.models.detector import ObjectDetector
from proctorwatch.models.pose import PoseEstimator, MediaPipePoseEstimator, build_pose_estimator

__all__ = [
    "ObjectDetector",
    "PoseEstimator",
    "MediaPipePoseEstimator",
    "build_pose_estimator",
]
