"""
ProctorWatch Service

The monitor that ties sampling, detection, classification and dispatch together.
"""

from proctorwatch.service.monitor import ProctorMonitor

__all__ = [
    "ProctorMonitor",
]
