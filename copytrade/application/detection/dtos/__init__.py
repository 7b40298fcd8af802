"""Detection DTOs."""

from .detection_summary import AccountDetection, DetectionSummary

__all__ = ["AccountDetection", "DetectionSummary"]
