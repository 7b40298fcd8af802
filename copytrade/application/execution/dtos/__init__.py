"""Execution DTOs."""

from .processing_summary import ExecutionOutcome, ProcessingSummary

__all__ = ["ExecutionOutcome", "ProcessingSummary"]
