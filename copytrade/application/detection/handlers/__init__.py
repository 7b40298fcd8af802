"""Detection handlers."""

from .poll_leaders_handler import PollLeadersHandler

__all__ = ["PollLeadersHandler"]
