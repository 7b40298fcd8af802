"""Detection commands."""

from .poll_leaders import PollLeadersCommand

__all__ = ["PollLeadersCommand"]
