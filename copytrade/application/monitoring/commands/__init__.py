"""Monitoring commands."""

from dataclasses import dataclass

from copytrade.application.shared import Command


@dataclass(frozen=True)
class MonitorPositionsCommand(Command):
    """Check every open position with a stop-loss or take-profit once."""


__all__ = ["MonitorPositionsCommand"]
