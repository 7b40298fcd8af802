"""Monitoring DTOs."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class MonitoringSummary:
    checked: int = 0
    triggered: int = 0
    closed: int = 0
    failed: int = 0
    skipped: int = 0
    details: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


__all__ = ["MonitoringSummary"]
