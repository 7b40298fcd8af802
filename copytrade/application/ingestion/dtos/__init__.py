"""Ingestion DTOs."""

from dataclasses import asdict, dataclass


@dataclass
class IngestionSummary:
    processed: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


__all__ = ["IngestionSummary"]
