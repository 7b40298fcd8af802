"""Domain Layer - pure business logic of the copy-trading pipeline.

Bounded contexts:
- copying: leader trades, snapshots, relationships, executions, positions
- brokerage: brokerage aggregation port and its normalized responses
- shared: common base classes

Domain code has zero dependencies on infrastructure.
"""

from .shared import AggregateRoot, BusinessRuleViolation, DomainEvent

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "BusinessRuleViolation",
]
