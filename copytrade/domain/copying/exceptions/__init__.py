"""Exceptions для Copying bounded context."""

from .copying_exceptions import (
    CredentialsNotConfiguredError,
    DuplicateRelationshipError,
    PositionAlreadyClosedError,
    RelationshipAlreadyStoppedError,
)

__all__ = [
    "CredentialsNotConfiguredError",
    "DuplicateRelationshipError",
    "PositionAlreadyClosedError",
    "RelationshipAlreadyStoppedError",
]
