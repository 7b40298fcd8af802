"""Exceptions для Copying bounded context."""

from copytrade.domain.shared import BusinessRuleViolation, DomainException


class CredentialsNotConfiguredError(DomainException):
    """Raised коли у trader'а немає brokerage credentials або їх не можна розшифрувати.

    Configuration failure: юніт падає одразу, без retry в межах invocation.
    """


class RelationshipAlreadyStoppedError(BusinessRuleViolation):
    """Raised при спробі зупинити вже зупинений relationship."""


class PositionAlreadyClosedError(BusinessRuleViolation):
    """Raised при спробі змінити закриту позицію."""


class DuplicateRelationshipError(BusinessRuleViolation):
    """Raised коли follower вже копіює цього leader'а."""
