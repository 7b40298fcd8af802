"""Shared Application Layer components."""

from .command import Command
from .handler import CommandHandler
from .order_submission import FilledOrder, OrderSubmitter
from .timeouts import with_timeout
from .unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "Command",
    "CommandHandler",
    "FilledOrder",
    "OrderSubmitter",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "with_timeout",
]
