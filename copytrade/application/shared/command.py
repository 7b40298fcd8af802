"""Base Command class.

Command - запит на виконання use case (detect, process, monitor, ingest).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Command(ABC):
    """Base class для всіх commands.

    Commands immutable і не містять логіки: тільки параметри invocation.

    Example:
        >>> @dataclass(frozen=True)
        ... class ProcessPendingTradesCommand(Command):
        ...     max_trades: int | None = None

        >>> summary = await handler.handle(ProcessPendingTradesCommand())
    """

    pass
