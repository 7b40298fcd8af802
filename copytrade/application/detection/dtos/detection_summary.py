"""Detection DTOs."""

from dataclasses import asdict, dataclass, field

from copytrade.domain.copying.entities import LeaderTrade


@dataclass
class AccountDetection:
    """Outcome of polling one brokerage account.

    ``error`` заповнений, якщо рахунок пропущено (credentials, brokerage,
    timeout); тоді ``trades`` порожній і snapshot не записаний.
    """

    account_id: str
    trades: list[LeaderTrade] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class DetectionSummary:
    leaders_polled: int = 0
    accounts_polled: int = 0
    trades_detected: int = 0
    failed_accounts: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
