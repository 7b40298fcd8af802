"""Enums для Copying bounded context."""

from enum import Enum


class TradeSide(str, Enum):
    """Trade direction."""

    BUY = "buy"
    SELL = "sell"

    @property
    def brokerage_action(self) -> str:
        """Action string expected by the brokerage API ("BUY"/"SELL")."""
        return self.value.upper()

    @property
    def opposite(self) -> "TradeSide":
        return TradeSide.SELL if self is TradeSide.BUY else TradeSide.BUY


class TradeSource(str, Enum):
    """Звідки прийшов LeaderTrade."""

    POLL = "poll"
    """Synthesized by diffing position snapshots."""

    WEBHOOK = "webhook"
    """Pushed by the brokerage aggregator."""


class AssetClass(str, Enum):
    STOCK = "stock"
    ETF = "etf"
    OPTION = "option"
    CRYPTO = "crypto"
    MUTUAL_FUND = "mutual_fund"


class TraderRole(str, Enum):
    LEADER = "leader"
    FOLLOWER = "follower"
    BOTH = "both"

    @property
    def can_lead(self) -> bool:
        return self in (TraderRole.LEADER, TraderRole.BOTH)


class ConnectionStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class RelationshipStatus(str, Enum):
    """CopyRelationship lifecycle.

    ACTIVE → STOPPED (soft delete, history preserved).
    """

    ACTIVE = "active"
    STOPPED = "stopped"


class AllocationMethod(str, Enum):
    """How a follower's order size is derived from a leader trade."""

    FIXED_PERCENT = "fixed_percent"
    """allocation_value % of follower portfolio per trade."""

    FIXED_DOLLAR = "fixed_dollar"
    """allocation_value dollars per trade."""

    PROPORTIONAL = "proportional"
    """Leader quantity scaled by follower/leader portfolio ratio."""

    FIXED_SHARES = "fixed_shares"
    """allocation_value shares per trade."""

    MULTIPLIER = "multiplier"
    """Leader quantity times allocation_value."""


class ExecutionStatus(str, Enum):
    """CopyExecution state machine.

    State machine:
        PENDING → SKIPPED
        PENDING → EXECUTING → SUCCESS
        PENDING → EXECUTING → FAILED
        PENDING → FAILED  (credential failure before submission)
    """

    PENDING = "pending"
    EXECUTING = "executing"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ExecutionStatus.SUCCESS,
            ExecutionStatus.FAILED,
            ExecutionStatus.SKIPPED,
        )


class PositionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ExitReason(str, Enum):
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    LEADER_EXIT = "leader_exit"


class SkipReason(str, Enum):
    """Reason codes stored on skipped CopyExecution rows."""

    RELATIONSHIP_INACTIVE = "relationship_inactive"
    ASSET_CLASS_FILTERED = "asset_class_filtered"
    LOSS_THRESHOLD_BREACHED = "loss_threshold_breached"
    NO_BROKERAGE_CONNECTION = "no_brokerage_connection"
    MAX_POSITIONS_REACHED = "max_positions_reached"
    DAILY_TRADE_LIMIT_REACHED = "daily_trade_limit_reached"
    DAILY_VOLUME_LIMIT_REACHED = "daily_volume_limit_reached"
    POSITION_CONCENTRATION_EXCEEDED = "position_concentration_exceeded"
    PENNY_STOCK_FILTERED = "penny_stock_filtered"
    PRICE_OUT_OF_RANGE = "price_out_of_range"
    PRICE_UNAVAILABLE = "price_unavailable"
    NO_POSITION_TO_SELL = "no_position_to_sell"
    SIZE_TOO_SMALL = "size_too_small"


class NotificationKind(str, Enum):
    TRADE_EXECUTED = "trade_executed"
    TRADE_FAILED = "trade_failed"
    POSITION_CLOSED = "position_closed"
