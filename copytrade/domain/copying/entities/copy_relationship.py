"""CopyRelationship Aggregate Root - підписка follower → leader.

Relationship ніколи не видаляється фізично: ``stop()`` переводить її в
STOPPED, щоб історія CopyExecution лишалась цілісною.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from copytrade.domain.shared import AggregateRoot, BusinessRuleViolation

from ..exceptions import RelationshipAlreadyStoppedError
from ..value_objects import AllocationMethod, AssetClass, RelationshipStatus


class CopyRelationship(AggregateRoot):
    """Follower's copy configuration for one leader.

    Правила:
    - Один relationship на пару (follower, leader) - enforced unique constraint
    - allocation_value > 0; для FIXED_PERCENT не більше 100
    - Порожній allowed_asset_classes означає "всі класи активів"

    Example:
        >>> rel = CopyRelationship.create(
        ...     follower_id=2,
        ...     leader_id=1,
        ...     allocation_method=AllocationMethod.FIXED_PERCENT,
        ...     allocation_value=Decimal("10"),
        ... )
        >>> rel.is_active
        True
        >>> rel.stop()
    """

    def __init__(
        self,
        follower_id: int,
        leader_id: int,
        allocation_method: AllocationMethod,
        allocation_value: Decimal,
        status: RelationshipStatus = RelationshipStatus.ACTIVE,
        max_position_size: Optional[Decimal] = None,
        max_risk_per_trade: Optional[Decimal] = None,
        allowed_asset_classes: Optional[Iterable[AssetClass]] = None,
        stop_copying_threshold: Optional[Decimal] = None,
        copy_stop_loss: bool = False,
        copy_take_profit: bool = False,
        custom_stop_loss_percent: Optional[Decimal] = None,
        custom_take_profit_percent: Optional[Decimal] = None,
        trailing_stop: bool = False,
        max_open_positions: Optional[int] = None,
        max_daily_trades: Optional[int] = None,
        max_daily_volume: Optional[Decimal] = None,
        max_position_concentration: Optional[Decimal] = None,
        skip_penny_stocks: bool = False,
        min_stock_price: Optional[Decimal] = None,
        max_stock_price: Optional[Decimal] = None,
        total_trades_copied: int = 0,
        created_at: Optional[datetime] = None,
        stopped_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        """Initialize relationship.

        Args:
            follower_id: Trader ID follower'а.
            leader_id: Trader ID leader'а.
            allocation_method: Метод розрахунку розміру.
            allocation_value: Відсоток, сума в доларах, кількість акцій або
                множник - залежно від allocation_method.
            status: ACTIVE або STOPPED.
            max_position_size: Ліміт на одну угоду в доларах.
            max_risk_per_trade: Макс. ризик на угоду, % портфеля.
            allowed_asset_classes: Дозволені класи активів.
            stop_copying_threshold: Від'ємний %, при якому копіювання зупиняється.
            copy_stop_loss: Переносити stop-loss на позицію follower'а.
            copy_take_profit: Переносити take-profit.
            custom_stop_loss_percent: Власний SL у % від входу.
            custom_take_profit_percent: Власний TP у % від входу.
            trailing_stop: Trailing stop flag.
            max_open_positions: Ліміт відкритих позицій follower'а.
            max_daily_trades: Ліміт скопійованих угод за день.
            max_daily_volume: Ліміт скопійованого обсягу за день, $.
            max_position_concentration: Макс. частка одного символу, % портфеля.
            skip_penny_stocks: Не копіювати угоди з ціною нижче $5.
            min_stock_price: Мінімальна ціна акції для копіювання.
            max_stock_price: Максимальна ціна акції для копіювання.
            total_trades_copied: Лічильник успішних копій.
            created_at: Час створення.
            stopped_at: Час зупинки.
            id: Relationship ID.
        """
        super().__init__(id)

        self._validate_allocation(allocation_method, allocation_value)
        self._validate_price_band(min_stock_price, max_stock_price)

        self.follower_id = follower_id
        self.leader_id = leader_id
        self.allocation_method = allocation_method
        self.allocation_value = allocation_value
        self.status = status
        self.max_position_size = max_position_size
        self.max_risk_per_trade = max_risk_per_trade
        self.allowed_asset_classes: frozenset[AssetClass] = frozenset(
            allowed_asset_classes or ()
        )
        self.stop_copying_threshold = stop_copying_threshold
        self.copy_stop_loss = copy_stop_loss
        self.copy_take_profit = copy_take_profit
        self.custom_stop_loss_percent = custom_stop_loss_percent
        self.custom_take_profit_percent = custom_take_profit_percent
        self.trailing_stop = trailing_stop
        self.max_open_positions = max_open_positions
        self.max_daily_trades = max_daily_trades
        self.max_daily_volume = max_daily_volume
        self.max_position_concentration = max_position_concentration
        self.skip_penny_stocks = skip_penny_stocks
        self.min_stock_price = min_stock_price
        self.max_stock_price = max_stock_price
        self.total_trades_copied = total_trades_copied
        self.created_at = created_at or datetime.now(timezone.utc)
        self.stopped_at = stopped_at

    @classmethod
    def create(
        cls,
        follower_id: int,
        leader_id: int,
        allocation_method: AllocationMethod,
        allocation_value: Decimal,
        **options,
    ) -> "CopyRelationship":
        """Factory для нового ACTIVE relationship.

        Raises:
            BusinessRuleViolation: Follower намагається копіювати сам себе.
        """
        if follower_id == leader_id:
            raise BusinessRuleViolation(
                "Trader cannot copy themselves", trader_id=follower_id
            )
        return cls(
            follower_id=follower_id,
            leader_id=leader_id,
            allocation_method=allocation_method,
            allocation_value=allocation_value,
            **options,
        )

    def stop(self) -> None:
        """Soft-delete: ACTIVE → STOPPED.

        Raises:
            RelationshipAlreadyStoppedError: Якщо вже STOPPED.
        """
        if self.status is RelationshipStatus.STOPPED:
            raise RelationshipAlreadyStoppedError(
                "Copy relationship already stopped", relationship_id=self.id
            )
        self.status = RelationshipStatus.STOPPED
        self.stopped_at = datetime.now(timezone.utc)

    def allows_asset_class(self, asset_class: AssetClass) -> bool:
        if not self.allowed_asset_classes:
            return True
        return asset_class in self.allowed_asset_classes

    def record_copy(self) -> None:
        self.total_trades_copied += 1

    @property
    def is_active(self) -> bool:
        return self.status is RelationshipStatus.ACTIVE

    @staticmethod
    def _validate_allocation(method: AllocationMethod, value: Decimal) -> None:
        if value <= Decimal("0"):
            raise BusinessRuleViolation(
                "Allocation value must be positive", allocation_value=str(value)
            )
        if method is AllocationMethod.FIXED_PERCENT and value > Decimal("100"):
            raise BusinessRuleViolation(
                "Allocation percent cannot exceed 100", allocation_value=str(value)
            )

    @staticmethod
    def _validate_price_band(
        min_price: Optional[Decimal], max_price: Optional[Decimal]
    ) -> None:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BusinessRuleViolation(
                "min_stock_price cannot exceed max_stock_price",
                min_stock_price=str(min_price),
                max_stock_price=str(max_price),
            )

    def __repr__(self) -> str:
        return (
            f"CopyRelationship(id={self.id}, follower={self.follower_id}, "
            f"leader={self.leader_id}, status={self.status.value})"
        )
