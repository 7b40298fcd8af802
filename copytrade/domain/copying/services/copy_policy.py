"""CopyPolicyEvaluator - Domain Service для eligibility та sizing копії.

Pure: жодного I/O, всі зовнішні дані приходять у PolicyContext. Завдяки
цьому правила sizing'у тестуються без брокера і без БД.
"""

import logging
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Optional

from ..entities import CopyRelationship, LeaderTrade
from ..value_objects import (
    AllocationMethod,
    CopyDecision,
    PolicyContext,
    ProtectiveLevels,
    SkipReason,
    TradeSide,
)

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")
_CENT = Decimal("0.01")
PENNY_STOCK_PRICE = Decimal("5")


class CopyPolicyEvaluator:
    """Decide whether a follower copies a leader trade, and how much.

    Eligibility checks (перший провал → skip з reason code):
    1. relationship не ACTIVE → relationship_inactive
    2. asset class не дозволений → asset_class_filtered
    3. return follower'а ≤ stop_copying_threshold → loss_threshold_breached
    4. немає активного brokerage connection → no_brokerage_connection
    5. ліміти експозиції → max_positions_reached / daily_trade_limit_reached
    6. невідома ціна → price_unavailable
    7. BUY: ціна < $5 при skip_penny_stocks → penny_stock_filtered;
       поза [min_stock_price, max_stock_price] → price_out_of_range
    8. SELL без позиції → no_position_to_sell

    Checks 1-3 не потребують брокера (``screen``), тому engine виконує їх
    до того, як тягнути balances і quotes.

    Sizing:
    - FIXED_PERCENT: (portfolio × value / 100) / price
    - FIXED_DOLLAR: value / price
    - PROPORTIONAL: leader_qty × follower_portfolio / leader_portfolio
    - FIXED_SHARES: value
    - MULTIPLIER: leader_qty × value, щонайменше один quantity_step

    Результат округлюється вниз до ``quantity_step``. Для BUY діють caps
    max_position_size та max_risk_per_trade; SELL обмежується тим, що
    follower реально тримає. Нуль після округлення → size_too_small.

    Після sizing'у BUY перевіряється на денний обсяг (max_daily_volume →
    daily_volume_limit_reached) та концентрацію символу в портфелі
    (max_position_concentration → position_concentration_exceeded).

    Example:
        >>> evaluator = CopyPolicyEvaluator()
        >>> decision = evaluator.evaluate(trade, relationship, PolicyContext(
        ...     follower_portfolio_value=Decimal("20000"),
        ...     trade_price=Decimal("50"),
        ... ))
        >>> decision.quantity      # 10% of $20k at $50
        Decimal('40')
    """

    def __init__(
        self,
        quantity_step: Decimal = Decimal("1"),
        default_stop_distance_percent: Decimal = Decimal("5"),
    ) -> None:
        """Initialize evaluator.

        Args:
            quantity_step: Мінімальний крок кількості, який приймає брокер.
            default_stop_distance_percent: Відстань до стопу для оцінки ризику,
                якщо relationship не задає власний stop-loss %.
        """
        if quantity_step <= _ZERO:
            raise ValueError("quantity_step must be positive")
        self._quantity_step = quantity_step
        self._default_stop_distance = default_stop_distance_percent

    def screen(
        self,
        trade: LeaderTrade,
        relationship: CopyRelationship,
        follower_return_percent: Optional[Decimal] = None,
    ) -> Optional[SkipReason]:
        """Run the checks that need no brokerage data.

        Returns:
            SkipReason першої check, що не пройшла, або None.
        """
        if not relationship.is_active:
            return SkipReason.RELATIONSHIP_INACTIVE

        if not relationship.allows_asset_class(trade.asset_class):
            return SkipReason.ASSET_CLASS_FILTERED

        threshold = relationship.stop_copying_threshold
        if (
            threshold is not None
            and follower_return_percent is not None
            and follower_return_percent <= threshold
        ):
            return SkipReason.LOSS_THRESHOLD_BREACHED

        return None

    def evaluate(
        self,
        trade: LeaderTrade,
        relationship: CopyRelationship,
        context: PolicyContext,
    ) -> CopyDecision:
        reason = self._check_eligibility(trade, relationship, context)
        if reason is not None:
            return CopyDecision.skip(reason)

        price = context.trade_price if context.trade_price is not None else trade.price
        if price is None or price <= _ZERO:
            return CopyDecision.skip(SkipReason.PRICE_UNAVAILABLE)

        if trade.side is TradeSide.BUY:
            reason = self._check_price_filters(relationship, price)
            if reason is not None:
                return CopyDecision.skip(reason)

        if trade.side is TradeSide.SELL and context.held_quantity <= _ZERO:
            return CopyDecision.skip(SkipReason.NO_POSITION_TO_SELL)

        quantity = self._floor(self._size(trade, relationship, context, price))

        if trade.side is TradeSide.BUY:
            quantity = self._apply_caps(quantity, relationship, context, price)
        elif trade.is_exit:
            quantity = context.held_quantity
        else:
            quantity = min(quantity, context.held_quantity)

        if quantity <= _ZERO:
            return CopyDecision.skip(SkipReason.SIZE_TOO_SMALL)

        if trade.side is TradeSide.BUY:
            reason = self._check_exposure(quantity, relationship, context, price)
            if reason is not None:
                return CopyDecision.skip(reason)

        return CopyDecision.copy(quantity=quantity, price=price)

    # ==================== Eligibility ====================

    def _check_eligibility(
        self,
        trade: LeaderTrade,
        relationship: CopyRelationship,
        context: PolicyContext,
    ) -> Optional[SkipReason]:
        reason = self.screen(trade, relationship, context.follower_return_percent)
        if reason is not None:
            return reason

        if not context.has_active_connection:
            return SkipReason.NO_BROKERAGE_CONNECTION

        # Новою позицією вважається тільки BUY символу, якого follower ще не має
        opens_new_position = trade.side is TradeSide.BUY and context.held_quantity <= _ZERO
        if (
            opens_new_position
            and relationship.max_open_positions is not None
            and context.open_positions_count >= relationship.max_open_positions
        ):
            return SkipReason.MAX_POSITIONS_REACHED

        if (
            relationship.max_daily_trades is not None
            and context.trades_copied_today >= relationship.max_daily_trades
        ):
            return SkipReason.DAILY_TRADE_LIMIT_REACHED

        return None

    @staticmethod
    def _check_price_filters(
        relationship: CopyRelationship, price: Decimal
    ) -> Optional[SkipReason]:
        if relationship.skip_penny_stocks and price < PENNY_STOCK_PRICE:
            return SkipReason.PENNY_STOCK_FILTERED

        if relationship.min_stock_price is not None and price < relationship.min_stock_price:
            return SkipReason.PRICE_OUT_OF_RANGE

        if relationship.max_stock_price is not None and price > relationship.max_stock_price:
            return SkipReason.PRICE_OUT_OF_RANGE

        return None

    @staticmethod
    def _check_exposure(
        quantity: Decimal,
        relationship: CopyRelationship,
        context: PolicyContext,
        price: Decimal,
    ) -> Optional[SkipReason]:
        order_value = quantity * price

        if (
            relationship.max_daily_volume is not None
            and context.volume_copied_today + order_value > relationship.max_daily_volume
        ):
            return SkipReason.DAILY_VOLUME_LIMIT_REACHED

        max_concentration = relationship.max_position_concentration
        if max_concentration is not None:
            portfolio = context.follower_portfolio_value
            if portfolio <= _ZERO:
                return SkipReason.POSITION_CONCENTRATION_EXCEEDED
            position_value = (context.held_quantity + quantity) * price
            if position_value / portfolio * _HUNDRED > max_concentration:
                return SkipReason.POSITION_CONCENTRATION_EXCEEDED

        return None

    # ==================== Sizing ====================

    def _size(
        self,
        trade: LeaderTrade,
        relationship: CopyRelationship,
        context: PolicyContext,
        price: Decimal,
    ) -> Decimal:
        method = relationship.allocation_method
        value = relationship.allocation_value

        if method is AllocationMethod.FIXED_PERCENT:
            return (context.follower_portfolio_value * value / _HUNDRED) / price

        if method is AllocationMethod.FIXED_DOLLAR:
            return value / price

        if method is AllocationMethod.FIXED_SHARES:
            return value

        if method is AllocationMethod.MULTIPLIER:
            return max(trade.quantity * value, self._quantity_step)

        if context.leader_portfolio_value <= _ZERO:
            logger.warning(
                "copy_policy.leader_portfolio_unknown",
                extra={"relationship_id": relationship.id, "trade_id": trade.id},
            )
            return _ZERO
        return trade.quantity * (context.follower_portfolio_value / context.leader_portfolio_value)

    def _apply_caps(
        self,
        quantity: Decimal,
        relationship: CopyRelationship,
        context: PolicyContext,
        price: Decimal,
    ) -> Decimal:
        if relationship.max_position_size is not None:
            quantity = min(quantity, self._floor(relationship.max_position_size / price))

        if relationship.max_risk_per_trade is not None:
            stop_distance = (
                relationship.custom_stop_loss_percent
                if relationship.custom_stop_loss_percent is not None
                else self._default_stop_distance
            )
            if stop_distance > _ZERO:
                allowed_risk = context.follower_portfolio_value * relationship.max_risk_per_trade / _HUNDRED
                max_quantity = allowed_risk / (price * stop_distance / _HUNDRED)
                quantity = min(quantity, self._floor(max_quantity))

        return quantity

    def _floor(self, quantity: Decimal) -> Decimal:
        if quantity <= _ZERO:
            return _ZERO
        steps = (quantity / self._quantity_step).to_integral_value(rounding=ROUND_FLOOR)
        return steps * self._quantity_step


def protective_levels(
    side: TradeSide,
    entry_price: Decimal,
    relationship: CopyRelationship,
    trade: Optional[LeaderTrade] = None,
) -> ProtectiveLevels:
    """Compute the follower's stop-loss / take-profit for a new fill.

    Власний % relationship'а має пріоритет; інакше рівень лідера
    переноситься пропорційно до ціни входу follower'а. Без ``copy_*``
    прапорця відповідний рівень не ставиться.

    Example:
        >>> protective_levels(TradeSide.BUY, Decimal("50"), relationship)
        ProtectiveLevels(stop_loss=Decimal('47.50'), take_profit=None)
    """
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    leader_price = trade.price if trade is not None else None

    if relationship.copy_stop_loss:
        if relationship.custom_stop_loss_percent is not None:
            stop_loss = _offset(side, entry_price, -relationship.custom_stop_loss_percent)
        elif trade is not None and trade.stop_loss_price is not None:
            stop_loss = _proportional(trade.stop_loss_price, leader_price, entry_price)

    if relationship.copy_take_profit:
        if relationship.custom_take_profit_percent is not None:
            take_profit = _offset(side, entry_price, relationship.custom_take_profit_percent)
        elif trade is not None and trade.take_profit_price is not None:
            take_profit = _proportional(trade.take_profit_price, leader_price, entry_price)

    return ProtectiveLevels(stop_loss=stop_loss, take_profit=take_profit)


def _offset(side: TradeSide, entry_price: Decimal, percent: Decimal) -> Decimal:
    # Для SELL напрямок рівнів дзеркальний
    if side is TradeSide.SELL:
        percent = -percent
    return _to_cents(entry_price * (_HUNDRED + percent) / _HUNDRED)


def _proportional(
    leader_level: Decimal, leader_price: Optional[Decimal], entry_price: Decimal
) -> Optional[Decimal]:
    if leader_price is None or leader_price <= _ZERO:
        return None
    return _to_cents(leader_level / leader_price * entry_price)


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)
