"""Unit tests для CopyPolicyEvaluator та protective levels.

Pure unit tests - тільки business logic, zero dependencies.
"""

from decimal import Decimal

import pytest

from copytrade.domain.copying.entities import CopyRelationship, LeaderTrade
from copytrade.domain.copying.services import CopyPolicyEvaluator, protective_levels
from copytrade.domain.copying.value_objects import (
    AllocationMethod,
    AssetClass,
    PolicyContext,
    SkipReason,
    TradeSide,
)


def make_trade(side=TradeSide.BUY, quantity="10", price="50", is_exit=False, **kwargs):
    return LeaderTrade(
        leader_id=1,
        account_id="leader-acc",
        symbol=kwargs.pop("symbol", "AAPL"),
        side=side,
        quantity=Decimal(quantity),
        price=Decimal(price) if price is not None else None,
        is_exit=is_exit,
        id=kwargs.pop("id", 100),
        **kwargs,
    )


def make_relationship(method=AllocationMethod.FIXED_PERCENT, value="10", **kwargs):
    return CopyRelationship(
        follower_id=2,
        leader_id=1,
        allocation_method=method,
        allocation_value=Decimal(value),
        id=kwargs.pop("id", 7),
        **kwargs,
    )


def context(**kwargs) -> PolicyContext:
    defaults = {"follower_portfolio_value": Decimal("20000")}
    defaults.update(kwargs)
    return PolicyContext(**defaults)


@pytest.fixture
def evaluator() -> CopyPolicyEvaluator:
    return CopyPolicyEvaluator()


class TestSizing:
    def test_fixed_percent(self, evaluator):
        """Test: 10% від $20,000 по $50 = 40 акцій."""
        decision = evaluator.evaluate(make_trade(), make_relationship(), context())

        assert decision.should_copy is True
        assert decision.quantity == Decimal("40")
        assert decision.price == Decimal("50")

    def test_fixed_dollar(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(price="30"),
            make_relationship(AllocationMethod.FIXED_DOLLAR, "1000"),
            context(),
        )

        # 1000 / 30 = 33.33 → floor
        assert decision.quantity == Decimal("33")

    def test_proportional(self, evaluator):
        """Test: leader 100 акцій, $100k vs $50k → follower 50 акцій."""
        decision = evaluator.evaluate(
            make_trade(quantity="100"),
            make_relationship(AllocationMethod.PROPORTIONAL, "1"),
            context(
                follower_portfolio_value=Decimal("50000"),
                leader_portfolio_value=Decimal("100000"),
            ),
        )

        assert decision.quantity == Decimal("50")

    def test_proportional_without_leader_value_is_too_small(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(quantity="100"),
            make_relationship(AllocationMethod.PROPORTIONAL, "1"),
            context(leader_portfolio_value=Decimal("0")),
        )

        assert decision.should_copy is False
        assert decision.reason is SkipReason.SIZE_TOO_SMALL

    def test_fixed_shares(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(quantity="500", price="30"),
            make_relationship(AllocationMethod.FIXED_SHARES, "15"),
            context(),
        )

        assert decision.quantity == Decimal("15")

    def test_multiplier(self, evaluator):
        """Test: leader 100 акцій × 0.5 → follower 50."""
        decision = evaluator.evaluate(
            make_trade(quantity="100"),
            make_relationship(AllocationMethod.MULTIPLIER, "0.5"),
            context(),
        )

        assert decision.quantity == Decimal("50")

    def test_multiplier_copies_at_least_one_step(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(quantity="1"),
            make_relationship(AllocationMethod.MULTIPLIER, "0.25"),
            context(),
        )

        assert decision.quantity == Decimal("1")

    def test_fixed_shares_still_capped_by_max_position_size(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(
                AllocationMethod.FIXED_SHARES, "100", max_position_size=Decimal("1000")
            ),
            context(),
        )

        # 100 × $50 = $5,000 > $1,000 → 20
        assert decision.quantity == Decimal("20")

    def test_fractional_quantity_step(self):
        evaluator = CopyPolicyEvaluator(quantity_step=Decimal("0.1"))

        decision = evaluator.evaluate(
            make_trade(price="30"),
            make_relationship(AllocationMethod.FIXED_DOLLAR, "100"),
            context(),
        )

        assert decision.quantity == Decimal("3.3")

    def test_size_rounding_to_zero_is_skipped(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(price="500"),
            make_relationship(AllocationMethod.FIXED_DOLLAR, "100"),
            context(),
        )

        assert decision.should_copy is False
        assert decision.reason is SkipReason.SIZE_TOO_SMALL

    def test_context_price_overrides_trade_price(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(price=None), make_relationship(), context(trade_price=Decimal("100"))
        )

        assert decision.quantity == Decimal("20")
        assert decision.price == Decimal("100")


class TestCaps:
    def test_max_position_size_cap(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_position_size=Decimal("1000")),
            context(),
        )

        # 40 акцій по $50 = $2000 > $1000 → 20
        assert decision.quantity == Decimal("20")

    def test_max_risk_per_trade_uses_default_stop_distance(self, evaluator):
        """Test: ризик 0.5% від $20k = $100; стоп 5% від $50 = $2.5/акція → 40."""
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(value="50", max_risk_per_trade=Decimal("0.5")),
            context(),
        )

        assert decision.quantity == Decimal("40")

    def test_max_risk_per_trade_uses_custom_stop(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(
                value="50",
                max_risk_per_trade=Decimal("0.5"),
                custom_stop_loss_percent=Decimal("10"),
            ),
            context(),
        )

        # $100 / ($50 × 10%) = 20
        assert decision.quantity == Decimal("20")

    def test_zero_custom_stop_is_not_replaced_by_default(self, evaluator):
        """Test: custom_stop_loss_percent=0 задано явно → default 5% не підставляється."""
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(
                value="50",
                max_risk_per_trade=Decimal("0.5"),
                custom_stop_loss_percent=Decimal("0"),
            ),
            context(),
        )

        # Нульова відстань до стопу → risk cap не обмежує: $10,000 / $50 = 200
        assert decision.quantity == Decimal("200")

    def test_caps_do_not_apply_to_sells(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL),
            make_relationship(max_position_size=Decimal("100")),
            context(held_quantity=Decimal("30")),
        )

        assert decision.quantity == Decimal("30")


class TestSells:
    def test_sell_without_holding_is_skipped(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL), make_relationship(), context()
        )

        assert decision.reason is SkipReason.NO_POSITION_TO_SELL

    def test_sell_capped_at_held_quantity(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL),
            make_relationship(),
            context(held_quantity=Decimal("15")),
        )

        assert decision.quantity == Decimal("15")

    def test_partial_sell_uses_sized_quantity(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL),
            make_relationship(),
            context(held_quantity=Decimal("100")),
        )

        assert decision.quantity == Decimal("40")

    def test_exit_sells_entire_holding(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL, is_exit=True),
            make_relationship(),
            context(held_quantity=Decimal("73")),
        )

        assert decision.quantity == Decimal("73")


class TestEligibility:
    def test_inactive_relationship(self, evaluator):
        relationship = make_relationship()
        relationship.stop()

        decision = evaluator.evaluate(make_trade(), relationship, context())

        assert decision.reason is SkipReason.RELATIONSHIP_INACTIVE

    def test_asset_class_filter(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(asset_class=AssetClass.CRYPTO),
            make_relationship(allowed_asset_classes=[AssetClass.STOCK, AssetClass.ETF]),
            context(),
        )

        assert decision.reason is SkipReason.ASSET_CLASS_FILTERED

    def test_empty_asset_class_list_allows_all(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(asset_class=AssetClass.OPTION),
            make_relationship(allowed_asset_classes=[]),
            context(),
        )

        assert decision.should_copy is True

    def test_loss_threshold_breached(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(stop_copying_threshold=Decimal("-10")),
            context(follower_return_percent=Decimal("-12.5")),
        )

        assert decision.reason is SkipReason.LOSS_THRESHOLD_BREACHED

    def test_loss_above_threshold_copies(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(stop_copying_threshold=Decimal("-10")),
            context(follower_return_percent=Decimal("-3")),
        )

        assert decision.should_copy is True

    def test_no_brokerage_connection(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(), make_relationship(), context(has_active_connection=False)
        )

        assert decision.reason is SkipReason.NO_BROKERAGE_CONNECTION

    def test_max_open_positions_blocks_new_position(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_open_positions=3),
            context(open_positions_count=3),
        )

        assert decision.reason is SkipReason.MAX_POSITIONS_REACHED

    def test_max_open_positions_allows_adding_to_existing(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_open_positions=3),
            context(open_positions_count=3, held_quantity=Decimal("10")),
        )

        assert decision.should_copy is True

    def test_daily_trade_limit(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_daily_trades=5),
            context(trades_copied_today=5),
        )

        assert decision.reason is SkipReason.DAILY_TRADE_LIMIT_REACHED

    def test_price_unavailable(self, evaluator):
        decision = evaluator.evaluate(make_trade(price=None), make_relationship(), context())

        assert decision.reason is SkipReason.PRICE_UNAVAILABLE

    def test_checks_short_circuit_in_order(self, evaluator):
        """Test: inactive перевіряється раніше за відсутність connection."""
        relationship = make_relationship()
        relationship.stop()

        decision = evaluator.evaluate(
            make_trade(), relationship, context(has_active_connection=False)
        )

        assert decision.reason is SkipReason.RELATIONSHIP_INACTIVE

    def test_screen_needs_no_brokerage_context(self, evaluator):
        relationship = make_relationship(
            allowed_asset_classes=[AssetClass.CRYPTO], stop_copying_threshold=Decimal("-20")
        )

        assert evaluator.screen(make_trade(), relationship) is SkipReason.ASSET_CLASS_FILTERED
        assert (
            evaluator.screen(
                make_trade(asset_class=AssetClass.CRYPTO), relationship, Decimal("-25")
            )
            is SkipReason.LOSS_THRESHOLD_BREACHED
        )
        assert evaluator.screen(make_trade(asset_class=AssetClass.CRYPTO), relationship) is None


class TestPriceFilters:
    def test_penny_stock_skipped(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(price="4.99"), make_relationship(skip_penny_stocks=True), context()
        )

        assert decision.reason is SkipReason.PENNY_STOCK_FILTERED

    def test_five_dollar_stock_is_not_penny(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(price="5"), make_relationship(skip_penny_stocks=True), context()
        )

        assert decision.should_copy is True

    @pytest.mark.parametrize(
        "price, expected",
        [
            ("9.99", SkipReason.PRICE_OUT_OF_RANGE),
            ("10", None),
            ("200", None),
            ("200.01", SkipReason.PRICE_OUT_OF_RANGE),
        ],
    )
    def test_min_max_stock_price(self, evaluator, price, expected):
        decision = evaluator.evaluate(
            make_trade(price=price),
            make_relationship(min_stock_price=Decimal("10"), max_stock_price=Decimal("200")),
            context(),
        )

        assert decision.reason is expected

    def test_quoted_price_is_filtered(self, evaluator):
        """Test: ціна з quote (trade.price невідома) теж проходить через фільтр."""
        decision = evaluator.evaluate(
            make_trade(price=None),
            make_relationship(skip_penny_stocks=True),
            context(trade_price=Decimal("2")),
        )

        assert decision.reason is SkipReason.PENNY_STOCK_FILTERED

    def test_price_filters_do_not_block_sells(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL, price="2", is_exit=True),
            make_relationship(skip_penny_stocks=True),
            context(held_quantity=Decimal("30")),
        )

        assert decision.quantity == Decimal("30")


class TestExposureLimits:
    def test_daily_volume_limit(self, evaluator):
        """Test: $1,500 вже скопійовано + $2,000 нової угоди > $3,000."""
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_daily_volume=Decimal("3000")),
            context(volume_copied_today=Decimal("1500")),
        )

        assert decision.reason is SkipReason.DAILY_VOLUME_LIMIT_REACHED

    def test_daily_volume_exactly_at_limit_copies(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_daily_volume=Decimal("3000")),
            context(volume_copied_today=Decimal("1000")),
        )

        assert decision.quantity == Decimal("40")

    def test_position_concentration_includes_existing_holding(self, evaluator):
        """Test: 60 вже є + 40 нових по $50 = $5,000 = 25% від $20k > 20%."""
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_position_concentration=Decimal("20")),
            context(held_quantity=Decimal("60")),
        )

        assert decision.reason is SkipReason.POSITION_CONCENTRATION_EXCEEDED

    def test_position_concentration_within_limit(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(max_position_concentration=Decimal("10")),
            context(),
        )

        # 40 × $50 = $2,000 = рівно 10%
        assert decision.quantity == Decimal("40")

    def test_concentration_unknown_portfolio_is_skipped(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(),
            make_relationship(
                AllocationMethod.FIXED_DOLLAR, "500", max_position_concentration=Decimal("50")
            ),
            context(follower_portfolio_value=Decimal("0")),
        )

        assert decision.reason is SkipReason.POSITION_CONCENTRATION_EXCEEDED

    def test_exposure_limits_do_not_block_sells(self, evaluator):
        decision = evaluator.evaluate(
            make_trade(side=TradeSide.SELL, is_exit=True),
            make_relationship(
                max_daily_volume=Decimal("1"), max_position_concentration=Decimal("1")
            ),
            context(held_quantity=Decimal("30"), volume_copied_today=Decimal("10000")),
        )

        assert decision.quantity == Decimal("30")


class TestProtectiveLevels:
    def test_custom_percentages_for_buy(self):
        relationship = make_relationship(
            copy_stop_loss=True,
            copy_take_profit=True,
            custom_stop_loss_percent=Decimal("5"),
            custom_take_profit_percent=Decimal("10"),
        )

        levels = protective_levels(TradeSide.BUY, Decimal("50"), relationship)

        assert levels.stop_loss == Decimal("47.50")
        assert levels.take_profit == Decimal("55.00")

    def test_sell_mirrors_direction(self):
        relationship = make_relationship(
            copy_stop_loss=True,
            copy_take_profit=True,
            custom_stop_loss_percent=Decimal("5"),
            custom_take_profit_percent=Decimal("10"),
        )

        levels = protective_levels(TradeSide.SELL, Decimal("50"), relationship)

        assert levels.stop_loss == Decimal("52.50")
        assert levels.take_profit == Decimal("45.00")

    def test_leader_levels_scaled_to_follower_entry(self):
        relationship = make_relationship(copy_stop_loss=True, copy_take_profit=True)
        trade = make_trade(
            price="100",
            stop_loss_price=Decimal("90"),
            take_profit_price=Decimal("120"),
        )

        levels = protective_levels(TradeSide.BUY, Decimal("101"), relationship, trade)

        assert levels.stop_loss == Decimal("90.90")
        assert levels.take_profit == Decimal("121.20")

    def test_no_levels_without_copy_flags(self):
        relationship = make_relationship(custom_stop_loss_percent=Decimal("5"))

        levels = protective_levels(TradeSide.BUY, Decimal("50"), relationship)

        assert levels.stop_loss is None
        assert levels.take_profit is None

    def test_rounded_to_cents(self):
        relationship = make_relationship(
            copy_stop_loss=True, custom_stop_loss_percent=Decimal("3")
        )

        levels = protective_levels(TradeSide.BUY, Decimal("33.33"), relationship)

        # 33.33 × 0.97 = 32.3301
        assert levels.stop_loss == Decimal("32.33")
