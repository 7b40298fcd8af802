"""Unit tests для should_close_position."""

from decimal import Decimal

from copytrade.domain.copying.entities import Position
from copytrade.domain.copying.services import should_close_position
from copytrade.domain.copying.value_objects import ExitReason


def make_position(current="100", stop_loss="95", take_profit="110") -> Position:
    position = Position.open(
        owner_id=2,
        account_id="acc-2",
        symbol="AAPL",
        quantity=Decimal("10"),
        entry_price=Decimal("100"),
        stop_loss=Decimal(stop_loss) if stop_loss else None,
        take_profit=Decimal(take_profit) if take_profit else None,
    )
    position.current_price = Decimal(current) if current else None
    return position


class TestShouldClosePosition:
    """Tests для SL/TP trigger'ів."""

    def test_stop_loss_triggers_at_exact_level(self):
        """Test: ціна рівно 95 при SL 95 → закриття по stop_loss."""
        decision = should_close_position(make_position(current="95"))

        assert decision.should_close is True
        assert decision.reason is ExitReason.STOP_LOSS
        assert decision.trigger_price == Decimal("95")

    def test_take_profit_triggers(self):
        decision = should_close_position(make_position(current="110.5"))

        assert decision.should_close is True
        assert decision.reason is ExitReason.TAKE_PROFIT
        assert decision.trigger_price == Decimal("110")

    def test_stop_loss_wins_when_both_crossed(self):
        """Test: SL вище TP (аномальні рівні) - SL перевіряється першим."""
        decision = should_close_position(
            make_position(current="100", stop_loss="105", take_profit="99")
        )

        assert decision.reason is ExitReason.STOP_LOSS

    def test_hold_between_levels(self):
        decision = should_close_position(make_position(current="100"))

        assert decision.should_close is False
        assert decision.reason is None

    def test_hold_without_current_price(self):
        decision = should_close_position(make_position(current=None))

        assert decision.should_close is False

    def test_hold_for_closed_position(self):
        position = make_position(current="90")
        position.close(ExitReason.LEADER_EXIT, Decimal("90"))

        assert should_close_position(position).should_close is False

    def test_no_levels_never_closes(self):
        decision = should_close_position(
            make_position(current="1", stop_loss=None, take_profit=None)
        )

        assert decision.should_close is False
