"""Unit tests для trade detection (pure snapshot diff)."""

from decimal import Decimal

from copytrade.domain.brokerage.value_objects import RawPosition
from copytrade.domain.copying.services import detect_trades, normalize_positions
from copytrade.domain.copying.value_objects import DetectedTrade, TradeSide


def _apply(previous: dict, trades: list[DetectedTrade]) -> dict:
    result = dict(previous)
    for trade in trades:
        result[trade.symbol] = result.get(trade.symbol, Decimal("0")) + trade.signed_delta
    return {s: q for s, q in result.items() if q != 0}


class TestNormalizePositions:
    def test_units_preferred_over_quantity(self):
        """Test: units має пріоритет, quantity - fallback, інакше 0."""
        result = normalize_positions(
            [
                RawPosition(symbol="AAPL", units=Decimal("10"), quantity=Decimal("99")),
                RawPosition(symbol="MSFT", quantity=Decimal("5")),
                RawPosition(symbol="TSLA"),
            ]
        )

        assert result == {
            "AAPL": Decimal("10"),
            "MSFT": Decimal("5"),
            "TSLA": Decimal("0"),
        }

    def test_duplicate_symbols_are_summed(self):
        result = normalize_positions(
            [
                RawPosition(symbol="AAPL", units=Decimal("10")),
                RawPosition(symbol=" aapl ", units=Decimal("2.5")),
            ]
        )

        assert result == {"AAPL": Decimal("12.5")}

    def test_positions_without_symbol_are_ignored(self):
        result = normalize_positions(
            [RawPosition(symbol=None, units=Decimal("3")), RawPosition(symbol="", units=Decimal("1"))]
        )

        assert result == {}


class TestDetectTrades:
    def test_new_symbol_is_buy(self):
        trades = detect_trades({"AAPL": Decimal("10")}, {})

        assert trades == [DetectedTrade("AAPL", TradeSide.BUY, Decimal("10"))]

    def test_increase_is_buy_of_delta(self):
        trades = detect_trades({"AAPL": Decimal("15")}, {"AAPL": Decimal("10")})

        assert trades == [DetectedTrade("AAPL", TradeSide.BUY, Decimal("5"))]

    def test_partial_decrease_is_sell_not_exit(self):
        trades = detect_trades({"AAPL": Decimal("4")}, {"AAPL": Decimal("10")})

        assert trades == [DetectedTrade("AAPL", TradeSide.SELL, Decimal("6"), is_exit=False)]

    def test_full_exit(self):
        """Test: зникнення позиції (100 → 0) дає SELL 100 з is_exit."""
        trades = detect_trades({}, {"AAPL": Decimal("100")})

        assert trades == [DetectedTrade("AAPL", TradeSide.SELL, Decimal("100"), is_exit=True)]

    def test_sign_flip_is_single_sell(self):
        """Test: long 10 → short 5 за один інтервал = один SELL на 15."""
        trades = detect_trades({"AAPL": Decimal("-5")}, {"AAPL": Decimal("10")})

        assert len(trades) == 1
        assert trades[0].side is TradeSide.SELL
        assert trades[0].quantity == Decimal("15")
        assert trades[0].is_exit is False

    def test_unchanged_positions_produce_nothing(self):
        snapshot = {"AAPL": Decimal("10"), "MSFT": Decimal("3")}

        assert detect_trades(snapshot, dict(snapshot)) == []

    def test_output_sorted_by_symbol(self):
        trades = detect_trades(
            {"TSLA": Decimal("1"), "AAPL": Decimal("2"), "MSFT": Decimal("3")}, {}
        )

        assert [t.symbol for t in trades] == ["AAPL", "MSFT", "TSLA"]

    def test_is_pure_and_deterministic(self):
        current = {"AAPL": Decimal("5"), "NVDA": Decimal("2")}
        previous = {"AAPL": Decimal("10"), "MSFT": Decimal("7")}

        first = detect_trades(current, previous)
        second = detect_trades(current, previous)

        assert first == second
        assert current == {"AAPL": Decimal("5"), "NVDA": Decimal("2")}
        assert previous == {"AAPL": Decimal("10"), "MSFT": Decimal("7")}

    def test_applying_trades_reconstructs_current(self):
        """Test: previous + signed deltas == current."""
        previous = {"AAPL": Decimal("10"), "MSFT": Decimal("7"), "TSLA": Decimal("3")}
        current = {"AAPL": Decimal("4"), "NVDA": Decimal("2"), "TSLA": Decimal("-1")}

        trades = detect_trades(current, previous)

        assert _apply(previous, trades) == current
