"""Trade detection - pure diff of position snapshots.

Тут немає I/O: функції детерміновані і є основою всього детектора.
"""

from decimal import Decimal
from typing import Iterable, Mapping

from copytrade.domain.brokerage.value_objects import RawPosition

from ..value_objects import DetectedTrade, TradeSide

SymbolQuantityMap = dict[str, Decimal]

_ZERO = Decimal("0")


def normalize_positions(raw_positions: Iterable[RawPosition]) -> SymbolQuantityMap:
    """Map brokerage positions to ``{symbol: signed quantity}``.

    Quantity береться з ``units``, далі ``quantity``, інакше 0. Повторні
    рядки одного символу (кілька lots) сумуються. Рядки без символу
    ігноруються.

    Example:
        >>> normalize_positions([RawPosition("AAPL", units=Decimal("10"))])
        {'AAPL': Decimal('10')}
    """
    result: SymbolQuantityMap = {}
    for raw in raw_positions:
        if not raw.symbol:
            continue
        symbol = raw.symbol.strip().upper()
        if raw.units is not None:
            quantity = raw.units
        elif raw.quantity is not None:
            quantity = raw.quantity
        else:
            quantity = _ZERO
        result[symbol] = result.get(symbol, _ZERO) + quantity
    return result


def detect_trades(
    current: Mapping[str, Decimal], previous: Mapping[str, Decimal]
) -> list[DetectedTrade]:
    """Diff two position maps into buy/sell events.

    - quantity зросла → BUY на різницю
    - quantity впала → SELL на різницю, ``is_exit`` якщо стало 0
    - зміна знаку (long → short) за один інтервал дає ОДИН SELL на всю
      різницю

    Output sorted by symbol so the same inputs always give the same list.

    Example:
        >>> detect_trades({"AAPL": Decimal("0")}, {"AAPL": Decimal("100")})
        [DetectedTrade(symbol='AAPL', side=<TradeSide.SELL: 'sell'>, quantity=Decimal('100'), is_exit=True)]
    """
    trades: list[DetectedTrade] = []
    for symbol in sorted(set(current) | set(previous)):
        now = current.get(symbol, _ZERO)
        before = previous.get(symbol, _ZERO)
        if now == before:
            continue
        if now > before:
            trades.append(DetectedTrade(symbol=symbol, side=TradeSide.BUY, quantity=now - before))
        else:
            trades.append(
                DetectedTrade(
                    symbol=symbol,
                    side=TradeSide.SELL,
                    quantity=before - now,
                    is_exit=now == _ZERO,
                )
            )
    return trades
