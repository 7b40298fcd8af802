"""Stop-loss / take-profit decision для Position Risk Monitor."""

from ..entities import Position
from ..value_objects import CloseDecision, ExitReason


def should_close_position(position: Position) -> CloseDecision:
    """Decide whether a position's protective level has been crossed.

    Long semantics: SL спрацьовує при ``price <= stop_loss``, TP при
    ``price >= take_profit``. Stop-loss перевіряється першим і виграє,
    якщо обидва пороги перетнуті в одному tick'у.

    Returns:
        CloseDecision з reason та порогом, що спрацював (trigger_price).
    """
    price = position.current_price
    if not position.is_open or price is None:
        return CloseDecision.hold()

    if position.stop_loss is not None and price <= position.stop_loss:
        return CloseDecision(
            should_close=True,
            reason=ExitReason.STOP_LOSS,
            trigger_price=position.stop_loss,
        )

    if position.take_profit is not None and price >= position.take_profit:
        return CloseDecision(
            should_close=True,
            reason=ExitReason.TAKE_PROFIT,
            trigger_price=position.take_profit,
        )

    return CloseDecision.hold()
