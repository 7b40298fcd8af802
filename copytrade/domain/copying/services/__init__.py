"""Pure domain services для Copying bounded context."""

from .copy_policy import CopyPolicyEvaluator, protective_levels
from .risk_triggers import should_close_position
from .trade_detection import SymbolQuantityMap, detect_trades, normalize_positions

__all__ = [
    "CopyPolicyEvaluator",
    "SymbolQuantityMap",
    "detect_trades",
    "normalize_positions",
    "protective_levels",
    "should_close_position",
]
