"""Ports для Brokerage bounded context."""

from .brokerage_port import BrokeragePort

__all__ = ["BrokeragePort"]
