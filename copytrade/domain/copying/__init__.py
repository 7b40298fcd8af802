"""Copying bounded context - detection, sizing, execution, risk monitoring."""
