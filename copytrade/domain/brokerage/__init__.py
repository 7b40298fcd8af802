"""Brokerage bounded context - port до brokerage aggregation API."""
