"""Copy trading pipeline: leader trade detection, copy execution and position risk monitoring."""

__version__ = "1.0.0"
