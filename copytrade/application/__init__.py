"""Application layer - use cases of the copy trading pipeline."""
