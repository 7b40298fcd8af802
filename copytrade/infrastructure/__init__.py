"""Infrastructure adapters: brokerage, persistence, encryption, messaging."""
