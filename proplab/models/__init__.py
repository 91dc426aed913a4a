"""Record and market data models."""
