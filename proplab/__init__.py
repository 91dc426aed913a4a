"""Player prop statistics engine: game-log filtering, chart statistics and market odds."""

__version__ = "0.1.0"
