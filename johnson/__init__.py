"""Johnson: contract perk-tree rule engine and resolution simulator."""

__version__ = "0.1.0"
