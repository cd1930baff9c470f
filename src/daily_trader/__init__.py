"""Daily Trader — simulated daily trading session and order-matching engine."""

__version__ = "0.1.0"
