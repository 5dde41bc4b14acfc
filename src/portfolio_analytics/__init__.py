"""Historical PnL reconstruction and risk analytics engine."""

__version__ = "0.1.0"
