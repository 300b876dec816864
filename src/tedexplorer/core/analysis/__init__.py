"""Market share analysis."""

from .market_share import MarketShareCalculation, ValuedTender, compute_market_share

__all__ = [
    "MarketShareCalculation",
    "ValuedTender",
    "compute_market_share",
]
