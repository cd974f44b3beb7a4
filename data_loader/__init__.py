"""
data_loader
===========

Keeps the 200-bar closed-candle window for the traded symbol: back-fills
it from the historical batch Deriv sends at subscription time and rolls
the still-forming candle forward on every streaming `ohlc` update.

Modules
-------
candles.py     – Bar value type + record parsing / validation
aggregator.py  – BarAggregator (load_history / apply_update)
"""

from .aggregator import BarAggregator
from .candles import Bar, bar_from_history, bar_from_update

__all__ = ["Bar", "BarAggregator", "bar_from_history", "bar_from_update"]
