"""
rules.py  – engulfing-pattern helpers
=====================================
Pure-function utilities only; no Redis, no logging, no side-effects.
Only **closed** bars are ever passed in; the still-forming bar stays in
the aggregator.
"""

from __future__ import annotations
from enum import Enum
from typing import Sequence

from data_loader.candles import Bar

MIN_BARS = 2            # prev + last


class Signal(str, Enum):
    CALL = "CALL"
    PUT  = "PUT"
    NONE = "NONE"

    @property
    def is_directional(self) -> bool:
        return self is not Signal.NONE

# ---------------------------------------------------------------------
def has_enough_data(series: Sequence[Bar]) -> bool:
    return len(series) >= MIN_BARS

def is_bullish_engulfing(prev: Bar, last: Bar) -> bool:
    return (prev.is_bearish and last.is_bullish
            and last.close > prev.open and last.open < prev.close)

def is_bearish_engulfing(prev: Bar, last: Bar) -> bool:
    return (prev.is_bullish and last.is_bearish
            and last.open > prev.close and last.close < prev.open)

def detect(series: Sequence[Bar]) -> Signal:
    """
    Classify the two newest closed bars.

    CALL  – bearish bar swallowed by a bullish one
    PUT   – bullish bar swallowed by a bearish one
    NONE  – anything else, including fewer than two bars
    """
    if not has_enough_data(series):
        return Signal.NONE
    prev, last = series[-2], series[-1]
    if is_bullish_engulfing(prev, last):
        return Signal.CALL
    if is_bearish_engulfing(prev, last):
        return Signal.PUT
    return Signal.NONE
