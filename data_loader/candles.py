"""
candles.py – the Bar (candle) value type
========================================
A Bar is frozen: "mutating" the still-forming candle means replacing it
with the result of `merge()`, so a closed bar can never change again.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from shared.errors import ValidationError
from shared.utils import require_numbers

HISTORY_FIELDS = ("open", "high", "low", "close", "epoch")
UPDATE_FIELDS  = ("epoch", "open", "high", "low", "close", "open_time")


@dataclass(frozen=True)
class Bar:
    open: float
    high: float
    low: float
    close: float
    open_time: int
    last_update_time: int

    # ───── direction ──────────────────────────────────────────────
    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.open > self.close

    def merge(self, update: "Bar") -> "Bar":
        """Fold a same-bucket update in: high=max, low=min, close=latest."""
        if update.open_time != self.open_time:
            raise ValueError("cannot merge bars from different buckets")
        return Bar(
            open=self.open,
            high=max(self.high, update.high, update.close),
            low=min(self.low, update.low, update.close),
            close=update.close,
            open_time=self.open_time,
            last_update_time=update.last_update_time,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _make(o: float, h: float, l: float, c: float,
          open_time: int, updated: int) -> Bar:
    # widen high/low so they always bracket open & close
    return Bar(
        open=o,
        high=max(h, o, c, l),
        low=min(l, o, c, h),
        close=c,
        open_time=open_time,
        last_update_time=updated,
    )


def bar_from_history(record: Mapping[str, Any]) -> Bar:
    """One element of a `candles` batch; its `epoch` is the bucket open."""
    n = require_numbers(record, HISTORY_FIELDS)
    epoch = int(n["epoch"])
    return _make(n["open"], n["high"], n["low"], n["close"], epoch, epoch)


def bar_from_update(record: Mapping[str, Any]) -> Bar:
    """One streaming `ohlc` record."""
    n = require_numbers(record, UPDATE_FIELDS)
    open_time, epoch = int(n["open_time"]), int(n["epoch"])
    if epoch < open_time:
        raise ValidationError(
            f"epoch {epoch} precedes open_time {open_time}", record)
    return _make(n["open"], n["high"], n["low"], n["close"], open_time, epoch)
