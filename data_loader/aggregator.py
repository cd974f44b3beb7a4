"""
aggregator.py – closed-bar window + one still-forming bar
=========================================================
• `series`  = up to MAX_BARS (200) **closed** bars, oldest → newest.
• `current` = the single still-forming bar (never part of `series`).

Boot-strap comes from the `candles` batch Deriv sends once per
subscription (`load_history`, replaces the window wholesale).  Every
streaming `ohlc` record either patches the forming bar (same open_time)
or rolls it into the window and starts the next one (`apply_update`).
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Iterable, List, Mapping, Optional

from shared.constants import MAX_BARS
from shared.errors import ValidationError
from shared.logging import get_logger, log_event

from .candles import Bar, bar_from_history, bar_from_update

log = get_logger("data_loader")


class BarAggregator:
    def __init__(self, max_bars: int = MAX_BARS) -> None:
        self.max_bars = max_bars
        self.series: Deque[Bar] = deque(maxlen=max_bars)
        self.current: Optional[Bar] = None

    def __len__(self) -> int:
        return len(self.series)

    @property
    def bars(self) -> List[Bar]:
        return list(self.series)

    # ───── boot-strap ───────────────────────────────────────────────
    def load_history(self, records: Iterable[Mapping[str, Any]]) -> List[ValidationError]:
        """
        Replace the closed window with a historical batch.  Bad records
        are logged and skipped; the errors are returned to the caller.
        """
        parsed: List[Bar] = []
        errors: List[ValidationError] = []
        for rec in records:
            try:
                parsed.append(bar_from_history(rec))
            except ValidationError as exc:
                errors.append(exc)
                log_event(log, "validation_error", f"skipped history record – {exc}",
                          logging.WARNING, record=rec)

        self.series = deque(parsed, maxlen=self.max_bars)
        self.current = None
        log_event(log, "history_loaded", f"Loaded {len(self.series)} historical candles",
                  count=len(self.series), skipped=len(errors))
        return errors

    # ───── live update ──────────────────────────────────────────────
    def apply_update(self, record: Mapping[str, Any]) -> Optional[Bar]:
        """
        Fold one `ohlc` record in.  Returns the bar that just closed, or
        None when the forming bar was only started / patched.
        Raises ValidationError (nothing changes) on a malformed or stale
        record.
        """
        bar = bar_from_update(record)
        cur = self.current

        if cur is None:
            self._start(bar)
            return None

        if bar.open_time == cur.open_time:          # still same bucket
            self.current = cur.merge(bar)
            log_event(log, "bar_updated", "Updated current candle",
                      logging.DEBUG, **self.current.to_dict())
            return None

        if bar.open_time < cur.open_time:
            raise ValidationError(
                f"stale update open_time={bar.open_time} < current {cur.open_time}",
                record)

        # ---------- rollover ----------
        self.series.append(cur)                     # deque evicts the oldest
        log_event(log, "bar_finalized", "Finalized candle", **cur.to_dict())
        self._start(bar)
        return cur

    def _start(self, bar: Bar) -> None:
        tail = self.series[-1] if self.series else None
        if tail is not None and bar.open_time < tail.open_time:
            raise ValidationError(
                f"stale update open_time={bar.open_time} < last closed {tail.open_time}",
                bar.to_dict())
        if tail is not None and bar.open_time == tail.open_time:
            # history batch ended with the still-forming bar: take it back
            self.series.pop()
            bar = tail.merge(bar)
        self.current = bar
        log_event(log, "bar_started", "Started new candle",
                  logging.DEBUG, **bar.to_dict())
