"""
decision_service.py – per-bar risk gate
=======================================

Runs once every time a candle closes (or a historical batch lands) and
decides whether to ask for a contract.  Guards are checked in a fixed
order and the first one that fails ends the cycle:

0. paused            – ops kill-switch set through trade_manager
1. cooldown          – less than TRADE_COOLDOWN s since the last request
2. simulated floor   – paper balance below one stake
3. authoritative floor – real balance below one stake
4. drawdown          – paper balance more than DRAWDOWN_THRESHOLD below peak

Only then is the pattern detector asked; a CALL / PUT becomes a
`TradeRequest`.  `last_trade_time` is stamped when the request is made,
not when Deriv confirms the purchase.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from shared.logging import get_logger, log_event

from .events import TradeRequest
from . import rules as R

if TYPE_CHECKING:                                          # pragma: no cover
    from .engine import TraderSession

log = get_logger("decision_service")

# ─── STATE / RESULT TYPES ─────────────────────────────────────────────
@dataclass
class SchedulerState:
    last_trade_time: Optional[float] = None                # None = never

    def seconds_since_trade(self, now: float) -> Optional[float]:
        if self.last_trade_time is None:
            return None
        return now - self.last_trade_time


class SkipReason(str, Enum):
    PAUSED              = "paused"
    COOLDOWN            = "cooldown"
    SIMULATED_FLOOR     = "simulated_balance_floor"
    AUTHORITATIVE_FLOOR = "authoritative_balance_floor"
    DRAWDOWN            = "drawdown"
    INSUFFICIENT_DATA   = "insufficient_data"
    NO_PATTERN          = "no_pattern"


@dataclass(frozen=True)
class Decision:
    signal: R.Signal = R.Signal.NONE
    request: Optional[TradeRequest] = None
    skipped: Optional[SkipReason] = None


def _skip(reason: SkipReason, msg: str, level: int = logging.INFO, **data) -> Decision:
    log_event(log, "guard_skip", msg, level, reason=reason.value, **data)
    return Decision(skipped=reason)

# ─── GATE ─────────────────────────────────────────────────────────────
def check_guards(session: "TraderSession", now: float,
                 paused: bool = False) -> Optional[Decision]:
    """Return a skip Decision for the first failing guard, else None."""
    cfg, led, sch = session.settings, session.ledger, session.scheduler

    if paused:
        return _skip(SkipReason.PAUSED, "Trade skipped: trading paused")

    since = sch.seconds_since_trade(now)
    if since is not None and since < cfg.cooldown_sec:
        return _skip(SkipReason.COOLDOWN, "Trade skipped: within cooldown",
                     elapsed=round(since, 3), cooldown=cfg.cooldown_sec)

    if led.simulated_balance < cfg.stake:
        return _skip(SkipReason.SIMULATED_FLOOR,
                     f"Insufficient simulated balance for trading: {led.simulated_balance}",
                     logging.ERROR, simulated=led.simulated_balance)

    if led.authoritative_balance < cfg.stake:
        return _skip(SkipReason.AUTHORITATIVE_FLOOR,
                     f"Insufficient actual balance for trading: {led.authoritative_balance}",
                     logging.ERROR, authoritative=led.authoritative_balance)

    floor = led.peak_simulated_balance * (1 - cfg.drawdown_threshold)
    if led.simulated_balance < floor:
        return _skip(SkipReason.DRAWDOWN, "Trade skipped: simulated drawdown exceeded",
                     simulated=led.simulated_balance,
                     peak=led.peak_simulated_balance, floor=floor)
    return None


def evaluate(session: "TraderSession", now: float, paused: bool = False) -> Decision:
    """One decision cycle on the current closed-bar window."""
    blocked = check_guards(session, now, paused)
    if blocked is not None:
        return blocked

    series = session.aggregator.series
    if not R.has_enough_data(series):
        return _skip(SkipReason.INSUFFICIENT_DATA,
                     f"Not enough candles to check engulfing. Current count: {len(series)}",
                     count=len(series))

    signal = R.detect(series)
    if not signal.is_directional:
        return _skip(SkipReason.NO_PATTERN, "No engulfing pattern detected")

    cfg = session.settings
    req = TradeRequest(
        symbol=cfg.symbol,
        direction=signal,
        stake=cfg.stake,
        duration=cfg.duration,
        duration_unit=cfg.duration_unit,
        currency=cfg.currency,
    )
    session.scheduler.last_trade_time = now
    prev, last = series[-2], series[-1]
    log_event(log, "signal_detected", f"{signal.value} engulfing detected",
              signal=signal.value,
              prev={"open": prev.open, "close": prev.close},
              last={"open": last.open, "close": last.close})
    log_event(log, "trade_requested", "Requesting trade",
              symbol=req.symbol, direction=signal.value, stake=req.stake,
              duration=req.duration, duration_unit=req.duration_unit, now=now)
    return Decision(signal=signal, request=req)
