"""
engine.py – the session value + the single event entry point
------------------------------------------------------------
Everything the trader remembers lives in one `TraderSession`; the
transport hands every decoded event to `handle_event()` and sends
whatever requests come back.  One event is processed to completion
before the next, so nothing here needs a lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from data_loader.aggregator import BarAggregator
from shared.config import Settings
from shared.errors import ValidationError
from shared.logging import get_logger, log_event
from trade_manager.ledger import Ledger

from .decision_service import Decision, SchedulerState, evaluate
from .events import (
    AuthoritativeBalanceReport,
    BalanceQueryRequest,
    HistoricalBars,
    InboundEvent,
    IncrementalBarUpdate,
    Outbound,
    TradeConfirmation,
)

log = get_logger("decision_service.engine")


@dataclass
class TraderSession:
    settings: Settings
    aggregator: BarAggregator = field(init=False)
    ledger: Ledger = field(init=False)
    scheduler: SchedulerState = field(default_factory=SchedulerState)

    def __post_init__(self) -> None:
        self.aggregator = BarAggregator(self.settings.max_bars)
        self.ledger = Ledger(simulated_balance=self.settings.paper_balance)

    def snapshot(self) -> Dict[str, Any]:
        cur = self.aggregator.current
        return {
            "symbol": self.settings.symbol,
            "bars": len(self.aggregator),
            "current_bar": cur.to_dict() if cur else None,
            "last_trade_time": self.scheduler.last_trade_time,
            **self.ledger.to_dict(),
        }


def _decide(session: TraderSession, now: float, paused: bool) -> List[Outbound]:
    decision: Decision = evaluate(session, now, paused)
    return [decision.request] if decision.request is not None else []


def handle_event(session: TraderSession, event: InboundEvent,
                 now: float, paused: bool = False) -> List[Outbound]:
    """
    Route one inbound event.  Returns the outbound requests it produced
    (possibly none).  A malformed event is logged and dropped.
    """
    try:
        if isinstance(event, IncrementalBarUpdate):
            closed = session.aggregator.apply_update(event.record)
            return _decide(session, now, paused) if closed is not None else []

        if isinstance(event, HistoricalBars):
            session.aggregator.load_history(event.records)
            return _decide(session, now, paused)

        if isinstance(event, AuthoritativeBalanceReport):
            session.ledger.record_authoritative_balance(event.balance)
            return []

        if isinstance(event, TradeConfirmation):
            session.ledger.record_trade_outcome(event.stake, event.payout)
            return [BalanceQueryRequest()]

    except ValidationError as exc:
        log_event(log, "validation_error", f"dropped {type(event).__name__} – {exc}",
                  logging.WARNING, record=exc.record)
        return []

    raise TypeError(f"unsupported event {event!r}")
