"""
Shared fixtures: settings, a fresh session, bar builders and a handler
that collects the structured log events (our loggers don't propagate, so
pytest's caplog never sees them).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import pytest

from decision_service.engine import TraderSession
from shared import redis_client
from shared.config import Settings

LOGGERS = (
    "data_loader",
    "decision_service",
    "decision_service.engine",
    "trade_manager.ledger",
    "trade_executor",
    "deriv_client",
)


class EventCollector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def named(self, event: str) -> List[logging.LogRecord]:
        return [r for r in self.records if getattr(r, "event", None) == event]

    def reasons(self) -> List[str]:
        return [r.data["reason"] for r in self.named("guard_skip")]


@pytest.fixture(autouse=True)
def _no_redis():
    redis_client.configure(None)
    yield
    redis_client.configure(None)


@pytest.fixture
def events():
    h = EventCollector()
    for name in LOGGERS:
        logging.getLogger(name).addHandler(h)
    yield h
    for name in LOGGERS:
        logging.getLogger(name).removeHandler(h)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token="test-token", app_id="1089")


@pytest.fixture
def session(settings) -> TraderSession:
    s = TraderSession(settings)
    s.ledger.authoritative_balance = 50.0
    return s


# ───── builders ───────────────────────────────────────────────────────
def ohlc(open_time: int, o: float, h: float, l: float, c: float,
         epoch: int | None = None) -> Dict[str, Any]:
    """Streaming record the way Deriv sends it (prices as strings)."""
    return {
        "open_time": open_time,
        "epoch": open_time + 1 if epoch is None else epoch,
        "open": str(o),
        "high": str(h),
        "low": str(l),
        "close": str(c),
        "granularity": 60,
        "symbol": "R_75",
    }


def candle(epoch: int, o: float, c: float) -> Dict[str, Any]:
    """Historical record; high/low just bracket the body."""
    return {"epoch": epoch, "open": o, "high": max(o, c) + 0.5,
            "low": min(o, c) - 0.5, "close": c}


def widening(i: int) -> tuple[float, float]:
    """
    (open, close) of bar i in a series where every bar engulfs the
    previous one in the opposite direction: even = bearish, odd = bullish.
    """
    w = float(i + 1)
    return (100 + w, 100 - w) if i % 2 == 0 else (100 - w, 100 + w)
