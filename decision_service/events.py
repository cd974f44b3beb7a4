"""
events.py – what crosses the core boundary
------------------------------------------
Inbound events are produced by the transport's decoder, outbound
requests are turned into Deriv payloads by the executor.  The core never
sees raw JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Union

from .rules import Signal

# ───── inbound ───────────────────────────────────────────────────────
@dataclass(frozen=True)
class AuthoritativeBalanceReport:
    balance: Any


@dataclass(frozen=True)
class HistoricalBars:
    records: List[Mapping[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class IncrementalBarUpdate:
    record: Mapping[str, Any]


@dataclass(frozen=True)
class TradeConfirmation:
    stake: float
    payout: float
    contract_id: Any = None


InboundEvent = Union[
    AuthoritativeBalanceReport,
    HistoricalBars,
    IncrementalBarUpdate,
    TradeConfirmation,
]

# ───── outbound ──────────────────────────────────────────────────────
@dataclass(frozen=True)
class TradeRequest:
    symbol: str
    direction: Signal
    stake: float
    duration: int
    duration_unit: str
    currency: str = "USD"
    basis: str = "stake"


@dataclass(frozen=True)
class BalanceQueryRequest:
    pass


Outbound = Union[TradeRequest, BalanceQueryRequest]
