"""
messages.py – Deriv JSON ↔ typed events
---------------------------------------
Every Deriv reply carries `msg_type`; `decode()` dispatches on it instead
of guessing from which keys happen to be present.  Replies that carry an
`error` object raise ProtocolError.

Outbound helpers build the request payloads for the executor.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from decision_service.events import (
    AuthoritativeBalanceReport,
    HistoricalBars,
    InboundEvent,
    IncrementalBarUpdate,
    TradeConfirmation,
    TradeRequest,
)
from shared.config import Settings
from shared.errors import ProtocolError, ValidationError
from shared.utils import as_number


# ───── transport-level events (never reach the core) ────────────────
@dataclass(frozen=True)
class Authorized:
    login_id: str


@dataclass(frozen=True)
class ProposalReady:
    proposal_id: str
    ask_price: float
    payout: float = 0.0


@dataclass(frozen=True)
class ContractBought:
    contract_id: Any
    buy_price: float
    payout: float = 0.0


@dataclass(frozen=True)
class ContractUpdate:
    """Open-contract tick for a position that has not settled yet."""
    contract_id: Any
    profit: float = 0.0


Decoded = Union[InboundEvent, Authorized, ProposalReady, ContractBought, ContractUpdate]


# ───── inbound ──────────────────────────────────────────────────────
def _body(msg: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    body = msg.get(key)
    if not isinstance(body, Mapping):
        raise ValidationError(f"'{key}' reply without a '{key}' object", msg)
    return body


def _authorize(msg):
    return Authorized(login_id=str(_body(msg, "authorize").get("loginid", "")))

def _balance(msg):
    return AuthoritativeBalanceReport(balance=_body(msg, "balance").get("balance"))

def _candles(msg):
    rows = msg.get("candles")
    if not isinstance(rows, list):
        raise ValidationError("'candles' reply without a candle list", msg)
    return HistoricalBars(records=rows)

def _ohlc(msg):
    return IncrementalBarUpdate(record=_body(msg, "ohlc"))

def _proposal(msg):
    p = _body(msg, "proposal")
    if not p.get("id"):
        raise ValidationError("proposal without id", msg)
    return ProposalReady(proposal_id=str(p["id"]),
                         ask_price=as_number(p.get("ask_price"), "ask_price"),
                         payout=as_number(p.get("payout", 0), "payout"))

def _buy(msg):
    b = _body(msg, "buy")
    return ContractBought(contract_id=b.get("contract_id"),
                          buy_price=as_number(b.get("buy_price"), "buy_price"),
                          payout=as_number(b.get("payout", 0), "payout"))

def _open_contract(msg):
    c = _body(msg, "proposal_open_contract")
    if not c.get("is_sold"):
        return ContractUpdate(contract_id=c.get("contract_id"),
                              profit=as_number(c.get("profit", 0), "profit"))
    # sell_price is what came back: full payout on a win, 0 on a loss
    return TradeConfirmation(stake=as_number(c.get("buy_price"), "buy_price"),
                             payout=as_number(c.get("sell_price", 0), "sell_price"),
                             contract_id=c.get("contract_id"))


DECODERS: Dict[str, Callable[[Mapping[str, Any]], Decoded]] = {
    "authorize": _authorize,
    "balance": _balance,
    "candles": _candles,
    "ohlc": _ohlc,
    "proposal": _proposal,
    "buy": _buy,
    "proposal_open_contract": _open_contract,
}


def decode(msg: Mapping[str, Any]) -> Optional[Decoded]:
    """
    Raw Deriv reply → event.  Unknown message types return None
    (pings, subscription acks…).
    """
    err = msg.get("error")
    if err:
        if isinstance(err, Mapping):
            raise ProtocolError(str(err.get("message", "unknown API error")),
                                code=str(err.get("code", "")),
                                msg_type=str(msg.get("msg_type", "")),
                                req_id=msg.get("req_id"))
        raise ProtocolError(str(err), msg_type=str(msg.get("msg_type", "")),
                            req_id=msg.get("req_id"))

    decoder = DECODERS.get(str(msg.get("msg_type", "")))
    return decoder(msg) if decoder else None


# ───── outbound ─────────────────────────────────────────────────────
def authorize_request(token: str) -> Dict[str, Any]:
    return {"authorize": token}

def balance_request() -> Dict[str, Any]:
    return {"balance": 1}

def subscribe_candles_request(cfg: Settings) -> Dict[str, Any]:
    return {
        "ticks_history": cfg.symbol,
        "adjust_start_time": 1,
        "count": cfg.history_count,
        "end": "latest",
        "start": 1,
        "style": "candles",
        "granularity": cfg.granularity,
        "subscribe": 1,
    }

def proposal_request(req: TradeRequest) -> Dict[str, Any]:
    return {
        "proposal": 1,
        "symbol": req.symbol,
        "contract_type": req.direction.value,
        "amount": req.stake,
        "basis": req.basis,
        "currency": req.currency,
        "duration": req.duration,
        "duration_unit": req.duration_unit,
    }

def buy_request(proposal_id: str, price: float) -> Dict[str, Any]:
    return {"buy": proposal_id, "price": price}

def open_contract_request(contract_id: Any) -> Dict[str, Any]:
    return {"proposal_open_contract": 1, "contract_id": contract_id, "subscribe": 1}
