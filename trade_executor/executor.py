#!/usr/bin/env python3
"""
executor.py – Deriv socket ↔ trading session
--------------------------------------------
* open            →  authorize → balance → (balance ≥ stake) subscribe candles
* candles / ohlc  →  session core; a TradeRequest becomes a proposal
* proposal        →  buy it at the fixed stake (skipped in DRY_RUN)
* buy             →  follow the contract until it settles
* settled         →  ledger update, then refresh the real balance
* any error reply →  logged, the request's effect is abandoned
"""

from __future__ import annotations

import logging
import signal
import sys
import time
from typing import Any, Callable, Iterable, Mapping

from decision_service.engine import TraderSession, handle_event
from decision_service.events import (
    AuthoritativeBalanceReport,
    BalanceQueryRequest,
    HistoricalBars,
    IncrementalBarUpdate,
    Outbound,
    TradeConfirmation,
    TradeRequest,
)
from shared.config import Settings
from shared.constants import SERVICE_NAME
from shared.errors import ConfigError, ProtocolError, ValidationError
from shared.logging import get_logger, log_event
from shared import redis_client

from . import messages as M
from .deriv_client import DerivClient

log = get_logger("trade_executor")

CORE_EVENTS = (AuthoritativeBalanceReport, HistoricalBars,
               IncrementalBarUpdate, TradeConfirmation)


class Executor:
    def __init__(self, settings: Settings, client: Any = None,
                 clock: Callable[[], float] = time.time,
                 paused: Callable[[], bool] = redis_client.trading_paused) -> None:
        self.settings = settings
        self.session = TraderSession(settings)
        self.client = client or DerivClient(settings.endpoint,
                                            on_message=self.on_message,
                                            on_open=self.on_open)
        self.clock = clock
        self.paused = paused
        self.subscribed = False

    # ───── socket lifecycle ────────────────────────────────────────
    def on_open(self) -> None:
        # fresh connection: a new history batch will reseed the window
        self.subscribed = False
        self.client.send(M.authorize_request(self.settings.api_token))

    def on_message(self, msg: Mapping[str, Any]) -> None:
        try:
            event = M.decode(msg)
        except ProtocolError as exc:
            log_event(log, "protocol_error", f"API error: {exc}", logging.ERROR,
                      code=exc.code, msg_type=exc.msg_type, req_id=exc.req_id)
            return
        except ValidationError as exc:
            log_event(log, "validation_error", f"Invalid message: {exc}",
                      logging.WARNING, msg_type=msg.get("msg_type"))
            return

        if event is not None:
            self.dispatch(event)
        self._publish()

    # ───── routing ────────────────────────────────────────────────
    def dispatch(self, event: Any) -> None:
        if isinstance(event, M.Authorized):
            log.info("Authenticated successfully: %s", event.login_id)
            self.client.send(M.balance_request())
            return

        if isinstance(event, M.ProposalReady):
            self._buy(event)
            return

        if isinstance(event, M.ContractBought):
            log_event(log, "trade_placed", "Trade placed",
                      contract_id=event.contract_id, buy_price=event.buy_price,
                      payout=event.payout)
            self.client.send(M.open_contract_request(event.contract_id))
            return

        if isinstance(event, M.ContractUpdate):
            log.debug("contract %s open, profit %.2f", event.contract_id, event.profit)
            return

        if isinstance(event, CORE_EVENTS):
            paused = self.paused() if isinstance(event, (HistoricalBars, IncrementalBarUpdate)) else False
            out = handle_event(self.session, event, self.clock(), paused)
            self.send_all(out)
            if isinstance(event, AuthoritativeBalanceReport):
                self._maybe_subscribe()
            return

        log.warning("unhandled event %r", event)

    def send_all(self, requests: Iterable[Outbound]) -> None:
        for req in requests:
            if isinstance(req, TradeRequest):
                log_event(log, "proposal_requested", "Requesting trade proposal",
                          contract_type=req.direction.value, amount=req.stake)
                self.client.send(M.proposal_request(req))
            elif isinstance(req, BalanceQueryRequest):
                self.client.send(M.balance_request())

    # ───── helpers ────────────────────────────────────────────────
    def _maybe_subscribe(self) -> None:
        if self.subscribed:
            return
        bal = self.session.ledger.authoritative_balance
        if bal < self.settings.stake:
            log.error("Insufficient actual balance for trading: %s", bal)
            return
        self.subscribed = True
        log.info("Subscribing to %ds candles for %s",
                 self.settings.granularity, self.settings.symbol)
        self.client.send(M.subscribe_candles_request(self.settings))

    def _buy(self, proposal: M.ProposalReady) -> None:
        if self.settings.dry_run:
            log.warning("DRY-RUN – not buying proposal %s (ask %.2f)",
                        proposal.proposal_id, proposal.ask_price)
            return
        log_event(log, "trade_buy", "Placing trade",
                  proposal_id=proposal.proposal_id, price=self.settings.stake)
        self.client.send(M.buy_request(proposal.proposal_id, self.settings.stake))

    def _publish(self) -> None:
        redis_client.heartbeat(SERVICE_NAME)
        redis_client.publish_status(self.settings.symbol, self.session.snapshot())


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        log.error("%s", exc)
        sys.exit(1)

    redis_client.configure(settings.redis_url)
    redis_client.connect()
    ex = Executor(settings)

    def _shutdown(signum, frame) -> None:            # noqa: ARG001
        log.info("signal %s – shutting down", signum)
        ex.client.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    log.info("trade_executor up – %s, %ds bars, stake %.2f %s%s",
             settings.symbol, settings.granularity, settings.stake,
             settings.currency, " (DRY-RUN)" if settings.dry_run else "")
    ex.client.run_forever()


if __name__ == "__main__":
    main()
