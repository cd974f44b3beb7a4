"""
deriv_client.py – light wrapper around websocket-client
-------------------------------------------------------
Keeps the executor logic clean and testable.  Owns everything about the
socket: connect, `req_id` numbering, the supervised reconnect loop with
exponential backoff, and shutdown.  Received frames are JSON-decoded and
handed to `on_message`; nothing here knows what a candle is.
"""
from __future__ import annotations

import json
import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import websocket

from shared.errors import TransportError
from shared.logging import get_logger, log_event

log = get_logger("deriv_client")


@dataclass
class Backoff:
    """Exponential reconnect delay with jitter; `reset()` after a good open."""
    base: float = 1.0
    factor: float = 2.0
    cap: float = 30.0
    jitter: float = 0.2
    _current: float = 0.0

    def next_delay(self) -> float:
        self._current = self.base if self._current <= 0 else min(self.cap, self._current * self.factor)
        return self._current + random.uniform(0, self._current * self.jitter)

    def reset(self) -> None:
        self._current = 0.0


class DerivClient:
    """
    Thin OO façade so the executor doesn't depend directly on websocket-client.
    """

    def __init__(self, url: str,
                 on_message: Callable[[Dict[str, Any]], None],
                 on_open: Optional[Callable[[], None]] = None,
                 backoff: Optional[Backoff] = None,
                 ws_factory: Callable[..., Any] = websocket.WebSocketApp) -> None:
        self.url = url
        self._on_message = on_message
        self._on_open = on_open
        self.backoff = backoff or Backoff()
        self._ws_factory = ws_factory
        self._ws: Any = None
        self._stop = threading.Event()
        self._next_id = 1
        self.pending: Dict[int, str] = {}          # req_id → kind, awaiting a reply
        self.reconnects = 0

    # ───── connection state ───────────────────────────────────────
    @property
    def is_open(self) -> bool:
        sock = getattr(self._ws, "sock", None)
        return bool(sock is not None and getattr(sock, "connected", False))

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    # ───── sending ────────────────────────────────────────────────
    def send(self, request: Dict[str, Any]) -> Optional[int]:
        """
        Stamp `req_id`, send, and return the id.  When the socket is not
        open the request is dropped (logged) and None is returned.
        """
        try:
            return self._send(request)
        except TransportError as exc:
            log.error("%s", exc)
            return None

    def _send(self, request: Dict[str, Any]) -> int:
        if not self.is_open:
            raise TransportError(f"WebSocket not open – dropping {_kind(request)}")
        req_id = self._next_id
        self._next_id += 1
        payload = dict(request, req_id=req_id)
        try:
            self._ws.send(json.dumps(payload))
        except websocket.WebSocketException as exc:
            raise TransportError(f"send failed – {exc}") from exc
        kind = _kind(request)
        # streams answer under the same req_id for good; only one-shots wait
        if not request.get("subscribe"):
            self.pending[req_id] = kind
        log_event(log, "request_sent", "Sending request", logging.DEBUG,
                  req_id=req_id, kind=kind)
        return req_id

    # ───── websocket-client callbacks ─────────────────────────────
    def _handle_open(self, ws) -> None:
        log.info("Connected to Deriv WebSocket")
        self.backoff.reset()
        self.pending.clear()
        if self._on_open:
            self._on_open()

    def _handle_message(self, ws, raw: str) -> None:
        try:
            msg = json.loads(raw)
        except (TypeError, ValueError) as exc:
            log.error("Message parse error: %s", exc)
            return
        if not isinstance(msg, dict):
            log.error("Unexpected frame: %r", msg)
            return
        if msg.get("req_id") is not None:
            self.pending.pop(msg["req_id"], None)
        self._on_message(msg)

    def _handle_error(self, ws, err) -> None:
        log.error("WebSocket error: %s", err)

    def _handle_close(self, ws, code=None, reason=None) -> None:
        log.warning("WebSocket closed (%s %s)", code, reason or "")

    # ───── supervised loop ────────────────────────────────────────
    def run_forever(self) -> None:
        """Connect, serve until closed, back off, repeat until `stop()`."""
        while not self._stop.is_set():
            try:
                self._ws = self._ws_factory(
                    self.url,
                    on_open=self._handle_open,
                    on_message=self._handle_message,
                    on_error=self._handle_error,
                    on_close=self._handle_close,
                )
                self._ws.run_forever(ping_interval=30, ping_timeout=10)
            except websocket.WebSocketException as exc:
                log.error("WebSocket exception: %s", exc)

            if self._stop.is_set():
                break
            self.reconnects += 1
            delay = self.backoff.next_delay()
            log.warning("Reconnecting in %.1f s (attempt %d)", delay, self.reconnects)
            self._stop.wait(delay)
        log.info("Deriv client stopped")

    def stop(self) -> None:
        self._stop.set()
        if self._ws is not None:
            self._ws.close()


def _kind(request: Dict[str, Any]) -> str:
    for key in ("authorize", "balance", "ticks_history", "proposal_open_contract",
                "proposal", "buy"):
        if key in request:
            return key
    return next(iter(request), "?")
