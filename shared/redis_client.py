"""
redis_client.py – optional singleton Redis connection + helpers
===============================================================

• Only active when `REDIS_URL` is set; without it every helper is a
  no-op and the executor runs standalone.
• 100 % lazy: first call triggers connect; a few retries, then the
  caller gets the connection error (helpers below swallow and log it).
• After a failed connect every call fails fast until `REDIS_COOLOFF`
  seconds have passed; the next try is a single attempt, no sleep.
• `heartbeat(service)` + `publish_status(symbol, snapshot)` after every
  handled message; trade_manager reads both.
• `trading_paused()` lets the executor honour the ops kill-switch.
"""

from __future__ import annotations

import json
import os
import time
from typing import Any, Callable, Mapping, Optional

import redis

from .constants import KEY_HEARTBEAT, KEY_PAUSE_FLAG, KEY_STATUS
from .logging import get_logger

# ───── CONFIG ──────────────────────────────────────────────────────────
REDIS_URL = os.getenv("REDIS_URL", "")
CONNECT_RETRIES = int(os.getenv("REDIS_CONNECT_RETRIES", "3"))
COOLOFF_SEC     = float(os.getenv("REDIS_COOLOFF", "30"))
log = get_logger("shared.redis")

# ───── LAZY SINGLETON ─────────────────────────────────────────────────
class _LazyRedis:
    """Proxy object that connects on first attribute access (auto-retry)."""
    _client: Optional[redis.Redis] = None
    _failed_at: Optional[float] = None            # monotonic time of last failed connect

    def __init__(self, url: str = REDIS_URL) -> None:
        self.url = url

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def __getattr__(self, name: str) -> Callable[..., Any]:  # noqa: D401
        if self._client is None:
            self._connect()
        return getattr(self._client, name)  # type: ignore[arg-type]

    def _connect(self) -> None:
        if self._failed_at is not None:
            wait = COOLOFF_SEC - (time.monotonic() - self._failed_at)
            if wait > 0:
                raise redis.ConnectionError(
                    f"Redis at {self.url} down – next try in {wait:.0f} s")
        # full retries only for the very first connect
        retries = CONNECT_RETRIES if self._failed_at is None else 1
        for attempt in range(1, retries + 1):
            try:
                client = redis.Redis.from_url(
                    self.url,
                    decode_responses=True,
                    socket_timeout=2,
                )
                client.ping()
                self._client = client
                log.info("Connected to Redis at %s", self.url)
                return
            except redis.RedisError as exc:
                log.warning("Redis unavailable (%d/%d) – %s",
                            attempt, retries, exc)
                if attempt < retries:
                    time.sleep(2)
        self._failed_at = time.monotonic()
        raise redis.ConnectionError(f"cannot reach Redis at {self.url}")

# Exposed singleton used by all services
rds: _LazyRedis = _LazyRedis()

def configure(url: Optional[str]) -> None:
    """Point the singleton at another URL (settings override / tests)."""
    rds.url = url or ""
    rds._client = None
    rds._failed_at = None

def connect() -> bool:
    """Eager connect at start-up; retry sleeps happen before any hot path."""
    if not rds.enabled:
        return False
    try:
        rds.ping()
        return True
    except redis.RedisError as exc:
        log.error("Redis not reachable, trading stays paused – %s", exc)
        return False

# ───── HELPER FUNCTIONS ───────────────────────────────────────────────
def heartbeat(service: str) -> None:
    """Store current epoch-seconds in `heartbeat:<service>`."""
    if not rds.enabled:
        return
    try:
        rds.set(KEY_HEARTBEAT.format(service), time.time())
    except redis.RedisError as exc:
        log.error("heartbeat failed – %s", exc)

def publish_status(symbol: str, snapshot: Mapping[str, Any]) -> None:
    """Overwrite `live:status:<symbol>` with a JSON snapshot."""
    if not rds.enabled:
        return
    try:
        rds.set(KEY_STATUS.format(symbol), json.dumps(dict(snapshot), default=str))
    except redis.RedisError as exc:
        log.error("status publish failed – %s", exc)

def trading_paused() -> bool:
    """Return True if trade_manager set the global pause flag."""
    if not rds.enabled:
        return False
    try:
        return rds.get(KEY_PAUSE_FLAG) == "1"
    except redis.RedisError:
        # On Redis failure, default to *paused* for safety.
        return True
