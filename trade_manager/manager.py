#!/usr/bin/env python3
"""
manager.py – ops supervisor / kill-switch
-----------------------------------------
Environment
-----------
REDIS_URL        redis://host:port/db        (required for this service)
SYMBOL           traded symbol               (default: R_75)
CHECK_INTERVAL   seconds between checks      (default: 30)
HEARTBEAT_MAX    seconds before "down"       (default: 90)
API_PORT         expose REST API (0=off)     (default: 8000)
"""

from __future__ import annotations

import json
import os
import time
from typing import Any, Dict, Optional

import redis
from fastapi import FastAPI, HTTPException
import uvicorn

from shared.constants import (
    DEFAULT_SYMBOL, KEY_HEARTBEAT, KEY_PAUSE_FLAG, KEY_STATUS, SERVICE_NAME,
)
from shared.logging import get_logger
from shared.redis_client import rds

# ───── CONFIG ──────────────────────────────────────────────────────────
SYMBOL        = os.getenv("SYMBOL", DEFAULT_SYMBOL)
CHECK_INT     = int(os.getenv("CHECK_INTERVAL", 30))
HEARTBEAT_MAX = float(os.getenv("HEARTBEAT_MAX", 90))
API_PORT      = int(os.getenv("API_PORT", 8000))

log = get_logger("trade_manager")

# ───── SMALL HELPERS ──────────────────────────────────────────────────
def heartbeat_age(now: Optional[float] = None) -> Optional[float]:
    """Seconds since the executor last pinged, None if it never did."""
    last = rds.get(KEY_HEARTBEAT.format(SERVICE_NAME))
    if last is None:
        return None
    return (now if now is not None else time.time()) - float(last)


def executor_alive(now: Optional[float] = None) -> bool:
    age = heartbeat_age(now)
    return age is not None and age <= HEARTBEAT_MAX


def is_paused() -> bool:
    return rds.get(KEY_PAUSE_FLAG) == "1"


def load_status() -> Dict[str, Any]:
    raw = rds.get(KEY_STATUS.format(SYMBOL))
    return json.loads(raw) if raw else {}


def set_pause(flag: bool, reason: str = "") -> None:
    rds.set(KEY_PAUSE_FLAG, "1" if flag else "0")
    if flag:
        log.error("TRADING PAUSED – %s", reason)
    else:
        log.info("trading resumed manually")


# ───── SUPERVISOR LOOP ────────────────────────────────────────────────
def supervisor_loop() -> None:
    log.info("trade_manager running (interval %d s)", CHECK_INT)
    while True:
        try:
            if not executor_alive():
                log.warning("Missing heartbeat: %s", SERVICE_NAME)
            else:
                st = load_status()
                log.info("%s sim=%.2f peak=%.2f dd=%.1f%% paused=%s",
                         SYMBOL,
                         float(st.get("simulated_balance", 0.0)),
                         float(st.get("peak_simulated_balance", 0.0)),
                         100 * float(st.get("drawdown", 0.0)),
                         is_paused())
        except redis.RedisError as exc:
            log.error("supervisor error – %s", exc)

        time.sleep(CHECK_INT)


# ───── REST API ───────────────────────────────────────────────────────
app = FastAPI(title="Trade Manager", docs_url=None, redoc_url=None)


@app.get("/status")
def status():
    try:
        return {
            "symbol": SYMBOL,
            "paused": is_paused(),
            "executor_alive": executor_alive(),
            "heartbeat_age": heartbeat_age(),
            "session": load_status(),
        }
    except redis.RedisError as exc:
        raise HTTPException(status_code=503, detail=f"redis unavailable: {exc}")


@app.post("/pause")
def pause():
    set_pause(True, "manual REST call")
    return {"paused": True}


@app.post("/resume")
def resume():
    set_pause(False)
    return {"paused": False}


def main() -> None:
    if not rds.enabled:
        log.error("REDIS_URL is not set – trade_manager has nothing to watch")
        raise SystemExit(1)
    if API_PORT:
        # Run REST API + supervisor in one process using uvicorn’s loop
        import threading

        th = threading.Thread(target=supervisor_loop, daemon=True)
        th.start()
        uvicorn.run(app, host="0.0.0.0", port=API_PORT, log_level="warning")
    else:
        supervisor_loop()


if __name__ == "__main__":
    main()
