"""
config.py – centralised env-var handling
=======================================

• Loads the first `.env` file it finds (cwd or /app) exactly **once**.
• `env(key, default=None, cast=None)` helper for one-off lookups
  with automatic type-casting (int, float, bool).
• `Settings.from_env()` collects everything the trader needs into one
  frozen object; missing credentials raise `ConfigError`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from . import constants as C
from .errors import ConfigError

# ───── locate & load .env (first one wins) ────────────────────────────
for candidate in (Path.cwd() / ".env", Path("/app/.env")):
    if candidate.is_file():
        load_dotenv(dotenv_path=candidate, override=False)
        break

# ───── lookups ────────────────────────────────────────────────────────
def env(key: str, default: Any = None, cast: Optional[type] = None) -> Any:
    """`os.getenv` with optional cast; a failed cast yields `default`."""
    val = os.getenv(key, default)
    if cast is not None and val is not None:
        try:
            if cast is bool:
                return str(val).lower() in ("1", "true", "yes", "y")
            return cast(val)
        except (ValueError, TypeError):
            return default
    return val


def required(key: str) -> str:
    """Return a non-empty env var or raise ConfigError."""
    val = os.getenv(key, "").strip()
    if not val:
        raise ConfigError(f"Missing required environment variable: {key}")
    return val


def _strict(key: str, default: Any, cast: type) -> Any:
    # unlike env(), a present-but-garbage value is an error, not the default
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key}={raw!r} is not a valid {cast.__name__}") from None


# ───── Settings ───────────────────────────────────────────────────────
@dataclass(frozen=True)
class Settings:
    api_token: str
    app_id: str
    ws_url: str = C.DERIV_WS_URL
    symbol: str = C.DEFAULT_SYMBOL
    granularity: int = C.GRANULARITY_SEC
    stake: float = C.STAKE
    currency: str = C.CURRENCY
    duration: int = C.CONTRACT_DURATION
    duration_unit: str = C.DURATION_UNIT
    cooldown_sec: float = C.TRADE_COOLDOWN_SEC
    drawdown_threshold: float = C.DRAWDOWN_THRESHOLD
    max_bars: int = C.MAX_BARS
    history_count: int = C.HISTORY_COUNT
    paper_balance: float = C.PAPER_BALANCE
    dry_run: bool = False
    redis_url: Optional[str] = None
    api_port: int = 8000

    def __post_init__(self) -> None:
        if self.max_bars < 2:
            raise ConfigError("MAX_BARS must be at least 2")
        if not 0.0 <= self.drawdown_threshold < 1.0:
            raise ConfigError("DRAWDOWN_THRESHOLD must be within [0, 1)")
        if self.stake <= 0:
            raise ConfigError("STAKE must be positive")

    @property
    def endpoint(self) -> str:
        return f"{self.ws_url}?app_id={self.app_id}"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_token=required("DERIV_API_TOKEN"),
            app_id=required("DERIV_APP_ID"),
            ws_url=env("DERIV_WS_URL", C.DERIV_WS_URL),
            symbol=env("SYMBOL", C.DEFAULT_SYMBOL),
            granularity=_strict("GRANULARITY", C.GRANULARITY_SEC, int),
            stake=_strict("STAKE", C.STAKE, float),
            currency=env("CURRENCY", C.CURRENCY),
            duration=_strict("CONTRACT_DURATION", C.CONTRACT_DURATION, int),
            duration_unit=env("DURATION_UNIT", C.DURATION_UNIT),
            cooldown_sec=_strict("TRADE_COOLDOWN", C.TRADE_COOLDOWN_SEC, float),
            drawdown_threshold=_strict("DRAWDOWN_THRESHOLD", C.DRAWDOWN_THRESHOLD, float),
            max_bars=_strict("MAX_BARS", C.MAX_BARS, int),
            history_count=_strict("HISTORY_COUNT", C.HISTORY_COUNT, int),
            paper_balance=_strict("PAPER_BALANCE", C.PAPER_BALANCE, float),
            dry_run=env("DRY_RUN", "0", bool),
            redis_url=env("REDIS_URL") or None,
            api_port=_strict("API_PORT", 8000, int),
        )


__all__ = ["env", "required", "Settings"]
