"""
constants.py – single source of hard-coded names and defaults
"""

# Trading defaults (every one can be overridden through the env, see config.py)
DEFAULT_SYMBOL       = "R_75"         # Volatility 75 index
GRANULARITY_SEC      = 60             # 1-minute bars
STAKE                = 1.0            # fixed stake, also the balance floor
CURRENCY             = "USD"
CONTRACT_DURATION    = 5
DURATION_UNIT        = "t"            # ticks
TRADE_COOLDOWN_SEC   = 300            # 5 minutes between trade requests
DRAWDOWN_THRESHOLD   = 0.10           # block entries 10 % below simulated peak
MAX_BARS             = 200            # closed bars kept in memory
HISTORY_COUNT        = 100            # bars asked for at subscription time
PAPER_BALANCE        = 100.0          # simulated starting balance

DERIV_WS_URL = "wss://ws.derivws.com/websockets/v3"

# Redis keys / templates
KEY_STATUS        = "live:status:{}"          # JSON snapshot per symbol
KEY_HEARTBEAT     = "heartbeat:{}"            # service-specific
KEY_PAUSE_FLAG    = "flags:trading_paused"

SERVICE_NAME = "trade_executor"
