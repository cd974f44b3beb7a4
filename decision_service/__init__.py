"""
decision_service
================

Turns closed candles into trade requests for one symbol.

Data-flow
---------
1. `engine.handle_event()` receives a decoded inbound event
   (balance report, historical batch, ohlc update, settled contract).

2. On every candle close (and after a historical batch) the risk gate in
   `decision_service.py` checks, in order: pause flag, cooldown,
   simulated balance floor, real balance floor, simulated drawdown.

3. If all pass, `rules.detect()` looks at the two newest closed candles:
     • bearish → engulfing bullish   = CALL
     • bullish → engulfing bearish   = PUT
   and a `TradeRequest` is returned to the executor.

Modules
-------
rules.py             – pure engulfing detector
events.py            – inbound events / outbound requests
decision_service.py  – ordered guards + scheduler state
engine.py            – TraderSession + handle_event()
"""
