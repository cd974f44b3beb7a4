"""
trade_executor
==============

Bridges the trading session with a Deriv account over its WebSocket API.

* `deriv_client.py` owns the socket: `req_id`s, supervised reconnect with
  backoff, shutdown.
* `messages.py` decodes every reply by `msg_type` into typed events and
  builds the outbound payloads.
* `executor.py` is the process entry point: authorize → balance →
  subscribe candles, feeds the session core, buys the proposals it asks
  for and follows each contract until it settles.

The engine is stateless at start-up – every (re)connect starts from a
fresh historical batch.
"""
