"""
trade_manager
=============

Book-keeping and supervision:

• `ledger.py` keeps the real (venue) balance next to a paper balance
  and its peak; the paper side drives the drawdown guard.
• `manager.py` watches the executor heartbeat, exposes its status over
  a small REST API for ops, and flips the global pause flag.
"""
