"""
ledger.py – real vs. paper balance book
---------------------------------------
* `authoritative_balance` – whatever Deriv last reported; read-only here.
* `simulated_balance`     – paper account started at PAPER_BALANCE and
  moved by every settled contract.  It never touches real money but it
  drives the drawdown guard.
* `peak_simulated_balance` – high-water mark of the paper account.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from shared.constants import PAPER_BALANCE
from shared.errors import ValidationError
from shared.logging import get_logger, log_event
from shared.utils import as_number

log = get_logger("trade_manager.ledger")


@dataclass
class Ledger:
    simulated_balance: float = PAPER_BALANCE
    authoritative_balance: float = 0.0
    peak_simulated_balance: Optional[float] = None
    trades: int = 0
    wins: int = 0

    def __post_init__(self) -> None:
        if self.peak_simulated_balance is None:
            self.peak_simulated_balance = self.simulated_balance

    @property
    def drawdown(self) -> float:
        """Fractional fall of the paper balance from its peak."""
        if self.peak_simulated_balance <= 0:
            return 0.0
        return 1.0 - self.simulated_balance / self.peak_simulated_balance

    def record_authoritative_balance(self, value: Any) -> float:
        self.authoritative_balance = as_number(value, "balance")
        log_event(log, "balance_update", "Actual balance updated",
                  authoritative=self.authoritative_balance,
                  simulated=self.simulated_balance)
        return self.authoritative_balance

    def record_trade_outcome(self, stake: float, payout: Optional[float]) -> float:
        """
        payout > 0  → simulated += payout - stake   (net profit)
        otherwise   → simulated -= stake            (whole stake lost)
        """
        stake = as_number(stake, "stake")
        payout = 0.0 if payout is None else as_number(payout, "payout")
        if stake < 0:
            raise ValidationError(f"negative stake {stake}")

        if payout > 0:
            self.simulated_balance += payout - stake
            self.wins += 1
        else:
            self.simulated_balance -= stake
        self.trades += 1

        if self.simulated_balance > self.peak_simulated_balance:
            self.peak_simulated_balance = self.simulated_balance

        log_event(log, "ledger_update", "Trade outcome - simulated balance updated",
                  stake=stake, payout=payout,
                  simulated=self.simulated_balance,
                  peak=self.peak_simulated_balance,
                  drawdown=round(self.drawdown, 6))
        return self.simulated_balance

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authoritative_balance": self.authoritative_balance,
            "simulated_balance": self.simulated_balance,
            "peak_simulated_balance": self.peak_simulated_balance,
            "drawdown": self.drawdown,
            "trades": self.trades,
            "wins": self.wins,
        }
