"""
Ledger: paper balance arithmetic, peak tracking, venue balance.
"""
import random

import pytest

from shared.errors import ValidationError
from trade_manager.ledger import Ledger


def test_defaults():
    led = Ledger()
    assert led.simulated_balance == 100.0
    assert led.peak_simulated_balance == 100.0
    assert led.authoritative_balance == 0.0
    assert led.drawdown == 0.0


def test_three_losses():
    led = Ledger(simulated_balance=100.0)
    for _ in range(3):
        led.record_trade_outcome(stake=1, payout=0)
    assert led.simulated_balance == 97.0
    assert led.peak_simulated_balance == 100.0
    assert led.drawdown == pytest.approx(0.03)
    assert led.trades == 3 and led.wins == 0


def test_win_adds_net_profit_and_raises_peak(events):
    led = Ledger(simulated_balance=100.0)
    led.record_trade_outcome(stake=1, payout=1.95)
    assert led.simulated_balance == pytest.approx(100.95)
    assert led.peak_simulated_balance == pytest.approx(100.95)
    assert led.wins == 1
    ev = events.named("ledger_update")[-1]
    assert ev.data["payout"] == 1.95


def test_missing_payout_counts_as_loss():
    led = Ledger(simulated_balance=10.0)
    led.record_trade_outcome(stake=1, payout=None)
    assert led.simulated_balance == 9.0


def test_peak_is_monotone():
    rng = random.Random(3)
    led = Ledger(simulated_balance=100.0)
    last_peak = led.peak_simulated_balance
    for _ in range(500):
        payout = rng.choice([0, 0, 1.9, 2.5])
        led.record_trade_outcome(stake=1, payout=payout)
        assert led.peak_simulated_balance >= last_peak
        assert led.peak_simulated_balance >= led.simulated_balance
        last_peak = led.peak_simulated_balance


def test_authoritative_balance_overwrites():
    led = Ledger()
    led.record_authoritative_balance("1000.50")
    assert led.authoritative_balance == 1000.5
    led.record_authoritative_balance(3)
    assert led.authoritative_balance == 3.0


def test_authoritative_balance_must_be_numeric():
    led = Ledger()
    led.record_authoritative_balance(12)
    with pytest.raises(ValidationError):
        led.record_authoritative_balance("lots")
    assert led.authoritative_balance == 12.0


def test_snapshot():
    led = Ledger(simulated_balance=50.0)
    led.record_trade_outcome(1, 0)
    snap = led.to_dict()
    assert snap["simulated_balance"] == 49.0
    assert snap["peak_simulated_balance"] == 50.0
    assert snap["drawdown"] == pytest.approx(0.02)
