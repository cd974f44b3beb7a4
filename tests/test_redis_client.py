"""
Optional Redis helpers: no-ops when disabled, safe defaults on failure.
"""
import json
import time
from unittest.mock import MagicMock

import pytest
import redis

from shared import redis_client
from trade_executor.executor import Executor

from conftest import ohlc


def _enable(client):
    redis_client.configure("redis://test:6379/0")
    redis_client.rds._client = client


def test_disabled_helpers_do_nothing():
    assert not redis_client.rds.enabled
    redis_client.heartbeat("trade_executor")
    redis_client.publish_status("R_75", {"bars": 1})
    assert redis_client.trading_paused() is False


def test_heartbeat_and_status_written():
    client = MagicMock()
    _enable(client)
    redis_client.heartbeat("trade_executor")
    redis_client.publish_status("R_75", {"bars": 3})
    keys = [c.args[0] for c in client.set.call_args_list]
    assert keys == ["heartbeat:trade_executor", "live:status:R_75"]
    assert json.loads(client.set.call_args_list[1].args[1]) == {"bars": 3}


def test_pause_flag():
    client = MagicMock()
    client.get.return_value = "1"
    _enable(client)
    assert redis_client.trading_paused() is True
    client.get.return_value = "0"
    assert redis_client.trading_paused() is False


def test_redis_failure_means_paused():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.set.side_effect = redis.ConnectionError("down")
    _enable(client)
    assert redis_client.trading_paused() is True
    redis_client.heartbeat("trade_executor")        # logged, not raised


# ───── unreachable server ─────────────────────────────────────────────
@pytest.fixture
def refusing(monkeypatch):
    """Every connect attempt is refused; sleeps are recorded, not slept."""
    attempts, naps = [], []

    def from_url(url, **kwargs):
        attempts.append(url)
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")
        return client

    monkeypatch.setattr(redis.Redis, "from_url", from_url)
    monkeypatch.setattr(redis_client.time, "sleep", naps.append)
    redis_client.configure("redis://127.0.0.1:1/0")
    return attempts, naps


def test_startup_connect_retries_then_gives_up(refusing):
    attempts, naps = refusing
    assert redis_client.connect() is False
    assert len(attempts) == redis_client.CONNECT_RETRIES
    assert len(naps) == redis_client.CONNECT_RETRIES - 1


def test_messages_do_not_block_while_redis_is_down(refusing, settings):
    attempts, naps = refusing
    redis_client.connect()
    attempts.clear()
    naps.clear()

    ex = Executor(settings, client=MagicMock(), clock=lambda: 1000.0)
    started = time.monotonic()
    ex.on_message({"msg_type": "ohlc", "ohlc": ohlc(960, 10, 11, 9, 10.5)})
    ex.on_message({"msg_type": "ohlc", "ohlc": ohlc(1020, 10.5, 12, 10, 11)})
    assert time.monotonic() - started < 1.0
    assert attempts == [] and naps == []
    assert redis_client.trading_paused() is True


def test_one_quiet_attempt_after_cooloff(refusing):
    attempts, naps = refusing
    redis_client.connect()
    attempts.clear()
    naps.clear()

    redis_client.rds._failed_at -= redis_client.COOLOFF_SEC + 1
    assert redis_client.trading_paused() is True
    assert len(attempts) == 1
    assert naps == []
    # failure restarts the cool-off
    assert redis_client.trading_paused() is True
    assert len(attempts) == 1
