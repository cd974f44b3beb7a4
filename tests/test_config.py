"""
Settings.from_env(): required credentials, defaults, overrides.
"""
from pathlib import Path

import pytest

from shared.config import Settings, env
from shared.errors import ConfigError


@pytest.fixture
def creds(monkeypatch):
    monkeypatch.setenv("DERIV_API_TOKEN", "tok")
    monkeypatch.setenv("DERIV_APP_ID", "1089")
    for key in ("SYMBOL", "STAKE", "TRADE_COOLDOWN", "MAX_BARS", "DRY_RUN",
                "REDIS_URL", "DRAWDOWN_THRESHOLD", "GRANULARITY", "CONTRACT_DURATION",
                "DURATION_UNIT", "PAPER_BALANCE", "DERIV_WS_URL"):
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize("missing", ["DERIV_API_TOKEN", "DERIV_APP_ID"])
def test_missing_credentials_are_fatal(creds, monkeypatch, missing):
    monkeypatch.delenv(missing)
    with pytest.raises(ConfigError, match=missing):
        Settings.from_env()


def test_blank_credential_is_missing(creds, monkeypatch):
    monkeypatch.setenv("DERIV_API_TOKEN", "   ")
    with pytest.raises(ConfigError):
        Settings.from_env()


def test_defaults(creds):
    s = Settings.from_env()
    assert s.symbol == "R_75"
    assert s.granularity == 60
    assert s.stake == 1.0
    assert s.cooldown_sec == 300
    assert s.drawdown_threshold == 0.10
    assert s.max_bars == 200
    assert s.duration == 5 and s.duration_unit == "t"
    assert s.paper_balance == 100.0
    assert s.dry_run is False
    assert s.redis_url is None
    assert s.endpoint == "wss://ws.derivws.com/websockets/v3?app_id=1089"


def test_overrides(creds, monkeypatch):
    monkeypatch.setenv("SYMBOL", "R_100")
    monkeypatch.setenv("TRADE_COOLDOWN", "120")
    monkeypatch.setenv("DRY_RUN", "yes")
    s = Settings.from_env()
    assert s.symbol == "R_100"
    assert s.cooldown_sec == 120.0
    assert s.dry_run is True


def test_unparsable_number_is_config_error(creds, monkeypatch):
    monkeypatch.setenv("MAX_BARS", "lots")
    with pytest.raises(ConfigError, match="MAX_BARS"):
        Settings.from_env()


def test_out_of_range_threshold(creds, monkeypatch):
    monkeypatch.setenv("DRAWDOWN_THRESHOLD", "1.5")
    with pytest.raises(ConfigError):
        Settings.from_env()


def test_env_helper_casts(monkeypatch):
    monkeypatch.setenv("SOME_INT", "7")
    monkeypatch.setenv("SOME_FLAG", "true")
    assert env("SOME_INT", cast=int) == 7
    assert env("SOME_FLAG", cast=bool) is True
    assert env("NOT_SET_ANYWHERE", 3) == 3


def test_env_helper_bad_cast_gives_default(monkeypatch):
    monkeypatch.setenv("SOME_INT", "seven")
    assert env("SOME_INT", 4, cast=int) == 4


@pytest.mark.parametrize("path", ["data_loader/aggregator.py",
                                  "decision_service/decision_service.py",
                                  "decision_service/engine.py"])
def test_library_modules_are_not_scripts(path):
    root = Path(__file__).resolve().parent.parent
    assert not (root / path).read_text().startswith("#!")
