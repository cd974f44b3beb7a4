"""
Transport: req_id stamping, dropped sends, supervised reconnect loop.
"""
import json
from types import SimpleNamespace

from trade_executor.deriv_client import Backoff, DerivClient


class FakeApp:
    """Stands in for websocket.WebSocketApp; `script` runs inside run_forever."""

    instances = []

    def __init__(self, url, on_open, on_message, on_error, on_close, script=None):
        self.url = url
        self.on_open, self.on_message = on_open, on_message
        self.on_error, self.on_close = on_error, on_close
        self.sock = SimpleNamespace(connected=False)
        self.frames = []
        self.script = script
        FakeApp.instances.append(self)

    def send(self, data):
        self.frames.append(json.loads(data))

    def run_forever(self, **kwargs):
        self.sock.connected = True
        self.on_open(self)
        if self.script:
            self.script(self)
        self.sock.connected = False
        self.on_close(self, 1000, "bye")

    def close(self):
        self.sock.connected = False


def _factory(script):
    def make(url, **callbacks):
        return FakeApp(url, script=script, **callbacks)
    return make


def test_send_while_closed_is_dropped():
    c = DerivClient("wss://x", on_message=lambda m: None)
    assert c.send({"balance": 1}) is None
    assert c.pending == {}


def test_backoff_grows_caps_and_resets():
    b = Backoff(base=1, factor=2, cap=5, jitter=0)
    assert [b.next_delay() for _ in range(5)] == [1, 2, 4, 5, 5]
    b.reset()
    assert b.next_delay() == 1


def test_backoff_jitter_bounded():
    b = Backoff(base=10, jitter=0.2)
    d = b.next_delay()
    assert 10 <= d <= 12


def test_session_roundtrip_and_reconnect():
    FakeApp.instances = []
    received = []
    opened = []
    runs = []

    def script(app):
        runs.append(app)
        # a reply for the request sent from on_open
        app.on_message(app, json.dumps({"msg_type": "authorize", "req_id": 1,
                                        "authorize": {"loginid": "CR1"}}))
        app.on_message(app, "{not json")
        if len(runs) == 2:
            client.stop()

    def on_open():
        opened.append(True)
        client.send({"authorize": "tok"})

    client = DerivClient("wss://x?app_id=1", on_message=received.append, on_open=on_open,
                         backoff=Backoff(base=0, jitter=0), ws_factory=_factory(script))
    client.run_forever()

    assert len(FakeApp.instances) == 2
    assert client.reconnects == 1
    assert len(opened) == 2
    # req_id keeps counting across connections
    assert FakeApp.instances[0].frames == [{"authorize": "tok", "req_id": 1}]
    assert FakeApp.instances[1].frames == [{"authorize": "tok", "req_id": 2}]
    assert [m["msg_type"] for m in received] == ["authorize", "authorize"]
    assert client.stopped


def test_pending_tracks_one_shot_requests_only():
    FakeApp.instances = []

    def script(app):
        client.send({"ticks_history": "R_75", "subscribe": 1})
        client.send({"balance": 1})
        client.send({"proposal_open_contract": 1, "contract_id": 7, "subscribe": 1})
        assert client.pending == {2: "balance"}
        app.on_message(app, json.dumps({"msg_type": "candles", "req_id": 1,
                                        "subscription": {"id": "s"}, "candles": []}))
        app.on_message(app, json.dumps({"msg_type": "balance", "req_id": 2,
                                        "balance": {"balance": 1}}))
        assert client.pending == {}
        client.stop()

    client = DerivClient("wss://x", on_message=lambda m: None,
                         backoff=Backoff(base=0, jitter=0), ws_factory=_factory(script))
    client.run_forever()
    assert client.reconnects == 0
