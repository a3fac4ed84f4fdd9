import json

from erp_console import ws_server
from erp_console.updates.channel import UiCommand, UiRequest


def test_dispatch_hands_valid_command_to_handler():
    received = []
    assert ws_server.dispatch(json.dumps({"command": "start-download"}), received.append)
    assert received == [UiRequest(UiCommand.START_DOWNLOAD)]


def test_dispatch_accepts_bytes_frames():
    received = []
    assert ws_server.dispatch(b'{"command": "get-app-version"}', received.append)
    assert received[0].command is UiCommand.GET_APP_VERSION


def test_dispatch_drops_malformed_frames():
    received = []
    assert not ws_server.dispatch("{not json", received.append)
    assert not ws_server.dispatch(json.dumps({"command": "format-disk"}), received.append)
    assert not ws_server.dispatch(json.dumps(["start-download"]), received.append)
    assert not ws_server.dispatch(json.dumps({"event": "update-available"}), received.append)
    assert received == []


def test_broadcast_without_clients_is_a_no_op():
    ws_server.broadcast({"event": "update-checking"})


def test_broadcast_sends_to_every_client_and_drops_closed_ones(monkeypatch):
    sent = []

    class Client:
        def send(self, payload):
            sent.append(json.loads(payload))

    class ClosedClient:
        def send(self, payload):
            raise ws_server.ConnectionClosed()

    alive, closed = Client(), ClosedClient()
    monkeypatch.setattr(ws_server, "_clients", {alive, closed})

    ws_server.broadcast({"event": "update-progress", "percent": 40.0})

    assert sent == [{"event": "update-progress", "percent": 40.0}]
    assert ws_server._clients == {alive}
