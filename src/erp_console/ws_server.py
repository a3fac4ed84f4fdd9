"""
WebSocket integration for the update channel.

Uses flask-sock to add WebSocket support to the Dash/Flask server on the same port.
No separate server needed. Notifications from the update host are broadcast to
every connected browser; JSON commands received from a browser are dispatched
to the host.

Usage:
    from erp_console.ws_server import init_websocket, broadcast

    # Initialize with Flask app and the command handler (call once during app setup)
    init_websocket(app.server, host.handle)

    # Broadcast notifications (call from the update host)
    broadcast(notification.to_dict())
"""

import json
from collections.abc import Set
from threading import Lock
from typing import Callable

from flask import Flask
from flask_sock import Sock
from simple_websocket import ConnectionClosed
from simple_websocket import Server as WebSocketServer

from erp_console.lib import logs
from erp_console.updates.channel import UiRequest

LOG = logs.logger(__file__)

UPDATES_ROUTE = "/ws/updates"

# WebSocket state
_sock: Sock | None = None
_clients: Set[WebSocketServer] = set()
_clients_lock = Lock()


def init_websocket(flask_app: Flask, on_command: Callable[[UiRequest], None]) -> None:
    """
    Initialize WebSocket support on the Flask server.

    Args:
        flask_app: The Flask app instance (from Dash's app.server).
        on_command: Receives every valid command sent by a browser.
    """
    global _sock
    _sock = Sock(flask_app)

    @_sock.route(UPDATES_ROUTE)
    def updates_ws(ws: WebSocketServer) -> None:
        """Handle WebSocket connections for the update channel."""
        with _clients_lock:
            _clients.add(ws)
        LOG.info("WebSocket client connected")

        try:
            while True:
                # Receive is blocking; returns None on timeout, raises on disconnect
                try:
                    raw = ws.receive(timeout=30)
                except ConnectionClosed:
                    break
                if raw is not None:
                    dispatch(raw, on_command)
        finally:
            with _clients_lock:
                _clients.discard(ws)
            LOG.info("WebSocket client disconnected")


def dispatch(raw: str | bytes, on_command: Callable[[UiRequest], None]) -> bool:
    """
    Decode one received frame and hand the command to ``on_command``.

    Returns:
        True if the frame held a valid command. Malformed frames are logged
        and dropped so one bad message does not close the connection.
    """
    try:
        request = UiRequest.from_dict(json.loads(raw))
    except ValueError as exc:
        LOG.warning("Dropping malformed update command %r: %s", raw, exc)
        return False
    on_command(request)
    return True


def broadcast(message: dict) -> None:
    """
    Broadcast a notification to all connected WebSocket clients.

    Thread-safe. Can be called from any thread.

    Args:
        message: Serialized HostNotification dictionary.
    """
    with _clients_lock:
        if not _clients:
            return

        payload = json.dumps(message)
        disconnected = []

        for client in _clients:
            try:
                client.send(payload)
            except ConnectionClosed:
                disconnected.append(client)

        # Clean up disconnected clients
        for client in disconnected:
            _clients.discard(client)
