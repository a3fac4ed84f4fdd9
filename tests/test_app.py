import json

from erp_console.app import read_notification, websocket_url
from erp_console.updates.channel import HostEvent


def test_websocket_url_follows_page_scheme_and_host():
    assert websocket_url("http://localhost:8050/inventory", "/ws/updates") == "ws://localhost:8050/ws/updates"
    assert websocket_url("https://erp.example.com/", "/ws/updates") == "wss://erp.example.com/ws/updates"
    assert websocket_url(None, "/ws/updates") == ""
    assert websocket_url("/relative", "/ws/updates") == ""


def test_read_notification():
    message = {"data": json.dumps({"event": "update-progress", "percent": "12.5"})}
    notification = read_notification(message)
    assert notification.event is HostEvent.UPDATE_PROGRESS
    assert notification.percent == 12.5


def test_read_notification_ignores_empty_and_malformed_messages():
    assert read_notification(None) is None
    assert read_notification({"data": ""}) is None
    assert read_notification({"data": "not json"}) is None
    assert read_notification({"data": json.dumps({"event": "reboot"})}) is None
