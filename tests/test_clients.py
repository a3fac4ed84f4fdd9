import pytest
import requests
from conftest import BASE_URL, FakeResponse

from erp_console.lib.clients import ApiError, unwrap_list


def test_get_decodes_json_relative_to_base(api, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/customers/")] = FakeResponse([{"id": "c1"}])
    assert api.get("/customers/") == [{"id": "c1"}]
    method, url, kwargs = fake_session.calls[0]
    assert (method, url) == ("GET", f"{BASE_URL}/customers/")
    assert kwargs["params"] is None


def test_session_sends_json_headers(api, fake_session):
    assert fake_session.headers["Content-Type"] == "application/json"
    assert fake_session.headers["User-Agent"].startswith("erp-console/")


def test_post_sends_body(api, fake_session):
    fake_session.routes[("POST", f"{BASE_URL}/billing/pay-due")] = FakeResponse({"ok": True})
    api.post("/billing/pay-due", json={"sale_id": "s1", "amount_paying": 10.0})
    assert fake_session.calls[0][2]["json"] == {"sale_id": "s1", "amount_paying": 10.0}


def test_error_status_carries_detail(api, fake_session):
    fake_session.routes[("POST", f"{BASE_URL}/billing/create")] = FakeResponse(
        {"detail": "Insufficient stock"}, status_code=400
    )
    with pytest.raises(ApiError) as info:
        api.post("/billing/create", json={})
    assert info.value.status == 400
    assert info.value.detail == "Insufficient stock"
    assert info.value.user_message == "Insufficient stock"


def test_error_without_body_uses_message(api, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/dashboard/metrics")] = FakeResponse(status_code=502)
    with pytest.raises(ApiError) as info:
        api.get("/dashboard/metrics")
    assert info.value.detail is None
    assert "502" in info.value.user_message


def test_connection_failure_becomes_api_error(api, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/customers/")] = requests.ConnectionError("refused")
    with pytest.raises(ApiError) as info:
        api.get("/customers/")
    assert info.value.status is None


def test_empty_body_is_none(api, fake_session):
    fake_session.routes[("PUT", f"{BASE_URL}/services/t1/complete")] = FakeResponse()
    assert api.put("/services/t1/complete") is None


def test_non_json_body_becomes_api_error(api, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/billing/history")] = FakeResponse(body=b"<html>maintenance</html>")
    with pytest.raises(ApiError, match="invalid JSON") as info:
        api.get("/billing/history")
    assert info.value.status == 200


@pytest.mark.parametrize(
    "payload, expected",
    [
        ([1, 2], [1, 2]),
        ({"data": [3]}, [3]),
        ({"data": None}, []),
        ({"items": [1]}, []),
        (None, []),
        ("oops", []),
    ],
)
def test_unwrap_list(payload, expected):
    assert unwrap_list(payload) == expected
