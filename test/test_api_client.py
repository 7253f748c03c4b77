import pytest
import requests

from bizdash.api.client import ApiClient
from bizdash.domain.errors import ApiError, ApiUnavailableError, ValidationError

from conftest import FakeSession, make_response

BASE = "http://api.test/api"


def _client(routes, token="secret"):
    session = FakeSession(routes)
    return ApiClient(BASE, token=token, timeout=3, session=session), session


def test_list_sends_token_and_unwraps_paginated_results():
    client, session = _client({
        ("GET", f"{BASE}/products/"): make_response(200, {"count": 1, "results": [{"id": 1, "name": "Rice"}]}),
    })

    rows = client.list("products")

    assert rows == [{"id": 1, "name": "Rice"}]
    assert session.headers["Authorization"] == "Token secret"
    assert session.headers["Accept"] == "application/json"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", f"{BASE}/products/")
    assert kwargs["timeout"] == 3


def test_no_token_means_no_authorization_header():
    client, session = _client({("GET", f"{BASE}/sales/"): make_response(200, [])}, token="")
    assert client.list("sales") == []
    assert "Authorization" not in session.headers


def test_products_are_sent_as_json():
    client, session = _client({("POST", f"{BASE}/products/"): make_response(201, {"id": 7})})

    assert client.create("products", {"name": "Rice", "vendor": 2}) == {"id": 7}

    _, _, kwargs = session.calls[0]
    assert kwargs["json"] == {"name": "Rice", "vendor": 2}
    assert "files" not in kwargs


def test_customers_are_sent_as_multipart_form():
    client, session = _client({("PUT", f"{BASE}/customers/3/"): make_response(200, {"id": 3})})

    client.update("customers", 3, {"shop_name": "Corner Shop", "credit_limit": 500.0, "last_purchase": None})

    _, url, kwargs = session.calls[0]
    assert url == f"{BASE}/customers/3/"
    assert kwargs["files"] == {
        "shop_name": (None, "Corner Shop"),
        "credit_limit": (None, "500.0"),
        "last_purchase": (None, ""),
    }
    assert "json" not in kwargs


def test_payments_are_read_only():
    client, session = _client({})
    with pytest.raises(ValidationError, match="read-only"):
        client.create("payments", {"amount": 10})
    assert session.calls == []


def test_unknown_resource_is_rejected():
    client, _ = _client({})
    with pytest.raises(ValidationError, match="Unknown resource"):
        client.list("invoices")


def test_http_error_carries_status_and_detail():
    client, _ = _client({
        ("POST", f"{BASE}/sales/"): make_response(400, {"customer": ["This field is required."]}, reason="Bad Request"),
    })

    with pytest.raises(ApiError) as exc:
        client.create("sales", {"items": []})

    assert exc.value.status_code == 400
    assert exc.value.detail == {"customer": ["This field is required."]}
    assert "HTTP 400" in str(exc.value)


def test_network_error_becomes_api_unavailable():
    client, _ = _client({("GET", f"{BASE}/vendors/"): requests.ConnectionError("refused")})
    with pytest.raises(ApiUnavailableError, match="Cannot reach API"):
        client.list("vendors")


def test_delete_with_no_content_returns_none():
    client, session = _client({("DELETE", f"{BASE}/vendors/4/"): make_response(204, reason="No Content")})
    assert client.delete("vendors", 4) is None
    assert session.calls[0][:2] == ("DELETE", f"{BASE}/vendors/4/")


def test_invalid_json_body_is_an_api_error():
    client, _ = _client({("GET", f"{BASE}/products/1/"): make_response(200, "<html>oops</html>")})
    with pytest.raises(ApiError, match="invalid JSON"):
        client.get("products", 1)


def test_fetch_many_falls_back_to_empty_list_when_not_strict():
    routes = {
        ("GET", f"{BASE}/products/"): make_response(200, [{"id": 1}]),
        ("GET", f"{BASE}/payments/"): make_response(500, "boom", reason="Server Error"),
    }
    client, _ = _client(routes)

    out = client.fetch_many(["products", "payments", "products"])

    assert out == {"products": [{"id": 1}], "payments": []}


def test_fetch_many_strict_raises():
    client, _ = _client({
        ("GET", f"{BASE}/products/"): make_response(200, []),
        ("GET", f"{BASE}/sales/"): make_response(503, "down", reason="Service Unavailable"),
    })
    with pytest.raises(ApiError) as exc:
        client.fetch_many(["products", "sales"], strict=True)
    assert exc.value.status_code == 503


def test_fetch_many_with_nothing_requested():
    client, session = _client({})
    assert client.fetch_many([]) == {}
    assert session.calls == []
