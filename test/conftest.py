import json
import sys
from pathlib import Path

import pytest
import requests

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_response(status: int = 200, body=None, reason: str = "OK", url: str = "") -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    r.url = url
    r.encoding = "utf-8"
    if isinstance(body, (dict, list)):
        r._content = json.dumps(body).encode("utf-8")
        r.headers["Content-Type"] = "application/json"
    elif isinstance(body, str):
        r._content = body.encode("utf-8")
    else:
        r._content = b""
    return r


class FakeSession(requests.Session):
    """Answers from a (method, url) route table and records every call."""

    def __init__(self, routes=None):
        super().__init__()
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        answer = self.routes.get((method, url))
        if answer is None:
            return make_response(404, {"detail": "Not found."}, reason="Not Found", url=url)
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeTransport:
    """In-memory stand-in for ApiClient, keyed by resource name."""

    def __init__(self, data=None, failing=()):
        self.data = {name: [dict(r) for r in rows] for name, rows in (data or {}).items()}
        self.failing = set(failing)
        self.created = []
        self.updated = []
        self.deleted = []

    def _rows(self, resource):
        return self.data.setdefault(resource, [])

    def list(self, resource):
        from bizdash.domain.errors import ApiUnavailableError

        if resource in self.failing:
            raise ApiUnavailableError(f"{resource} is down")
        return [dict(r) if isinstance(r, dict) else r for r in self._rows(resource)]

    def get(self, resource, record_id):
        return next((dict(r) for r in self._rows(resource) if r.get("id") == record_id), {})

    def create(self, resource, payload):
        rows = self._rows(resource)
        row = {**payload, "id": max((r.get("id", 0) for r in rows), default=0) + 1}
        rows.append(row)
        self.created.append((resource, payload))
        return dict(row)

    def update(self, resource, record_id, payload):
        rows = self._rows(resource)
        row = {**payload, "id": record_id}
        self.data[resource] = [row if r.get("id") == record_id else r for r in rows]
        self.updated.append((resource, record_id, payload))
        return dict(row)

    def delete(self, resource, record_id):
        self.data[resource] = [r for r in self._rows(resource) if r.get("id") != record_id]
        self.deleted.append((resource, record_id))

    def fetch_many(self, resources, strict=False):
        out = {}
        for name in resources:
            try:
                out[name] = self.list(name)
            except Exception:
                if strict:
                    raise
                out[name] = []
        return out


def sale(id, total, items=(), status="completed", **dates):
    return {
        "id": id,
        "customer": dates.pop("customer", 1),
        "status": status,
        "total_amount": total,
        "items": [
            {"product": pid, "quantity": qty, "unit_price": price, "line_total": qty * price}
            for pid, qty, price in items
        ],
        **dates,
    }


def purchase(id, product, quantity, cost, purchase_date=None, vendor=1):
    return {
        "id": id,
        "product": product,
        "vendor": vendor,
        "quantity": quantity,
        "cost_per_unit": cost,
        "purchase_date": purchase_date,
    }


def product(id, name, stock=100, retail=10.0, cost=5.0, **extra):
    return {
        "id": id,
        "name": name,
        "retail_price": retail,
        "wholesale_cost": cost,
        "stock_quantity": stock,
        **extra,
    }


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def repo(transport):
    from bizdash.repositories.api_repo import ApiRepository

    return ApiRepository(transport)
