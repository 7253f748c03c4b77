from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Protocol

from bizdash.domain.models import (
    Customer,
    Payment,
    Product,
    Sale,
    Vendor,
    WholesalePurchase,
)


class ApiTransport(Protocol):
    def list(self, resource: str) -> list[dict]: ...
    def get(self, resource: str, record_id: int) -> dict: ...
    def create(self, resource: str, payload: dict) -> dict: ...
    def update(self, resource: str, record_id: int, payload: dict) -> dict: ...
    def delete(self, resource: str, record_id: int) -> None: ...
    def fetch_many(self, resources, strict: bool = False) -> dict[str, list[dict]]: ...


MODELS: dict[str, Callable[[Mapping], object]] = {
    "customers": Customer.from_api,
    "vendors": Vendor.from_api,
    "products": Product.from_api,
    "sales": Sale.from_api,
    "wholesalepurchases": WholesalePurchase.from_api,
    "payments": Payment.from_api,
}


@dataclass
class Snapshot:
    customers: list[Customer] = field(default_factory=list)
    vendors: list[Vendor] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    sales: list[Sale] = field(default_factory=list)
    wholesalepurchases: list[WholesalePurchase] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)

    @property
    def purchases(self) -> list[WholesalePurchase]:
        return self.wholesalepurchases


class ApiRepository:
    """Maps API JSON rows to domain models. The API stays the owner of every record."""

    def __init__(self, client: ApiTransport):
        self.client = client

    @staticmethod
    def _convert(resource: str, rows: list[dict]) -> list:
        build = MODELS[resource]
        return [build(row) for row in rows if isinstance(row, Mapping)]

    def list(self, resource: str) -> list:
        return self._convert(resource, self.client.list(resource))

    def get(self, resource: str, record_id: int):
        row = self.client.get(resource, int(record_id))
        return MODELS[resource](row) if row else None

    def create(self, resource: str, payload: dict):
        row = self.client.create(resource, payload)
        return MODELS[resource](row) if row else None

    def update(self, resource: str, record_id: int, payload: dict):
        row = self.client.update(resource, int(record_id), payload)
        return MODELS[resource](row) if row else None

    def delete(self, resource: str, record_id: int) -> None:
        self.client.delete(resource, int(record_id))

    def load(self, *resources: str, strict: bool = False) -> Snapshot:
        rows = self.client.fetch_many(resources, strict=strict)
        snap = Snapshot()
        for name, data in rows.items():
            setattr(snap, name, self._convert(name, data))
        return snap
