from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from bizdash.domain.models import Product, Sale
from bizdash.services.analytics import effective_stock, low_stock_limit, sold_quantities


@dataclass(frozen=True)
class StockRow:
    product_id: int
    name: str
    stock_quantity: int
    sold: int
    effective_stock: int
    low: bool


@dataclass(frozen=True)
class InventoryValue:
    total_stock_value: float
    potential_revenue: float


class InventoryService:
    def __init__(self, repo, low_stock_threshold: int = 20, use_min_stock: bool = False):
        self.repo = repo
        self.low_stock_threshold = low_stock_threshold
        self.use_min_stock = use_min_stock

    @staticmethod
    def valuation(products: Iterable[Product]) -> InventoryValue:
        products = list(products)
        return InventoryValue(
            total_stock_value=sum(p.stock_quantity * p.wholesale_cost for p in products),
            potential_revenue=sum(p.stock_quantity * p.retail_price for p in products),
        )

    def stock_rows(self, products: Iterable[Product], sales: Iterable[Sale]) -> list[StockRow]:
        sold = sold_quantities(sales)
        rows = []
        for p in products:
            limit = low_stock_limit(p, self.low_stock_threshold, self.use_min_stock)
            eff = effective_stock(p, sold)
            rows.append(StockRow(
                product_id=p.id,
                name=p.name,
                stock_quantity=p.stock_quantity,
                sold=int(sold.get(p.id, 0)),
                effective_stock=eff,
                low=eff <= limit,
            ))
        return rows

    def current_stock(self) -> list[StockRow]:
        snap = self.repo.load("products", "sales")
        return self.stock_rows(snap.products, snap.sales)
