from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from bizdash.domain.errors import ValidationError
from bizdash.domain.models import Product, Sale, Vendor, WholesalePurchase
from bizdash.services.analytics import detect_low_stock
from bizdash.services.periods import parse_date
from bizdash.services.resource_service import (
    ResourceService,
    optional_int,
    require_int,
    require_number,
    require_text,
)


@dataclass(frozen=True)
class ProductSummary:
    total: int
    low_stock: int
    average_retail_price: float


class ProductService(ResourceService[Product]):
    resource = "products"
    label = "Product"

    def __init__(self, repo, low_stock_threshold: int = 20, use_min_stock: bool = False):
        super().__init__(repo)
        self.low_stock_threshold = low_stock_threshold
        self.use_min_stock = use_min_stock

    def build_payload(self, data: dict, existing: Optional[Product] = None) -> dict:
        merged = existing.to_payload() if existing else {}
        merged.update({k: v for k, v in data.items() if k != "id"})

        vendor = merged.get("vendor")
        if isinstance(vendor, dict):
            vendor = vendor.get("id")

        payload = {
            "name": require_text(merged.get("name"), "Name"),
            "description": (merged.get("description") or "").strip(),
            "retail_price": require_number(merged.get("retail_price"), "Retail price", 0, strict=True),
            "wholesale_cost": require_number(merged.get("wholesale_cost"), "Wholesale cost", 0),
            "stock_quantity": require_int(merged.get("stock_quantity"), "Stock quantity", 0),
            "min_stock": optional_int(merged.get("min_stock"), "Min stock") or 0,
            "max_stock": optional_int(merged.get("max_stock"), "Max stock") or 0,
            "last_purchase_date": merged.get("last_purchase_date") or None,
            "vendor": require_int(vendor, "Vendor", 1),
        }
        if payload["max_stock"] and payload["max_stock"] < payload["min_stock"]:
            raise ValidationError("Max stock must be >= min stock.")
        return payload

    def summarize(self, products: list[Product], sales: Iterable[Sale]) -> ProductSummary:
        low = detect_low_stock(products, sales, self.low_stock_threshold, self.use_min_stock)
        avg = sum(p.retail_price for p in products) / len(products) if products else 0.0
        return ProductSummary(total=len(products), low_stock=len(low), average_retail_price=avg)

    @staticmethod
    def vendor_name(product: Product, vendors: Iterable[Vendor]) -> str:
        if product.vendor_name:
            return product.vendor_name
        for v in vendors:
            if v.id == product.vendor_id:
                return v.name or "N/A"
        return "N/A"

    @staticmethod
    def last_purchase_date(product_id: int, purchases: Iterable[WholesalePurchase]) -> Optional[str]:
        latest = None
        latest_raw = None
        for p in purchases:
            if p.product_id != product_id:
                continue
            d = parse_date(p.purchase_date)
            if d is not None and (latest is None or d > latest):
                latest, latest_raw = d, p.purchase_date
        return latest_raw
