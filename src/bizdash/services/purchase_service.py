from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Optional

from bizdash.domain.errors import ValidationError
from bizdash.domain.models import Product, WholesalePurchase
from bizdash.services.periods import parse_date
from bizdash.services.resource_service import ResourceService, require_int, require_number


@dataclass(frozen=True)
class PurchaseSummary:
    count: int
    total_spent: float
    average_cost: float
    most_purchased_product_id: Optional[int]
    most_purchased_quantity: int


class PurchaseService(ResourceService[WholesalePurchase]):
    resource = "wholesalepurchases"
    label = "Wholesale purchase"

    def build_payload(self, data: dict, existing: Optional[WholesalePurchase] = None) -> dict:
        merged = existing.to_payload() if existing else {}
        merged.update({k: v for k, v in data.items() if k != "id"})

        purchase_date = merged.get("purchase_date") or date.today().isoformat()
        if parse_date(purchase_date) is None:
            raise ValidationError("Purchase date must be YYYY-MM-DD.")

        return {
            "product": require_int(merged.get("product"), "Product", 1),
            "vendor": require_int(merged.get("vendor"), "Vendor", 1),
            "quantity": require_int(merged.get("quantity"), "Quantity", 0, strict=True),
            "cost_per_unit": require_number(merged.get("cost_per_unit"), "Cost per unit", 0),
            "purchase_date": str(purchase_date),
        }

    @staticmethod
    def summarize(purchases: list[WholesalePurchase]) -> PurchaseSummary:
        spent = sum(p.total_cost for p in purchases)
        qty: Counter = Counter()
        for p in purchases:
            if p.product_id is not None:
                qty[p.product_id] += p.quantity
        top = qty.most_common(1)
        return PurchaseSummary(
            count=len(purchases),
            total_spent=spent,
            average_cost=spent / len(purchases) if purchases else 0.0,
            most_purchased_product_id=top[0][0] if top else None,
            most_purchased_quantity=top[0][1] if top else 0,
        )

    @staticmethod
    def product_name(product_id: Optional[int], products: list[Product]) -> str:
        for p in products:
            if p.id == product_id:
                return p.name
        return "N/A"
