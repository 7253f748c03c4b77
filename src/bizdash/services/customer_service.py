from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bizdash.domain.models import Customer
from bizdash.services.resource_service import ResourceService, require_number, require_text


@dataclass(frozen=True)
class CustomerSummary:
    total: int
    active: int
    outstanding_amount: float
    credit_limit: float


class CustomerService(ResourceService[Customer]):
    resource = "customers"
    label = "Customer"

    FIELDS = ("shop_name", "contact_person", "phone_number", "email", "address", "shop_type")

    def build_payload(self, data: dict, existing: Optional[Customer] = None) -> dict:
        payload = existing.to_payload() if existing else {
            "outstanding_amount": 0,
            "total_purchases": 0,
            "status": "active",
        }
        for key in self.FIELDS:
            if key in data:
                payload[key] = (data[key] or "").strip() if isinstance(data[key], str) else data[key]
        payload["shop_name"] = require_text(payload.get("shop_name"), "Shop name")

        credit = data.get("credit_limit", payload.get("credit_limit"))
        payload["credit_limit"] = require_number(credit if credit not in (None, "") else 0, "Credit limit", 0)
        if "status" in data and data["status"]:
            payload["status"] = str(data["status"]).strip().lower()
        return payload

    @staticmethod
    def summarize(customers: list[Customer]) -> CustomerSummary:
        return CustomerSummary(
            total=len(customers),
            active=sum(1 for c in customers if c.status == "active"),
            outstanding_amount=sum(c.outstanding_amount for c in customers),
            credit_limit=sum(c.credit_limit for c in customers),
        )
