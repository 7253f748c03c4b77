from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bizdash.domain.errors import ValidationError
from bizdash.domain.models import Vendor
from bizdash.services.resource_service import ResourceService, require_number, require_text


@dataclass(frozen=True)
class VendorSummary:
    total: int
    active: int
    total_purchases: int
    average_rating: float


class VendorService(ResourceService[Vendor]):
    resource = "vendors"
    label = "Vendor"

    FIELDS = ("name", "contact_person", "phone_number", "email", "address", "specialties")

    def build_payload(self, data: dict, existing: Optional[Vendor] = None) -> dict:
        payload = existing.to_payload() if existing else {"status": "active"}
        for key in self.FIELDS:
            if key in data:
                payload[key] = (data[key] or "").strip() if isinstance(data[key], str) else data[key]
        payload["name"] = require_text(payload.get("name"), "Vendor name")

        if data.get("rating") not in (None, ""):
            rating = require_number(data["rating"], "Rating", 0)
            if rating > 5:
                raise ValidationError("Rating must be between 0 and 5.")
            payload["rating"] = rating
        if data.get("status"):
            payload["status"] = str(data["status"]).strip().lower()
        return payload

    @staticmethod
    def summarize(vendors: list[Vendor]) -> VendorSummary:
        avg = sum(v.rating for v in vendors) / len(vendors) if vendors else 0.0
        return VendorSummary(
            total=len(vendors),
            active=sum(1 for v in vendors if v.status == "active"),
            total_purchases=sum(v.total_purchases for v in vendors),
            average_rating=avg,
        )
