from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

import logging

from bizdash.domain.errors import NotFoundError, ValidationError
from bizdash.domain.models import Product, Sale
from bizdash.services.periods import parse_date, read_field
from bizdash.services.resource_service import ResourceService, require_int, require_number

log = logging.getLogger(__name__)

SALE_STATUSES = ("pending", "completed", "cancel")
PAID_STATUSES = ("paid", "completed")


def _quantity(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class SalesSummary:
    today_sales: float
    units_sold: int
    average_sale: float
    status_counts: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class InvoiceSummary:
    total: int
    paid: int
    pending: int
    overdue: int
    pending_amount: float
    overdue_amount: float


class SalesService(ResourceService[Sale]):
    resource = "sales"
    label = "Sale"

    def __init__(self, repo, date_field: str = "sale_date"):
        super().__init__(repo)
        self.date_field = date_field

    @staticmethod
    def _lines(data: dict) -> list[dict]:
        raw = data.get("items")
        if raw is None:
            raw = [{"product": data.get("product"), "quantity": data.get("quantity"), "unit_price": data.get("unit_price")}]
        if not raw:
            raise ValidationError("A sale needs at least one line item.")

        lines = []
        for n, item in enumerate(raw, start=1):
            label = "" if len(raw) == 1 else f"Line {n} "
            product = require_int(item.get("product"), f"{label}Product".capitalize(), 1)
            quantity = require_int(item.get("quantity"), f"{label}Quantity".capitalize(), 0, strict=True)
            unit_price = round(require_number(item.get("unit_price"), f"{label}Unit price".capitalize(), 0), 2)
            lines.append({
                "product": product,
                "quantity": quantity,
                "unit_price": unit_price,
                "line_total": round(quantity * unit_price, 2),
            })
        return lines

    def build_payload(self, data: dict, existing: Optional[Sale] = None) -> dict:
        """
        data: {customer, status, due_date, <date field>} plus either
        `items` ([{product, quantity, unit_price}, ...]) or a single
        product/quantity/unit_price. total_amount is the sum of line totals.
        """
        customer = require_int(data.get("customer"), "Customer", 1)
        lines = self._lines(data)

        status = str(data.get("status") or "pending").strip().lower()
        if status not in SALE_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(SALE_STATUSES)}.")

        sale_date = (
            data.get(self.date_field)
            or (read_field(existing, self.date_field) if existing else None)
            or date.today().isoformat()
        )
        due_date = data.get("due_date") or (existing.due_date if existing else None)
        if due_date and parse_date(due_date) is None:
            raise ValidationError("Due date must be YYYY-MM-DD.")

        return {
            "customer": customer,
            self.date_field: sale_date,
            "due_date": due_date or None,
            "total_amount": round(sum(line["line_total"] for line in lines), 2),
            "is_paid": bool(data.get("is_paid", existing.is_paid if existing else False)),
            "status": status,
            "items": lines,
        }

    def _product(self, product_id, products: Optional[Iterable[Product]]) -> Product:
        pid = require_int(product_id, "Product", 1)
        rows = products if products is not None else self.repo.list("products")
        for p in rows:
            if p.id == pid:
                return p
        raise NotFoundError("Selected product could not be found. Refresh and try again.")

    def record_sale(
        self,
        customer_id,
        product_id,
        quantity,
        status: str = "pending",
        products: Optional[Iterable[Product]] = None,
    ) -> Optional[Sale]:
        """Prices the line from the product's current retail price."""
        product = self._product(product_id, products)
        sale = self.create({
            "customer": customer_id,
            "product": product.id,
            "quantity": quantity,
            "unit_price": product.retail_price,
            "status": status,
        })
        log.info("sale_recorded product=%s qty=%s price=%.2f", product.id, quantity, product.retail_price)
        return sale

    def create_invoice(
        self,
        customer_id,
        items: list[dict],
        due_date: Optional[str] = None,
        products: Optional[Iterable[Product]] = None,
    ) -> Optional[Sale]:
        """
        items: [{product, quantity}, ...]; each line is priced from the
        product's retail price. The invoice starts unpaid and pending.
        """
        if customer_id in (None, ""):
            raise ValidationError("Please select a customer.")
        if not items or any(not it.get("product") or _quantity(it.get("quantity")) < 1 for it in items):
            raise ValidationError("Please complete all invoice items.")

        catalog = list(products) if products is not None else self.repo.list("products")
        lines = []
        for it in items:
            product = self._product(it.get("product"), catalog)
            lines.append({"product": product.id, "quantity": it.get("quantity"), "unit_price": product.retail_price})

        total = sum(p["unit_price"] * _quantity(p["quantity"]) for p in lines)
        if total <= 0:
            raise ValidationError("Invoice total must be greater than 0.")

        invoice = self.create({
            "customer": customer_id,
            "items": lines,
            "due_date": due_date,
            "is_paid": False,
            "status": "pending",
        })
        log.info("invoice_created id=%s lines=%s total=%.2f", getattr(invoice, "id", None), len(lines), total)
        return invoice

    def update_sale(
        self,
        sale: Sale,
        customer_id=None,
        product_id=None,
        quantity=None,
        status: Optional[str] = None,
        products: Optional[Iterable[Product]] = None,
    ) -> Optional[Sale]:
        data = {
            "customer": customer_id if customer_id is not None else sale.customer_id,
            "status": status or sale.status,
        }
        if product_id is None and quantity is None and sale.items:
            # Line items stay as stored.
            data["items"] = [it.to_payload() for it in sale.items]
            return self.update(sale.id, data, existing=sale)

        first = sale.items[0] if sale.items else None
        if product_id is None and first is None:
            raise ValidationError("Sale has no line items to update.")
        product = self._product(product_id if product_id is not None else first.product_id, products)
        data.update({
            "product": product.id,
            "quantity": quantity if quantity is not None else (first.quantity if first else None),
            "unit_price": product.retail_price,
        })
        return self.update(sale.id, data, existing=sale)

    def summarize(self, sales: list[Sale], today: Optional[date] = None) -> SalesSummary:
        today = today or date.today()
        todays = 0.0
        for s in sales:
            d = parse_date(read_field(s, self.date_field))
            if d is not None and d.date() == today:
                todays += s.total_amount
        total = sum(s.total_amount for s in sales)
        return SalesSummary(
            today_sales=todays,
            units_sold=sum(s.units for s in sales),
            average_sale=total / len(sales) if sales else 0.0,
            status_counts=dict(Counter(s.status or "pending" for s in sales)),
        )

    @staticmethod
    def invoice_summary(sales: list[Sale]) -> InvoiceSummary:
        """Paid counts `paid` and `completed`; pending and overdue go by status."""
        paid = [s for s in sales if s.status in PAID_STATUSES]
        pending = [s for s in sales if s.status == "pending"]
        overdue = [s for s in sales if s.status == "overdue"]
        return InvoiceSummary(
            total=len(sales),
            paid=len(paid),
            pending=len(pending),
            overdue=len(overdue),
            pending_amount=sum(s.total_amount for s in pending),
            overdue_amount=sum(s.total_amount for s in overdue),
        )
