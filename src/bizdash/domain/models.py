from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def ref_id(value: Any) -> Optional[int]:
    """API references arrive either as a bare id or as a nested object."""
    if isinstance(value, Mapping):
        value = value.get("id")
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _opt_text(value: Any) -> Optional[str]:
    return None if value in (None, "") else str(value)


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    retail_price: float
    wholesale_cost: float
    stock_quantity: int
    min_stock: int = 0
    max_stock: int = 0
    vendor_id: Optional[int] = None
    vendor_name: Optional[str] = None
    description: str = ""
    last_purchase_date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Product":
        vendor = data.get("vendor")
        return cls(
            id=to_int(data.get("id")),
            name=_text(data.get("name")),
            retail_price=to_float(data.get("retail_price", data.get("price"))),
            wholesale_cost=to_float(data.get("wholesale_cost")),
            stock_quantity=to_int(data.get("stock_quantity")),
            min_stock=to_int(data.get("min_stock")),
            max_stock=to_int(data.get("max_stock")),
            vendor_id=ref_id(vendor),
            vendor_name=_opt_text(vendor.get("name")) if isinstance(vendor, Mapping) else None,
            description=_text(data.get("description")),
            last_purchase_date=_opt_text(data.get("last_purchase_date")),
        )

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "retail_price": self.retail_price,
            "wholesale_cost": self.wholesale_cost,
            "stock_quantity": self.stock_quantity,
            "min_stock": self.min_stock,
            "max_stock": self.max_stock,
            "last_purchase_date": self.last_purchase_date,
            "vendor": self.vendor_id,
        }


@dataclass(frozen=True)
class SaleItem:
    product_id: Optional[int]
    quantity: int
    unit_price: float
    line_total: float

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "SaleItem":
        return cls(
            product_id=ref_id(data.get("product")),
            quantity=to_int(data.get("quantity")),
            unit_price=to_float(data.get("unit_price")),
            line_total=to_float(data.get("line_total")),
        )

    def to_payload(self) -> dict:
        return {
            "product": self.product_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
        }


@dataclass(frozen=True)
class Sale:
    id: int
    customer_id: Optional[int]
    status: str
    total_amount: float
    items: tuple[SaleItem, ...] = ()
    is_paid: bool = False
    # The backend has used several date fields over time; keep all of them.
    sale_date: Optional[str] = None
    invoice_date: Optional[str] = None
    date: Optional[str] = None
    created_at: Optional[str] = None
    due_date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Sale":
        items = data.get("items")
        return cls(
            id=to_int(data.get("id")),
            customer_id=ref_id(data.get("customer")),
            status=_text(data.get("status")).lower(),
            total_amount=to_float(data.get("total_amount")),
            items=tuple(SaleItem.from_api(it) for it in items) if isinstance(items, list) else (),
            is_paid=str(data.get("is_paid", "")).lower() in ("true", "1"),
            sale_date=_opt_text(data.get("sale_date")),
            invoice_date=_opt_text(data.get("invoice_date")),
            date=_opt_text(data.get("date")),
            created_at=_opt_text(data.get("created_at")),
            due_date=_opt_text(data.get("due_date")),
        )

    @property
    def units(self) -> int:
        return sum(it.quantity for it in self.items)


@dataclass(frozen=True)
class WholesalePurchase:
    id: int
    product_id: Optional[int]
    vendor_id: Optional[int]
    quantity: int
    cost_per_unit: float
    purchase_date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "WholesalePurchase":
        return cls(
            id=to_int(data.get("id")),
            product_id=ref_id(data.get("product")),
            vendor_id=ref_id(data.get("vendor")),
            quantity=to_int(data.get("quantity")),
            cost_per_unit=to_float(data.get("cost_per_unit")),
            purchase_date=_opt_text(data.get("purchase_date")),
        )

    @property
    def total_cost(self) -> float:
        return self.cost_per_unit * self.quantity

    def to_payload(self) -> dict:
        return {
            "product": self.product_id,
            "vendor": self.vendor_id,
            "quantity": self.quantity,
            "cost_per_unit": self.cost_per_unit,
            "purchase_date": self.purchase_date,
        }


@dataclass(frozen=True)
class Customer:
    id: int
    shop_name: str
    contact_person: str = ""
    phone_number: str = ""
    email: str = ""
    address: str = ""
    shop_type: str = ""
    credit_limit: float = 0.0
    outstanding_amount: float = 0.0
    total_purchases: int = 0
    last_purchase: Optional[str] = None
    status: str = "active"

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Customer":
        return cls(
            id=to_int(data.get("id")),
            shop_name=_text(data.get("shop_name", data.get("name"))),
            contact_person=_text(data.get("contact_person")),
            phone_number=_text(data.get("phone_number")),
            email=_text(data.get("email")),
            address=_text(data.get("address")),
            shop_type=_text(data.get("shop_type")),
            credit_limit=to_float(data.get("credit_limit")),
            outstanding_amount=to_float(data.get("outstanding_amount")),
            total_purchases=to_int(data.get("total_purchases")),
            last_purchase=_opt_text(data.get("last_purchase")),
            status=_text(data.get("status")) or "active",
        )

    def to_payload(self) -> dict:
        return {
            "shop_name": self.shop_name,
            "contact_person": self.contact_person,
            "phone_number": self.phone_number,
            "email": self.email,
            "address": self.address,
            "shop_type": self.shop_type,
            "credit_limit": self.credit_limit,
            "outstanding_amount": self.outstanding_amount,
            "total_purchases": self.total_purchases,
            "last_purchase": self.last_purchase,
            "status": self.status,
        }


@dataclass(frozen=True)
class Vendor:
    id: int
    name: str
    contact_person: str = ""
    phone_number: str = ""
    email: str = ""
    address: str = ""
    specialties: str = ""
    rating: float = 0.0
    total_purchases: int = 0
    last_purchase: Optional[str] = None
    status: str = "active"

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Vendor":
        return cls(
            id=to_int(data.get("id")),
            name=_text(data.get("name")),
            contact_person=_text(data.get("contact_person")),
            phone_number=_text(data.get("phone_number")),
            email=_text(data.get("email")),
            address=_text(data.get("address")),
            specialties=_text(data.get("specialties")),
            rating=to_float(data.get("rating")),
            total_purchases=to_int(data.get("total_purchases")),
            last_purchase=_opt_text(data.get("last_purchase")),
            status=_text(data.get("status")) or "active",
        )

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "contact_person": self.contact_person,
            "phone_number": self.phone_number,
            "email": self.email,
            "address": self.address,
            "specialties": self.specialties,
            "rating": self.rating,
            "total_purchases": self.total_purchases,
            "last_purchase": self.last_purchase,
            "status": self.status,
        }


@dataclass(frozen=True)
class Payment:
    id: int
    amount: float
    status: str

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Payment":
        return cls(
            id=to_int(data.get("id")),
            amount=to_float(data.get("amount")),
            status=_text(data.get("status")).lower(),
        )


# ---------- report records ----------

@dataclass(frozen=True)
class ProfitSummary:
    total_revenue: float
    total_cost: float
    gross_profit: float
    expenses: float
    net_profit: float
    profit_margin: float
    profit_growth: float = 0.0


@dataclass(frozen=True)
class ProductProfit:
    product_id: Optional[int]
    product: str
    revenue: float
    cost: float
    profit: float
    margin: float
    units_sold: int

    @property
    def performance(self) -> str:
        if self.margin > 30:
            return "Excellent"
        if self.margin > 15:
            return "Good"
        return "Low"


@dataclass(frozen=True)
class MonthlyProfit:
    month: str
    year: int
    month_number: int
    revenue: float
    cost: float
    expenses: float
    profit: float
    margin: float


@dataclass(frozen=True)
class LowStockItem:
    product_id: int
    name: str
    stock_quantity: int
    sold: int
    effective_stock: int
    threshold: int


@dataclass(frozen=True)
class ProfitLossReport:
    period: str
    summary: ProfitSummary
    product_profitability: list[ProductProfit]
    monthly_trends: list[MonthlyProfit]
    generated_at: str


@dataclass(frozen=True)
class TopProduct:
    name: str
    sold: int
    revenue: float


@dataclass(frozen=True)
class RecentSale:
    id: str
    customer: str
    amount: float
    date: Optional[str]
    status: str


@dataclass(frozen=True)
class DashboardStats:
    total_sales: float
    today_sales: float
    low_stock_count: int
    pending_payments: float
    profit: float
    customers: int
    top_products: list[TopProduct] = field(default_factory=list)
    recent_sales: list[RecentSale] = field(default_factory=list)
