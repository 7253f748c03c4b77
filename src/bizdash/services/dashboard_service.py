from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from bizdash.domain.models import DashboardStats, RecentSale, Sale, TopProduct
from bizdash.repositories.api_repo import Snapshot
from bizdash.services.analytics import detect_low_stock
from bizdash.services.periods import parse_date, read_field

PENDING_PAYMENT_STATUSES = ("pending", "overdue")


class DashboardService:
    def __init__(
        self,
        repo,
        low_stock_threshold: int = 20,
        use_min_stock: bool = False,
        date_field: str = "sale_date",
        top_limit: int = 4,
        recent_limit: int = 4,
    ):
        self.repo = repo
        self.low_stock_threshold = low_stock_threshold
        self.use_min_stock = use_min_stock
        self.date_field = date_field
        self.top_limit = top_limit
        self.recent_limit = recent_limit

    def stats(self, now: Optional[datetime] = None) -> DashboardStats:
        snap = self.repo.load("products", "sales", "customers", "payments", "wholesalepurchases")
        return self.compute(snap, (now or datetime.now()).date())

    @staticmethod
    def _sale_value(sale: Sale, prices: dict[int, float]) -> float:
        # Valued at the current retail price, not the stored line totals.
        return sum(it.quantity * prices.get(it.product_id, 0.0) for it in sale.items)

    def compute(self, snap: Snapshot, today: date) -> DashboardStats:
        prices = {p.id: p.retail_price for p in snap.products}
        names = {p.id: p.name for p in snap.products}

        total_sales = 0.0
        today_sales = 0.0
        for s in snap.sales:
            value = self._sale_value(s, prices)
            total_sales += value
            d = parse_date(read_field(s, self.date_field))
            if d is not None and d.date() == today:
                today_sales += value

        pending = sum(p.amount for p in snap.payments if p.status in PENDING_PAYMENT_STATUSES)
        costs = sum(p.total_cost for p in snap.purchases)
        low = detect_low_stock(snap.products, snap.sales, self.low_stock_threshold, self.use_min_stock)

        return DashboardStats(
            total_sales=total_sales,
            today_sales=today_sales,
            low_stock_count=len(low),
            pending_payments=pending,
            profit=total_sales - costs,
            customers=len(snap.customers),
            top_products=self.top_products(snap.sales, names, prices),
            recent_sales=self.recent_sales(snap, prices),
        )

    def top_products(
        self,
        sales: list[Sale],
        names: dict[int, str],
        prices: dict[int, float],
    ) -> list[TopProduct]:
        agg: dict = {}
        for s in sales:
            for it in s.items:
                sold, revenue = agg.get(it.product_id, (0, 0.0))
                agg[it.product_id] = (sold + it.quantity, revenue + it.quantity * prices.get(it.product_id, 0.0))
        rows = [TopProduct(name=names.get(pid, "Unknown"), sold=sold, revenue=rev) for pid, (sold, rev) in agg.items()]
        rows.sort(key=lambda r: r.sold, reverse=True)
        return rows[: self.top_limit]

    def recent_sales(self, snap: Snapshot, prices: dict[int, float]) -> list[RecentSale]:
        customers = {c.id: c.shop_name for c in snap.customers}

        def key(s: Sale) -> datetime:
            return parse_date(read_field(s, self.date_field)) or datetime.min

        newest = sorted(snap.sales, key=key, reverse=True)[: self.recent_limit]
        return [
            RecentSale(
                id=f"INV-{s.id:03d}",
                customer=customers.get(s.customer_id, "Unknown"),
                amount=self._sale_value(s, prices),
                date=read_field(s, self.date_field),
                status=s.status or "paid",
            )
            for s in newest
        ]
