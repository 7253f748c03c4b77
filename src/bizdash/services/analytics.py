"""
Profit/loss aggregation over records already fetched from the API.

Every function is pure: same inputs, same output, nothing cached between calls.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable, Mapping, Optional

from bizdash.domain.models import (
    LowStockItem,
    MonthlyProfit,
    Product,
    ProductProfit,
    ProfitSummary,
    Sale,
    WholesalePurchase,
)
from bizdash.services.periods import parse_date, read_field

DEFAULT_EXPENSE_RATE = 0.10
DEFAULT_LOW_STOCK_THRESHOLD = 20

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def margin_pct(profit: float, revenue: float) -> float:
    return (profit / revenue) * 100 if revenue > 0 else 0.0


def sales_revenue(sales: Iterable[Sale]) -> float:
    return sum(float(s.total_amount) for s in sales)


def purchases_cost(purchases: Iterable[WholesalePurchase]) -> float:
    return sum(p.total_cost for p in purchases)


def profit_growth(current: float, previous: float) -> float:
    if previous != 0:
        return ((current - previous) / abs(previous)) * 100
    return 100.0 if current > 0 else 0.0


def profit_summary(
    sales: Iterable[Sale],
    purchases: Iterable[WholesalePurchase],
    expense_rate: float = DEFAULT_EXPENSE_RATE,
    previous_net_profit: Optional[float] = None,
) -> ProfitSummary:
    revenue = sales_revenue(sales)
    cost = purchases_cost(purchases)
    expenses = revenue * expense_rate
    gross = revenue - cost
    net = gross - expenses
    growth = profit_growth(net, previous_net_profit) if previous_net_profit is not None else 0.0
    return ProfitSummary(
        total_revenue=revenue,
        total_cost=cost,
        gross_profit=gross,
        expenses=expenses,
        net_profit=net,
        profit_margin=margin_pct(net, revenue),
        profit_growth=growth,
    )


def rank_product_profitability(
    sales: Iterable[Sale],
    purchases: Iterable[WholesalePurchase],
    products: Iterable[Product] = (),
    limit: Optional[int] = 10,
) -> list[ProductProfit]:
    revenue: defaultdict = defaultdict(float)
    cost: defaultdict = defaultdict(float)
    units: Counter = Counter()
    order: dict = {}

    for sale in sales:
        for item in sale.items:
            order.setdefault(item.product_id, None)
            revenue[item.product_id] += item.line_total
            units[item.product_id] += item.quantity

    for p in purchases:
        order.setdefault(p.product_id, None)
        cost[p.product_id] += p.total_cost

    names = {p.id: p.name for p in products}
    rows = []
    for pid in order:
        rev, cst = revenue[pid], cost[pid]
        profit = rev - cst
        rows.append(ProductProfit(
            product_id=pid,
            product=names.get(pid) or f"Product {pid}",
            revenue=rev,
            cost=cst,
            profit=profit,
            margin=margin_pct(profit, rev),
            units_sold=units[pid],
        ))

    rows.sort(key=lambda r: r.profit, reverse=True)
    return rows[:limit] if limit is not None else rows


def build_monthly_trends(
    sales: Iterable[Sale],
    purchases: Iterable[WholesalePurchase],
    expense_rate: float = DEFAULT_EXPENSE_RATE,
    sale_date_field: str = "sale_date",
    purchase_date_field: str = "purchase_date",
    limit: int = 4,
) -> list[MonthlyProfit]:
    """Buckets the full history by calendar month; newest `limit` months first."""
    revenue: defaultdict = defaultdict(float)
    cost: defaultdict = defaultdict(float)

    for s in sales:
        d = parse_date(read_field(s, sale_date_field))
        if d is None:
            continue
        revenue[(d.year, d.month)] += float(s.total_amount)

    for p in purchases:
        d = parse_date(read_field(p, purchase_date_field))
        if d is None:
            continue
        cost[(d.year, d.month)] += p.total_cost

    keys = sorted(set(revenue) | set(cost), reverse=True)[:limit]
    out = []
    for year, month in keys:
        rev, cst = revenue[(year, month)], cost[(year, month)]
        expenses = rev * expense_rate
        profit = rev - cst - expenses
        out.append(MonthlyProfit(
            month=f"{MONTHS[month - 1]} {year}",
            year=year,
            month_number=month,
            revenue=rev,
            cost=cst,
            expenses=expenses,
            profit=profit,
            margin=margin_pct(profit, rev),
        ))
    return out


def sold_quantities(sales: Iterable[Sale]) -> Counter:
    sold: Counter = Counter()
    for sale in sales:
        for item in sale.items:
            if item.product_id is not None:
                sold[item.product_id] += item.quantity
    return sold


def effective_stock(product: Product, sold: Mapping[int, int]) -> int:
    return int(product.stock_quantity) - int(sold.get(product.id, 0))


def low_stock_limit(product: Product, threshold: int, use_min_stock: bool = False) -> int:
    if use_min_stock and product.min_stock > 0:
        return product.min_stock
    return threshold


def detect_low_stock(
    products: Iterable[Product],
    sales: Iterable[Sale],
    threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    use_min_stock: bool = False,
) -> list[LowStockItem]:
    sold = sold_quantities(sales)
    out = []
    for p in products:
        limit = low_stock_limit(p, threshold, use_min_stock)
        stock = effective_stock(p, sold)
        if stock <= limit:
            out.append(LowStockItem(
                product_id=p.id,
                name=p.name,
                stock_quantity=p.stock_quantity,
                sold=int(sold.get(p.id, 0)),
                effective_stock=stock,
                threshold=limit,
            ))
    return out
