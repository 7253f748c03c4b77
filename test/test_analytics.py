import pytest

from bizdash.domain.models import Product, Sale, WholesalePurchase
from bizdash.services.analytics import (
    build_monthly_trends,
    detect_low_stock,
    effective_stock,
    profit_growth,
    profit_summary,
    rank_product_profitability,
    sold_quantities,
)

from conftest import product, purchase, sale


def _sales(*rows):
    return [Sale.from_api(r) for r in rows]


def _purchases(*rows):
    return [WholesalePurchase.from_api(r) for r in rows]


def test_profit_summary_basic_numbers():
    sales = _sales(sale(1, 600), sale(2, 400))
    purchases = _purchases(purchase(1, 1, 60, 10))

    s = profit_summary(sales, purchases, expense_rate=0.10)

    assert s.total_revenue == pytest.approx(1000)
    assert s.total_cost == pytest.approx(600)
    assert s.gross_profit == pytest.approx(400)
    assert s.expenses == pytest.approx(100)
    assert s.net_profit == pytest.approx(300)
    assert s.profit_margin == pytest.approx(30)
    assert s.profit_growth == 0


def test_profit_summary_without_revenue_has_zero_margin():
    s = profit_summary([], _purchases(purchase(1, 1, 2, 50)))
    assert s.net_profit == pytest.approx(-100)
    assert s.profit_margin == 0


def test_expense_rate_is_configurable():
    s = profit_summary(_sales(sale(1, 1000)), [], expense_rate=0.25)
    assert s.expenses == pytest.approx(250)
    assert s.net_profit == pytest.approx(750)


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (50, 0, 100),
        (0, 0, 0),
        (-10, 0, 0),
        (150, 100, 50),
        (50, -100, 150),
    ],
)
def test_profit_growth_rules(current, previous, expected):
    assert profit_growth(current, previous) == pytest.approx(expected)


def test_profit_summary_growth_uses_previous_net():
    s = profit_summary(_sales(sale(1, 200)), [], expense_rate=0.0, previous_net_profit=100)
    assert s.profit_growth == pytest.approx(100)


def test_ranking_orders_by_profit_and_names_unknown_products():
    sales = _sales(
        sale(1, 0, items=[(1, 2, 50.0), (2, 1, 30.0)]),
        sale(2, 0, items=[(3, 10, 20.0)]),
    )
    purchases = _purchases(purchase(1, 1, 2, 10), purchase(2, 9, 1, 40))
    products = [Product.from_api(product(1, "Rice")), Product.from_api(product(2, "Oil"))]

    rows = rank_product_profitability(sales, purchases, products)

    assert [r.product for r in rows] == ["Product 3", "Rice", "Oil", "Product 9"]
    rice = rows[1]
    assert rice.revenue == pytest.approx(100)
    assert rice.cost == pytest.approx(20)
    assert rice.profit == pytest.approx(80)
    assert rice.margin == pytest.approx(80)
    assert rice.units_sold == 2
    assert rice.performance == "Excellent"
    assert rows[-1].margin == 0
    assert rows[-1].performance == "Low"


def test_ranking_limit():
    sales = _sales(sale(1, 0, items=[(pid, 1, float(pid)) for pid in range(1, 15)]))
    assert len(rank_product_profitability(sales, [])) == 10
    assert len(rank_product_profitability(sales, [], limit=None)) == 14
    assert rank_product_profitability(sales, [], limit=3)[0].product_id == 14


def test_product_profits_add_up_to_gross_profit():
    sales = _sales(
        sale(1, 130, items=[(1, 2, 50.0), (2, 1, 30.0)]),
        sale(2, 45, items=[(2, 3, 15.0)]),
    )
    purchases = _purchases(purchase(1, 1, 4, 12), purchase(2, 2, 5, 7), purchase(3, 3, 1, 9))

    rows = rank_product_profitability(sales, purchases, limit=None)
    summary = profit_summary(sales, purchases)

    assert sum(r.profit for r in rows) == pytest.approx(summary.gross_profit)


def test_monthly_trends_keep_four_newest_months():
    sales = _sales(
        sale(1, 100, sale_date="2024-01-05"),
        sale(2, 200, sale_date="2024-02-05"),
        sale(3, 300, sale_date="2024-03-05"),
        sale(4, 400, sale_date="2024-04-05"),
        sale(5, 500, sale_date="2024-05-05"),
        sale(6, 999, sale_date=None),
    )
    purchases = _purchases(purchase(1, 1, 10, 10, purchase_date="2024-05-20"))

    trends = build_monthly_trends(sales, purchases, expense_rate=0.10)

    assert [t.month for t in trends] == ["May 2024", "Apr 2024", "Mar 2024", "Feb 2024"]
    may = trends[0]
    assert may.revenue == pytest.approx(500)
    assert may.cost == pytest.approx(100)
    assert may.expenses == pytest.approx(50)
    assert may.profit == pytest.approx(350)
    assert may.margin == pytest.approx(70)


def test_low_stock_uses_effective_stock():
    products = [
        Product.from_api(product(1, "Flour", stock=100)),
        Product.from_api(product(2, "Sugar", stock=30)),
        Product.from_api(product(3, "Salt", stock=20)),
    ]
    sales = _sales(
        sale(1, 0, items=[(1, 30, 1.0), (2, 15, 1.0)]),
        sale(2, 0, items=[(1, 25, 1.0)]),
    )

    low = detect_low_stock(products, sales)

    assert [i.name for i in low] == ["Sugar", "Salt"]
    sugar = low[0]
    assert sugar.sold == 15
    assert sugar.effective_stock == 15
    assert sugar.threshold == 20


def test_low_stock_can_use_product_min_stock():
    products = [
        Product.from_api(product(1, "Flour", stock=50, min_stock=60)),
        Product.from_api(product(2, "Sugar", stock=15)),
    ]
    assert [i.name for i in detect_low_stock(products, [], threshold=20)] == ["Sugar"]
    assert [i.name for i in detect_low_stock(products, [], threshold=20, use_min_stock=True)] == ["Flour", "Sugar"]


def test_effective_stock_without_sales_is_initial_stock():
    p = Product.from_api(product(1, "Flour", stock=37))
    assert effective_stock(p, sold_quantities([])) == 37


@pytest.mark.parametrize("cost", [0, 1, 250.5, 1e9])
def test_margin_is_zero_without_revenue(cost):
    s = profit_summary([], _purchases(purchase(1, 1, 1, cost)))
    assert s.profit_margin == 0
