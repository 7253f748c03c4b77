from datetime import date, datetime

import pytest

from bizdash.repositories.api_repo import ApiRepository
from bizdash.services.dashboard_service import DashboardService

from conftest import FakeTransport, product, purchase, sale


def _data():
    return {
        "products": [product(1, "Rice", stock=100, retail=10.0), product(2, "Oil", stock=25, retail=5.0)],
        "sales": [
            sale(1, 27, items=[(1, 3, 9.0)], customer=1, sale_date="2024-05-15T08:00:00"),
            sale(2, 40, items=[(2, 10, 4.0)], customer=9, sale_date="2024-01-02"),
            sale(3, 9, items=[(1, 1, 9.0)], status="", customer=1),
        ],
        "customers": [{"id": 1, "shop_name": "Corner"}, {"id": 2, "shop_name": "Kiosk"}],
        "payments": [
            {"id": 1, "amount": 20, "status": "pending"},
            {"id": 2, "amount": 5, "status": "Overdue"},
            {"id": 3, "amount": 100, "status": "paid"},
        ],
        "wholesalepurchases": [purchase(1, 1, 10, 2.0)],
    }


def test_dashboard_stats_value_sales_at_current_price():
    repo = ApiRepository(FakeTransport(_data()))
    svc = DashboardService(repo)

    stats = svc.stats(now=datetime(2024, 5, 15, 18, 0))

    assert stats.total_sales == pytest.approx(90)
    assert stats.today_sales == pytest.approx(30)
    assert stats.pending_payments == pytest.approx(25)
    assert stats.profit == pytest.approx(70)
    assert stats.low_stock_count == 1
    assert stats.customers == 2


def test_dashboard_top_and_recent_sales():
    repo = ApiRepository(FakeTransport(_data()))
    stats = DashboardService(repo).compute(repo.load("products", "sales", "customers"), date(2024, 5, 15))

    assert [(p.name, p.sold, p.revenue) for p in stats.top_products] == [("Oil", 10, 50.0), ("Rice", 4, 40.0)]
    assert [s.id for s in stats.recent_sales] == ["INV-001", "INV-002", "INV-003"]
    first, second, last = stats.recent_sales
    assert first.customer == "Corner"
    assert first.amount == pytest.approx(30)
    assert second.customer == "Unknown"
    assert last.status == "paid"
    assert last.date is None


def test_dashboard_survives_a_failed_resource():
    repo = ApiRepository(FakeTransport(_data(), failing={"payments"}))
    stats = DashboardService(repo).stats(now=datetime(2024, 5, 15))
    assert stats.pending_payments == 0
    assert stats.total_sales == pytest.approx(90)


def test_dashboard_limits():
    data = _data()
    data["sales"] = [sale(i, 1, items=[(1, 1, 1.0)], sale_date=f"2024-05-{i:02d}") for i in range(1, 8)]
    repo = ApiRepository(FakeTransport(data))
    stats = DashboardService(repo, recent_limit=2).compute(repo.load("products", "sales"), date(2024, 5, 15))
    assert [s.id for s in stats.recent_sales] == ["INV-007", "INV-006"]
