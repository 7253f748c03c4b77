import json
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from bizdash.config import Settings
from bizdash.domain.errors import ApiUnavailableError
from bizdash.repositories.api_repo import ApiRepository
from bizdash.services.reporting_service import ReportingService

from conftest import FakeTransport, product, purchase, sale

NOW = datetime(2024, 5, 20, 9, 30)


def _data():
    return {
        "products": [product(1, "Rice", stock=100), product(2, "Oil", stock=12)],
        "sales": [
            sale(1, 1000, items=[(1, 10, 100.0)], sale_date="2024-05-03"),
            sale(2, 500, items=[(1, 5, 100.0)], sale_date="2024-04-10"),
            sale(3, 100, items=[(2, 2, 50.0)], sale_date="2023-12-24"),
        ],
        "wholesalepurchases": [
            purchase(1, 1, 30, 20.0, purchase_date="2024-05-04"),
            purchase(2, 1, 10, 20.0, purchase_date="2024-04-11"),
        ],
    }


def _service(data=None, failing=(), **settings):
    repo = ApiRepository(FakeTransport(data if data is not None else _data(), failing=failing))
    return ReportingService(repo, Settings(**settings))


def test_profit_loss_current_month_with_growth():
    report = _service().profit_loss("current-month", now=NOW)

    s = report.summary
    assert report.period == "current-month"
    assert s.total_revenue == pytest.approx(1000)
    assert s.total_cost == pytest.approx(600)
    assert s.expenses == pytest.approx(100)
    assert s.net_profit == pytest.approx(300)
    assert s.profit_margin == pytest.approx(30)
    # April: 500 - 200 - 50 = 250
    assert s.profit_growth == pytest.approx(20)

    assert len(report.product_profitability) == 1
    rice = report.product_profitability[0]
    assert (rice.product, rice.units_sold, rice.profit, rice.performance) == ("Rice", 10, 400, "Excellent")


def test_monthly_trends_ignore_the_period_filter():
    report = _service().profit_loss("current-month", now=NOW)
    assert [m.month for m in report.monthly_trends] == ["May 2024", "Apr 2024", "Dec 2023"]


def test_all_period_uses_every_record():
    report = _service().profit_loss("all", now=NOW)
    assert report.summary.total_revenue == pytest.approx(1600)
    assert report.summary.total_cost == pytest.approx(800)


def test_settings_drive_expense_rate_and_limits():
    report = _service(expense_rate=0.2, monthly_trend_limit=2).profit_loss("all", now=NOW)
    assert report.summary.expenses == pytest.approx(320)
    assert len(report.monthly_trends) == 2


def test_report_fails_loudly_when_api_is_down():
    with pytest.raises(ApiUnavailableError):
        _service(failing={"sales"}).profit_loss("all", now=NOW)


def test_low_stock_report():
    low = _service().low_stock()
    assert [(i.name, i.effective_stock) for i in low] == [("Oil", 10)]


def test_report_to_dict_shape():
    svc = _service()
    d = svc.report_to_dict(svc.profit_loss("current-month", now=NOW))

    assert d["period"] == "current-month"
    assert d["summary"]["netProfit"] == pytest.approx(300)
    assert d["productProfitability"][0]["performance"] == "Excellent"
    assert d["monthlyTrends"][0]["date"] == "2024-05-01"
    assert d["generatedAt"] == "2024-05-20T09:30:00"


def test_export_json(tmp_path: Path):
    svc = _service()
    out = svc.export_json(svc.profit_loss("year", now=NOW), tmp_path / "report.json")

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["period"] == "year"
    assert data["summary"]["totalRevenue"] == pytest.approx(1500)


def test_export_excel(tmp_path: Path):
    svc = _service()
    out = svc.export_excel(svc.profit_loss("current-month", now=NOW), tmp_path / "report.xlsx")

    wb = load_workbook(out)
    assert wb.sheetnames == ["Summary", "Products", "Monthly"]

    ws = wb["Summary"]
    assert ws["B3"].value == "Current Month"
    assert ws["A10"].value == "Net Profit"
    assert ws["B10"].value == pytest.approx(300)

    products = wb["Products"]
    assert products["A2"].value == "Rice"
    assert products["E2"].value == pytest.approx(400)

    monthly = wb["Monthly"]
    assert [monthly.cell(row=r, column=1).value for r in range(2, 5)] == ["May 2024", "Apr 2024", "Dec 2023"]
