from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from bizdash.config import Settings
from bizdash.domain.models import LowStockItem, ProfitLossReport
from bizdash.repositories.api_repo import Snapshot
from bizdash.services.analytics import (
    build_monthly_trends,
    detect_low_stock,
    profit_summary,
    rank_product_profitability,
)
from bizdash.services.periods import Period, filter_by_period

log = logging.getLogger("bizdash.reports")


class ReportingService:
    def __init__(self, repo, settings: Settings):
        self.repo = repo
        self.settings = settings

    def profit_loss(self, period: Period | str = Period.CURRENT_MONTH, now: Optional[datetime] = None) -> ProfitLossReport:
        snap = self.repo.load("sales", "wholesalepurchases", "products", strict=True)
        return self.build_report(snap, period, now)

    def build_report(self, snap: Snapshot, period: Period | str, now: Optional[datetime] = None) -> ProfitLossReport:
        period = Period.parse(period)
        now = now or datetime.now()
        cfg = self.settings
        sale_field, purchase_field = cfg.sale_date_field, cfg.purchase_date_field

        sales = filter_by_period(snap.sales, period, sale_field, now)
        purchases = filter_by_period(snap.purchases, period, purchase_field, now)

        previous = profit_summary(
            filter_by_period(snap.sales, Period.LAST_MONTH, sale_field, now),
            filter_by_period(snap.purchases, Period.LAST_MONTH, purchase_field, now),
            cfg.expense_rate,
        )
        summary = profit_summary(sales, purchases, cfg.expense_rate, previous_net_profit=previous.net_profit)

        report = ProfitLossReport(
            period=period.value,
            summary=summary,
            product_profitability=rank_product_profitability(sales, purchases, snap.products, cfg.top_products_limit),
            monthly_trends=build_monthly_trends(
                snap.sales,
                snap.purchases,
                cfg.expense_rate,
                sale_field,
                purchase_field,
                cfg.monthly_trend_limit,
            ),
            generated_at=now.isoformat(timespec="seconds"),
        )
        log.info(
            "profit_loss_report period=%s sales=%s purchases=%s revenue=%.2f net=%.2f",
            period.value, len(sales), len(purchases), summary.total_revenue, summary.net_profit,
        )
        return report

    def low_stock(self) -> list[LowStockItem]:
        snap = self.repo.load("products", "sales", strict=True)
        return detect_low_stock(
            snap.products,
            snap.sales,
            self.settings.low_stock_threshold,
            self.settings.use_product_min_stock,
        )

    # ---------- export ----------

    @staticmethod
    def report_to_dict(report: ProfitLossReport) -> dict:
        s = report.summary
        return {
            "period": report.period,
            "summary": {
                "totalRevenue": s.total_revenue,
                "totalCost": s.total_cost,
                "grossProfit": s.gross_profit,
                "expenses": s.expenses,
                "netProfit": s.net_profit,
                "profitMargin": s.profit_margin,
                "profitGrowth": s.profit_growth,
            },
            "productProfitability": [
                {
                    "productId": p.product_id,
                    "product": p.product,
                    "revenue": p.revenue,
                    "cost": p.cost,
                    "profit": p.profit,
                    "margin": p.margin,
                    "unitsSold": p.units_sold,
                    "performance": p.performance,
                }
                for p in report.product_profitability
            ],
            "monthlyTrends": [
                {
                    "month": m.month,
                    "revenue": m.revenue,
                    "cost": m.cost,
                    "expenses": m.expenses,
                    "profit": m.profit,
                    "margin": m.margin,
                    "date": f"{m.year:04d}-{m.month_number:02d}-01",
                }
                for m in report.monthly_trends
            ],
            "generatedAt": report.generated_at,
        }

    def export_json(self, report: ProfitLossReport, path: Path | str) -> Path:
        out = Path(path)
        out.write_text(json.dumps(self.report_to_dict(report), ensure_ascii=False, indent=2), encoding="utf-8")
        log.info("report_exported format=json path=%s", out)
        return out

    def export_excel(self, report: ProfitLossReport, path: Path | str) -> Path:
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def pct(cell):
            cell.number_format = "0.0"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, end_col: int):
            ref = f"A1:{get_column_letter(end_col)}{ws.max_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        # -------- 1) Summary --------
        s = report.summary
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Profit & Loss"
        ws["A1"].font = Font(bold=True, size=14)

        ws["A3"] = "Period"
        ws["B3"] = Period.parse(report.period).label
        ws["A4"] = "Generated at"
        ws["B4"] = report.generated_at

        rows = [
            ("Total Revenue", s.total_revenue, "money"),
            ("Cost of Goods", s.total_cost, "money"),
            ("Gross Profit", s.gross_profit, "money"),
            (f"Operating Expenses ({self.settings.expense_rate:.0%})", s.expenses, "money"),
            ("Net Profit", s.net_profit, "money"),
            ("Profit Margin %", s.profit_margin, "pct"),
            ("Growth vs last month %", s.profit_growth, "pct"),
        ]
        for i, (label, val, kind) in enumerate(rows):
            r = 6 + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = float(val)
            if kind == "money":
                money(ws[f"B{r}"])
            else:
                pct(ws[f"B{r}"])
        set_widths(ws, {"A": 30, "B": 24})

        # -------- 2) Products --------
        ws2 = wb.create_sheet("Products")
        ws2.append(["Product", "Units", "Revenue", "Cost", "Profit", "Margin %", "Performance"])
        bold_row(ws2, 1)
        for p in report.product_profitability:
            ws2.append([p.product, int(p.units_sold), p.revenue, p.cost, p.profit, p.margin, p.performance])
            r = ws2.max_row
            for col in "CDE":
                money(ws2[f"{col}{r}"])
            pct(ws2[f"F{r}"])
        ws2.freeze_panes = "A2"
        set_widths(ws2, {"A": 34, "B": 8, "C": 16, "D": 16, "E": 16, "F": 10, "G": 14})
        if ws2.max_row >= 2:
            add_table(ws2, "ProductProfitability", 7)

        # -------- 3) Monthly --------
        ws3 = wb.create_sheet("Monthly")
        ws3.append(["Month", "Revenue", "Cost", "Expenses", "Profit", "Margin %"])
        bold_row(ws3, 1)
        for m in report.monthly_trends:
            ws3.append([m.month, m.revenue, m.cost, m.expenses, m.profit, m.margin])
            r = ws3.max_row
            for col in "BCDE":
                money(ws3[f"{col}{r}"])
            pct(ws3[f"F{r}"])
        ws3.freeze_panes = "A2"
        set_widths(ws3, {"A": 12, "B": 16, "C": 16, "D": 16, "E": 16, "F": 10})
        if ws3.max_row >= 2:
            add_table(ws3, "MonthlyTrends", 6)

        out = Path(path)
        wb.save(out)
        log.info("report_exported format=xlsx path=%s", out)
        return out
