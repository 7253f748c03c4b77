from __future__ import annotations

import tkinter as tk
from tkinter import ttk, filedialog
from datetime import date

from bizdash.services.periods import Period


class FinancialView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Financial")

        self.period = tk.StringVar(value=Period.CURRENT_MONTH.value)
        self.report = None
        self._build()

    def _build(self):
        tab = self.frame

        top = ttk.Frame(tab)
        top.pack(fill="x", padx=10, pady=(10, 4))

        ttk.Label(top, text="Period").pack(side="left")
        box = ttk.Combobox(top, textvariable=self.period, state="readonly", width=16,
                           values=[p.value for p in Period])
        box.pack(side="left", padx=8)
        box.bind("<<ComboboxSelected>>", lambda _e: self.refresh())

        ttk.Button(top, text="Export JSON", command=self.export_json).pack(side="right", padx=(6, 0))
        ttk.Button(top, text="Export Excel", command=self.export_excel).pack(side="right")

        summary = ttk.LabelFrame(tab, text="Profit & Loss")
        summary.pack(fill="x", padx=10, pady=6)

        self.summary_labels: dict[str, ttk.Label] = {}
        items = [
            ("total_revenue", "Revenue"),
            ("total_cost", "Cost of goods"),
            ("gross_profit", "Gross profit"),
            ("expenses", "Expenses"),
            ("net_profit", "Net profit"),
            ("profit_margin", "Margin %"),
            ("profit_growth", "Growth %"),
        ]
        for i, (key, label) in enumerate(items):
            ttk.Label(summary, text=label, style="KPI.TLabel").grid(row=0, column=i, sticky="w", padx=10, pady=(8, 0))
            w = ttk.Label(summary, text="-", style="KPIValue.TLabel")
            w.grid(row=1, column=i, sticky="w", padx=10, pady=(0, 8))
            self.summary_labels[key] = w

        body = ttk.Frame(tab)
        body.pack(fill="both", expand=True, padx=10, pady=6)
        body.columnconfigure(0, weight=1)
        body.columnconfigure(1, weight=1)
        body.rowconfigure(0, weight=1)

        self.trend_canvas = tk.Canvas(body, height=220, bg="#f8fafc", highlightthickness=1, highlightbackground="#cbd5e1")
        self.trend_canvas.grid(row=0, column=0, sticky="nsew", padx=(0, 6))

        products = ttk.LabelFrame(body, text="Product profitability")
        products.grid(row=0, column=1, sticky="nsew", padx=(6, 0))

        cols = ("product", "units", "revenue", "profit", "margin", "performance")
        self.tree = ttk.Treeview(products, columns=cols, show="headings", height=12)
        for c, w in zip(cols, (160, 60, 90, 90, 70, 90)):
            self.tree.heading(c, text=c.capitalize())
            self.tree.column(c, width=w, anchor="w")
        self.tree.pack(fill="both", expand=True, padx=6, pady=6)

        self._build_invoices(tab)

    def _build_invoices(self, tab):
        box = ttk.LabelFrame(tab, text="Invoices")
        box.pack(fill="x", padx=10, pady=(0, 10))

        self.invoice_labels: dict[str, ttk.Label] = {}
        for i, (key, label) in enumerate([("paid", "Paid"), ("pending", "Pending"), ("overdue", "Overdue")]):
            ttk.Label(box, text=label, style="KPI.TLabel").grid(row=0, column=i * 2, sticky="w", padx=(10, 4), pady=6)
            w = ttk.Label(box, text="-", style="KPIValue.TLabel")
            w.grid(row=0, column=i * 2 + 1, sticky="w", padx=(0, 16), pady=6)
            self.invoice_labels[key] = w

        form = ttk.Frame(box)
        form.grid(row=1, column=0, columnspan=6, sticky="ew", padx=10, pady=(0, 6))

        ttk.Label(form, text="Customer").grid(row=0, column=0, sticky="w")
        self.inv_customer = ttk.Combobox(form, state="readonly", width=26)
        self.inv_customer.grid(row=0, column=1, sticky="w", padx=(4, 12))
        ttk.Label(form, text="Due date (YYYY-MM-DD)").grid(row=0, column=2, sticky="w")
        self.inv_due = ttk.Entry(form, width=12)
        self.inv_due.grid(row=0, column=3, sticky="w", padx=(4, 12))

        ttk.Label(form, text="Product").grid(row=1, column=0, sticky="w", pady=(6, 0))
        self.inv_product = ttk.Combobox(form, state="readonly", width=26)
        self.inv_product.grid(row=1, column=1, sticky="w", padx=(4, 12), pady=(6, 0))
        ttk.Label(form, text="Qty").grid(row=1, column=2, sticky="w", pady=(6, 0))
        self.inv_qty = ttk.Entry(form, width=6)
        self.inv_qty.insert(0, "1")
        self.inv_qty.grid(row=1, column=3, sticky="w", padx=(4, 12), pady=(6, 0))
        ttk.Button(form, text="Add line", command=self.add_invoice_line).grid(row=1, column=4, padx=4, pady=(6, 0))
        ttk.Button(form, text="Remove line", command=self.remove_invoice_line).grid(row=1, column=5, padx=4, pady=(6, 0))

        cols = ("product", "qty", "price", "total")
        self.inv_lines = ttk.Treeview(box, columns=cols, show="headings", height=4)
        for c, w in zip(cols, (200, 60, 90, 90)):
            self.inv_lines.heading(c, text=c.capitalize())
            self.inv_lines.column(c, width=w, anchor="w")
        self.inv_lines.grid(row=2, column=0, columnspan=6, sticky="ew", padx=10)

        bottom = ttk.Frame(box)
        bottom.grid(row=3, column=0, columnspan=6, sticky="ew", padx=10, pady=6)
        self.inv_total = ttk.Label(bottom, text="Total: $0.00", style="KPIValue.TLabel")
        self.inv_total.pack(side="left")
        ttk.Button(bottom, text="Create invoice", command=self.on_create_invoice).pack(side="right")

        self._customers: dict[str, int] = {}
        self._products: dict[str, object] = {}
        self._lines: list[dict] = []
        self._snapshot = None

    def show_invoices(self, snap):
        self._snapshot = snap
        self._customers = {f"{c.id} — {c.shop_name}": c.id for c in snap.customers}
        self._products = {f"{p.id} — {p.name}": p for p in snap.products}
        self.inv_customer["values"] = list(self._customers)
        self.inv_product["values"] = list(self._products)

        st = self.app.container.sales.invoice_summary(snap.sales)
        self.invoice_labels["paid"].config(text=str(st.paid))
        self.invoice_labels["pending"].config(text=f"{st.pending} (${st.pending_amount:,.2f})")
        self.invoice_labels["overdue"].config(text=f"{st.overdue} (${st.overdue_amount:,.2f})")

    def add_invoice_line(self):
        product = self._products.get(self.inv_product.get())
        if product is None:
            self.app.toast("Pick a product first.", kind="warn")
            return
        qty = self.inv_qty.get().strip()
        self._lines.append({"product": product.id, "quantity": qty})
        self.inv_lines.insert("", "end", values=(product.name, qty, f"{product.retail_price:,.2f}", self._line_total(product, qty)))
        self._update_total()

    def remove_invoice_line(self):
        for iid in self.inv_lines.selection():
            idx = self.inv_lines.index(iid)
            self.inv_lines.delete(iid)
            del self._lines[idx]
        self._update_total()

    @staticmethod
    def _line_total(product, qty: str) -> str:
        try:
            return f"{product.retail_price * int(qty):,.2f}"
        except ValueError:
            return "-"

    def _update_total(self):
        prices = {p.id: p.retail_price for p in self._products.values()}
        total = 0.0
        for line in self._lines:
            try:
                total += prices.get(line["product"], 0.0) * int(line["quantity"])
            except ValueError:
                continue
        self.inv_total.config(text=f"Total: ${total:,.2f}")

    def on_create_invoice(self):
        try:
            self.app.container.sales.create_invoice(
                self._customers.get(self.inv_customer.get()),
                list(self._lines),
                due_date=self.inv_due.get().strip() or None,
                products=self._snapshot.products if self._snapshot else None,
            )
        except Exception as e:
            self.app.handle_error("Invoice failed", e, "Could not create the invoice.")
            return
        self.app.toast("Invoice created.", kind="success")
        self.clear_invoice_form()
        self.app.refresh_all(show_toast=False)

    def clear_invoice_form(self):
        self._lines = []
        for iid in self.inv_lines.get_children():
            self.inv_lines.delete(iid)
        self.inv_customer.set("")
        self.inv_product.set("")
        self.inv_due.delete(0, tk.END)
        self._update_total()

    def refresh(self):
        try:
            self.report = self.app.container.reporting.profit_loss(self.period.get())
        except Exception as e:
            self.report = None
            self.app.handle_error("Report failed", e, "Could not build the profit & loss report.")
            return

        s = self.report.summary
        for key, w in self.summary_labels.items():
            value = getattr(s, key)
            w.config(text=f"{value:.1f}%" if key in ("profit_margin", "profit_growth") else f"${value:,.2f}")

        for iid in self.tree.get_children():
            self.tree.delete(iid)
        for p in self.report.product_profitability:
            self.tree.insert("", "end", values=(
                p.product, p.units_sold, f"{p.revenue:,.2f}", f"{p.profit:,.2f}", f"{p.margin:.1f}", p.performance,
            ))

        data = [(m.month, m.profit) for m in self.report.monthly_trends]
        self._draw_bar_chart(self.trend_canvas, "Monthly profit", data, color="#16a34a")

    def _draw_bar_chart(self, canvas: tk.Canvas, title: str, data: list[tuple[str, float]], color: str = "#2b78c2"):
        canvas.delete("all")
        w, h = int(canvas.winfo_width() or 560), int(canvas.winfo_height() or 220)
        canvas.create_text(12, 16, text=title, anchor="w", font=("Segoe UI", 10, "bold"), fill="#0f172a")
        if not data:
            canvas.create_text(w // 2, h // 2, text="No data", fill="#64748b")
            return
        maxv = max(abs(v) for _, v in data) or 1
        bw = max(24, (w - 40) // len(data))
        for i, (label, val) in enumerate(data):
            x0 = 24 + i * bw
            x1 = x0 + bw - 8
            y1 = h - 30
            y0 = y1 - int((abs(val) / maxv) * (h - 70))
            canvas.create_rectangle(x0, y0, x1, y1, fill=color if val >= 0 else "#d64545", outline="")
            canvas.create_text((x0 + x1) // 2, y1 + 12, text=label, font=("Segoe UI", 8), fill="#475569")
            canvas.create_text((x0 + x1) // 2, y0 - 8, text=f"{val:.0f}", font=("Segoe UI", 8), fill="#0f172a")

    def _ask_path(self, ext: str, kind: str):
        return filedialog.asksaveasfilename(
            title="Save report as",
            defaultextension=ext,
            filetypes=[(kind, f"*{ext}")],
            initialfile=f"profit_loss_{self.period.get()}_{date.today().isoformat()}{ext}",
        )

    def export_json(self):
        if self.report is None:
            self.app.toast("No report loaded.", kind="warn")
            return
        path = self._ask_path(".json", "JSON files")
        if not path:
            return
        try:
            self.app.container.reporting.export_json(self.report, path)
            self.app.toast("JSON report exported.", kind="success")
        except Exception as e:
            self.app.handle_error("Export error", e, "JSON export failed.")

    def export_excel(self):
        if self.report is None:
            self.app.toast("No report loaded.", kind="warn")
            return
        path = self._ask_path(".xlsx", "Excel files")
        if not path:
            return
        try:
            self.app.container.reporting.export_excel(self.report, path)
            self.app.toast("Excel report exported.", kind="success")
        except Exception as e:
            self.app.handle_error("Export error", e, "Excel export failed.")
