from __future__ import annotations

from tkinter import ttk


class DashboardView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Dashboard")
        self._build()

    def _build(self):
        tab = self.frame

        kpi = ttk.LabelFrame(tab, text="Overview")
        kpi.pack(fill="x", padx=10, pady=10)

        self.kpis: dict[str, ttk.Label] = {}
        items = [
            ("total_sales", "Total sales"),
            ("today_sales", "Today"),
            ("profit", "Profit"),
            ("pending_payments", "Pending payments"),
            ("low_stock_count", "Low stock"),
            ("customers", "Customers"),
        ]
        for i, (key, label) in enumerate(items):
            ttk.Label(kpi, text=label, style="KPI.TLabel").grid(row=0, column=i, sticky="w", padx=12, pady=(8, 0))
            w = ttk.Label(kpi, text="-", style="KPIValue.TLabel")
            w.grid(row=1, column=i, sticky="w", padx=12, pady=(0, 8))
            self.kpis[key] = w

        body = ttk.Frame(tab)
        body.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        body.columnconfigure(0, weight=1)
        body.columnconfigure(1, weight=2)
        body.rowconfigure(0, weight=1)

        top = ttk.LabelFrame(body, text="Top products")
        top.grid(row=0, column=0, sticky="nsew", padx=(0, 6))
        self.top_tree = ttk.Treeview(top, columns=("name", "sold", "revenue"), show="headings", height=8)
        for c, heading, w in (("name", "Product", 160), ("sold", "Sold", 60), ("revenue", "Revenue", 100)):
            self.top_tree.heading(c, text=heading)
            self.top_tree.column(c, width=w, anchor="w")
        self.top_tree.pack(fill="both", expand=True, padx=6, pady=6)

        recent = ttk.LabelFrame(body, text="Recent sales")
        recent.grid(row=0, column=1, sticky="nsew", padx=(6, 0))
        cols = ("id", "customer", "amount", "date", "status")
        self.recent_tree = ttk.Treeview(recent, columns=cols, show="headings", height=8)
        for c, w in zip(cols, (80, 180, 100, 120, 90)):
            self.recent_tree.heading(c, text=c.capitalize())
            self.recent_tree.column(c, width=w, anchor="w")
        self.recent_tree.pack(fill="both", expand=True, padx=6, pady=6)

    def show(self, stats):
        for key, w in self.kpis.items():
            value = getattr(stats, key)
            w.config(text=str(value) if isinstance(value, int) else f"${value:,.2f}")

        for tree in (self.top_tree, self.recent_tree):
            for iid in tree.get_children():
                tree.delete(iid)
        for p in stats.top_products:
            self.top_tree.insert("", "end", values=(p.name, p.sold, f"${p.revenue:,.2f}"))
        for s in stats.recent_sales:
            self.recent_tree.insert("", "end", values=(s.id, s.customer, f"${s.amount:,.2f}", s.date, s.status))
