from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from datetime import date
import logging

from bizdash.api.resources import RESOURCES
from bizdash.domain.errors import AppError
from bizdash.services.analytics import detect_low_stock
from bizdash.ui.views.dashboard_view import DashboardView
from bizdash.ui.views.financial_view import FinancialView
from bizdash.ui.views.manager_views import ALL_CONFIGS
from bizdash.ui.views.resource_view import ResourceView

log = logging.getLogger(__name__)


class App(tk.Tk):
    def __init__(self, container, logs_dir: str):
        super().__init__()
        self.title("Business Dashboard")
        self.geometry("1360x760")
        self.minsize(1180, 660)

        self.container = container
        self.logs_dir = logs_dir

        self.status_var = tk.StringVar(value="")
        self._toast_after_id = None

        self._build_styles()
        self._build_topbar()

        main = ttk.Frame(self)
        main.pack(fill="both", expand=True, padx=12, pady=(0, 8))

        self.sidebar = ttk.Frame(main)
        self.sidebar.pack(side="left", fill="y", padx=(0, 10))

        self.content = ttk.Frame(main)
        self.content.pack(side="right", fill="both", expand=True)

        self.nb = ttk.Notebook(self.content, style="Side.TNotebook")
        self.nb.pack(fill="both", expand=True)

        # Views (tabs hidden; the sidebar switches between them)
        self.dashboard_view = DashboardView(self.nb, self)
        self.resource_views = [ResourceView(self.nb, self, make(self)) for make in ALL_CONFIGS]
        self.financial_view = FinancialView(self.nb, self)

        self._build_sidebar()
        self._build_status_bar()

        self.refresh_all(show_toast=False)
        self.toast("Ready.", kind="info", ms=1200)

    def _build_styles(self):
        style = ttk.Style(self)
        style.layout("Side.TNotebook.Tab", [])
        style.configure("Side.TNotebook", tabmargins=0)

        style.configure("Big.TButton", padding=(14, 10))
        style.configure("Title.TLabel", font=("Segoe UI", 12, "bold"))
        style.configure("KPI.TLabel", font=("Segoe UI", 10))
        style.configure("KPIValue.TLabel", font=("Segoe UI", 11, "bold"))

    def _build_topbar(self):
        top = ttk.Frame(self)
        top.pack(fill="x", padx=12, pady=10)

        ttk.Label(top, text="Business Dashboard", style="Title.TLabel").pack(side="left")
        ttk.Label(top, text=f"API: {self.container.settings.api_base_url}").pack(side="right")

    def _build_sidebar(self):
        box = ttk.LabelFrame(self.sidebar, text="Navigate")
        box.pack(fill="x", pady=(0, 10))

        views = [self.dashboard_view, *self.resource_views, self.financial_view]
        for i, view in enumerate(views):
            text = self.nb.tab(view.frame, "text")
            ttk.Button(
                box, text=text, style="Big.TButton",
                command=lambda f=view.frame: self.nb.select(f),
            ).pack(fill="x", padx=10, pady=(10 if i == 0 else 4, 4))

        ttk.Button(box, text="Refresh", style="Big.TButton",
                   command=self.refresh_all).pack(fill="x", padx=10, pady=(6, 10))

        lowbox = ttk.LabelFrame(self.sidebar, text="Low Stock (double click)")
        lowbox.pack(fill="both", expand=True)

        self.low_list = tk.Listbox(lowbox, height=10)
        self.low_list.pack(fill="both", expand=True, padx=10, pady=10)
        self.low_list.bind("<Double-1>", self.on_low_stock_open)
        self._low_items = []

    def _build_status_bar(self):
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=12, pady=(0, 10))
        ttk.Label(bar, textvariable=self.status_var).pack(side="left")
        ttk.Label(bar, text=f"Logs: {self.logs_dir}").pack(side="right")

    def toast(self, msg: str, kind: str = "info", ms: int = 2500):
        prefix = {"info": "ℹ ", "success": "✅ ", "warn": "⚠ ", "error": "❌ "}.get(kind, "")
        self.status_var.set(prefix + msg)
        if self._toast_after_id is not None:
            self.after_cancel(self._toast_after_id)
        self._toast_after_id = self.after(ms, lambda: self.status_var.set(""))

    def handle_error(self, title: str, exc: Exception, fallback: str):
        if isinstance(exc, AppError):
            log.warning("%s: %s", title, exc)
            message = str(exc) or fallback
        else:
            log.exception("%s: %s", title, exc)
            message = fallback
        self.toast(message, kind="error", ms=4000)
        messagebox.showerror(title, message, parent=self)

    # ---------- Refresh ----------
    def refresh_all(self, show_toast: bool = True):
        # One fetch per refresh; every tab renders from the same snapshot.
        snap = self.container.repo.load(*RESOURCES)

        for view in self.resource_views:
            view.refresh(snap)

        stats = self.container.dashboard.compute(snap, date.today())
        self.dashboard_view.show(stats)
        self.refresh_low_stock_panel(snap)
        self.financial_view.show_invoices(snap)
        self.financial_view.refresh()

        if show_toast:
            self.toast("Refreshed.", kind="info", ms=1200)

    def refresh_low_stock_panel(self, snap):
        cfg = self.container.settings
        self.low_list.delete(0, tk.END)
        self._low_items = []
        for item in detect_low_stock(snap.products, snap.sales, cfg.low_stock_threshold, cfg.use_product_min_stock):
            self.low_list.insert(tk.END, f"{item.name} ({item.effective_stock}/{item.threshold})")
            self._low_items.append(item.product_id)

    def on_low_stock_open(self, _evt=None):
        sel = self.low_list.curselection()
        if not sel:
            return
        products = next(v for v in self.resource_views if v.config.service == "products")
        self.nb.select(products.frame)
        products.select_record(self._low_items[sel[0]])
        self.toast("Selected low stock product.", kind="warn", ms=2000)
