from __future__ import annotations

from bizdash.services.analytics import effective_stock, low_stock_limit, sold_quantities
from bizdash.services.customer_service import CustomerService
from bizdash.services.inventory_service import InventoryService
from bizdash.services.periods import read_field
from bizdash.services.product_service import ProductService
from bizdash.services.purchase_service import PurchaseService
from bizdash.services.vendor_service import VendorService
from bizdash.ui.views.resource_view import Column, FormField, ViewConfig


def _money(v: float) -> str:
    return f"${v:,.2f}"


def _product_choices(snap):
    return [(p.id, p.name) for p in snap.products]


def _customer_choices(snap):
    return [(c.id, c.shop_name) for c in snap.customers]


def _vendor_choices(snap):
    return [(v.id, v.name) for v in snap.vendors]


def _status_choices(*statuses):
    # Status values act as their own ids.
    return lambda snap: [(s, s) for s in statuses]


# ---------- Sales ----------

def _save_sale(container, data, existing, snap):
    products = snap.products if snap else None
    if existing is None:
        container.sales.record_sale(
            data.get("customer"), data.get("product"), data.get("quantity"),
            status=data.get("status") or "pending", products=products,
        )
    else:
        first = existing.items[0] if existing.items else None
        # The form shows the first line only; leave the lines alone unless it changed.
        unchanged = first is not None and (str(data.get("product")), str(data.get("quantity"))) == (
            str(first.product_id), str(first.quantity))
        container.sales.update_sale(
            existing,
            customer_id=data.get("customer"),
            product_id=None if unchanged else data.get("product"),
            quantity=None if unchanged else (data.get("quantity") or None),
            status=data.get("status"),
            products=products,
        )


def _sale_row(s, snap, date_field):
    customers = {c.id: c.shop_name for c in snap.customers}
    names = {p.id: p.name for p in snap.products}
    first = s.items[0] if s.items else None
    return (
        s.id,
        read_field(s, date_field) or "",
        customers.get(s.customer_id, "Unknown"),
        names.get(first.product_id, "Unknown") if first else "",
        s.units,
        _money(s.total_amount),
        s.status,
    )


def _sale_form(s):
    first = s.items[0] if s.items else None
    return {
        "customer": s.customer_id,
        "product": first.product_id if first else None,
        "quantity": first.quantity if first else "",
        "status": s.status,
    }


def sales_config(app) -> ViewConfig:
    def summary(records, snap):
        st = app.container.sales.summarize(records)
        return [
            ("Today", _money(st.today_sales)),
            ("Units sold", str(st.units_sold)),
            ("Average sale", _money(st.average_sale)),
            ("Pending", str(st.status_counts.get("pending", 0))),
        ]

    return ViewConfig(
        title="Sales",
        service="sales",
        columns=[
            Column("id", "ID", 60), Column("date", "Date", 120), Column("customer", "Customer", 160),
            Column("product", "Product", 160), Column("units", "Units", 70),
            Column("total", "Total", 100), Column("status", "Status", 90),
        ],
        fields=[
            FormField("customer", "Customer", choices=_customer_choices),
            FormField("product", "Product", choices=_product_choices),
            FormField("quantity", "Quantity", default=lambda: "1"),
            FormField("status", "Status", choices=_status_choices("pending", "completed", "cancel")),
        ],
        row=lambda s, snap: _sale_row(s, snap, app.container.sales.date_field),
        form_values=_sale_form,
        summary=summary,
        save=_save_sale,
    )


# ---------- Inventory (wholesale purchases) ----------

def inventory_config(app) -> ViewConfig:
    def row(p, snap):
        return (
            p.id,
            p.purchase_date or "",
            PurchaseService.product_name(p.product_id, snap.products),
            next((v.name for v in snap.vendors if v.id == p.vendor_id), "N/A"),
            p.quantity,
            _money(p.cost_per_unit),
            _money(p.total_cost),
        )

    def summary(records, snap):
        st = PurchaseService.summarize(records)
        value = InventoryService.valuation(snap.products)
        top = PurchaseService.product_name(st.most_purchased_product_id, snap.products) if st.count else "-"
        return [
            ("Purchases", str(st.count)),
            ("Total spent", _money(st.total_spent)),
            ("Stock value", _money(value.total_stock_value)),
            ("Potential revenue", _money(value.potential_revenue)),
            ("Most purchased", top),
        ]

    return ViewConfig(
        title="Inventory",
        service="purchases",
        records=lambda snap: snap.purchases,
        columns=[
            Column("id", "ID", 60), Column("date", "Date", 110), Column("product", "Product", 170),
            Column("vendor", "Vendor", 150), Column("qty", "Qty", 60),
            Column("cost", "Cost/unit", 90), Column("total", "Total", 100),
        ],
        fields=[
            FormField("product", "Product", choices=_product_choices),
            FormField("vendor", "Vendor", choices=_vendor_choices),
            FormField("quantity", "Quantity"),
            FormField("cost_per_unit", "Cost per unit"),
            FormField("purchase_date", "Date (YYYY-MM-DD)"),
        ],
        row=row,
        form_values=lambda p: {
            "product": p.product_id,
            "vendor": p.vendor_id,
            "quantity": p.quantity,
            "cost_per_unit": p.cost_per_unit,
            "purchase_date": p.purchase_date,
        },
        summary=summary,
    )


# ---------- Vendors ----------

def vendors_config(app) -> ViewConfig:
    def summary(records, snap):
        st = VendorService.summarize(records)
        return [
            ("Vendors", str(st.total)),
            ("Active", str(st.active)),
            ("Purchases", str(st.total_purchases)),
            ("Avg rating", f"{st.average_rating:.1f}"),
        ]

    return ViewConfig(
        title="Vendors",
        service="vendors",
        columns=[
            Column("id", "ID", 60), Column("name", "Name", 170), Column("contact", "Contact", 140),
            Column("phone", "Phone", 110), Column("email", "Email", 170),
            Column("rating", "Rating", 70), Column("status", "Status", 80),
        ],
        fields=[
            FormField("name", "Name"),
            FormField("contact_person", "Contact person"),
            FormField("phone_number", "Phone"),
            FormField("email", "Email"),
            FormField("address", "Address"),
            FormField("specialties", "Specialties"),
            FormField("rating", "Rating (0-5)"),
            FormField("status", "Status", choices=_status_choices("active", "inactive")),
        ],
        row=lambda v, snap: (v.id, v.name, v.contact_person, v.phone_number, v.email, f"{v.rating:.1f}", v.status),
        form_values=lambda v: v.to_payload(),
        summary=summary,
    )


# ---------- Customers ----------

def customers_config(app) -> ViewConfig:
    def summary(records, snap):
        st = CustomerService.summarize(records)
        return [
            ("Customers", str(st.total)),
            ("Active", str(st.active)),
            ("Outstanding", _money(st.outstanding_amount)),
            ("Credit limit", _money(st.credit_limit)),
        ]

    return ViewConfig(
        title="Customers",
        service="customers",
        columns=[
            Column("id", "ID", 60), Column("shop", "Shop", 170), Column("contact", "Contact", 140),
            Column("phone", "Phone", 110), Column("type", "Type", 90),
            Column("credit", "Credit limit", 100), Column("outstanding", "Outstanding", 100),
            Column("status", "Status", 80),
        ],
        fields=[
            FormField("shop_name", "Shop name"),
            FormField("contact_person", "Contact person"),
            FormField("phone_number", "Phone"),
            FormField("email", "Email"),
            FormField("address", "Address"),
            FormField("shop_type", "Shop type"),
            FormField("credit_limit", "Credit limit"),
            FormField("status", "Status", choices=_status_choices("active", "inactive")),
        ],
        row=lambda c, snap: (
            c.id, c.shop_name, c.contact_person, c.phone_number, c.shop_type,
            _money(c.credit_limit), _money(c.outstanding_amount), c.status,
        ),
        form_values=lambda c: c.to_payload(),
        summary=summary,
    )


# ---------- Products ----------

def products_config(app) -> ViewConfig:
    cfg = app.container.settings

    def is_low(p, snap):
        limit = low_stock_limit(p, cfg.low_stock_threshold, cfg.use_product_min_stock)
        return effective_stock(p, sold_quantities(snap.sales)) <= limit

    def row(p, snap):
        return (
            p.id,
            p.name,
            _money(p.retail_price),
            _money(p.wholesale_cost),
            p.stock_quantity,
            effective_stock(p, sold_quantities(snap.sales)),
            ProductService.vendor_name(p, snap.vendors),
            ProductService.last_purchase_date(p.id, snap.purchases) or p.last_purchase_date or "-",
        )

    def summary(records, snap):
        st = app.container.products.summarize(records, snap.sales)
        return [
            ("Products", str(st.total)),
            ("Low stock", str(st.low_stock)),
            ("Avg retail", _money(st.average_retail_price)),
        ]

    return ViewConfig(
        title="Products",
        service="products",
        columns=[
            Column("id", "ID", 60), Column("name", "Name", 180), Column("retail", "Retail", 90),
            Column("cost", "Wholesale", 90), Column("stock", "Stock", 70),
            Column("effective", "Available", 80), Column("vendor", "Vendor", 140),
            Column("last", "Last purchase", 110),
        ],
        fields=[
            FormField("name", "Name"),
            FormField("retail_price", "Retail price"),
            FormField("wholesale_cost", "Wholesale cost"),
            FormField("stock_quantity", "Stock"),
            FormField("min_stock", "Min stock"),
            FormField("max_stock", "Max stock"),
            FormField("vendor", "Vendor", choices=_vendor_choices),
            FormField("description", "Description"),
        ],
        row=row,
        form_values=lambda p: p.to_payload(),
        summary=summary,
        low_tag=is_low,
    )


ALL_CONFIGS = (sales_config, inventory_config, vendors_config, customers_config, products_config)
