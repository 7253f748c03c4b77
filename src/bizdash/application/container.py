from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from bizdash.api.client import ApiClient
from bizdash.config import Settings
from bizdash.repositories.api_repo import ApiRepository
from bizdash.services.customer_service import CustomerService
from bizdash.services.dashboard_service import DashboardService
from bizdash.services.inventory_service import InventoryService
from bizdash.services.product_service import ProductService
from bizdash.services.purchase_service import PurchaseService
from bizdash.services.reporting_service import ReportingService
from bizdash.services.sales_service import SalesService
from bizdash.services.vendor_service import VendorService


@dataclass(frozen=True)
class AppContainer:
    settings: Settings
    client: ApiClient
    repo: ApiRepository
    customers: CustomerService
    vendors: VendorService
    products: ProductService
    sales: SalesService
    purchases: PurchaseService
    inventory: InventoryService
    dashboard: DashboardService
    reporting: ReportingService


def build_container(settings: Settings, session: Optional[requests.Session] = None) -> AppContainer:
    client = ApiClient(
        settings.api_base_url,
        token=settings.api_token,
        timeout=settings.request_timeout,
        session=session,
    )
    repo = ApiRepository(client)
    threshold = settings.low_stock_threshold
    use_min = settings.use_product_min_stock

    return AppContainer(
        settings=settings,
        client=client,
        repo=repo,
        customers=CustomerService(repo),
        vendors=VendorService(repo),
        products=ProductService(repo, threshold, use_min),
        sales=SalesService(repo, date_field=settings.sale_date_field),
        purchases=PurchaseService(repo),
        inventory=InventoryService(repo, threshold, use_min),
        dashboard=DashboardService(repo, threshold, use_min, date_field=settings.sale_date_field),
        reporting=ReportingService(repo, settings),
    )
