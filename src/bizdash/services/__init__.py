from .customer_service import CustomerService
from .vendor_service import VendorService
from .product_service import ProductService
from .sales_service import SalesService
from .purchase_service import PurchaseService
from .inventory_service import InventoryService
from .dashboard_service import DashboardService
from .reporting_service import ReportingService

__all__ = [
    "CustomerService",
    "VendorService",
    "ProductService",
    "SalesService",
    "PurchaseService",
    "InventoryService",
    "DashboardService",
    "ReportingService",
]
