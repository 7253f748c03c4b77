from .dashboard_view import DashboardView
from .resource_view import ResourceView, ViewConfig
from .financial_view import FinancialView

__all__ = ["DashboardView", "ResourceView", "ViewConfig", "FinancialView"]
