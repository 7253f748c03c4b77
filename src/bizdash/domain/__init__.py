from .models import Product, Sale, SaleItem, WholesalePurchase, Customer, Vendor, Payment
from .errors import (
    AppError,
    ValidationError,
    NotFoundError,
    ConfigError,
    ApiError,
    ApiUnavailableError,
)

__all__ = [
    "Product",
    "Sale",
    "SaleItem",
    "WholesalePurchase",
    "Customer",
    "Vendor",
    "Payment",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConfigError",
    "ApiError",
    "ApiUnavailableError",
]
