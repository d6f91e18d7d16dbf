"""
SQLAlchemy models package.
Import all models here to ensure they're registered with Base.metadata.
"""
from purifier.models.users import User
from purifier.models.customers import Customer
from purifier.models.products import Product
from purifier.models.orders import Order
from purifier.models.services import Service
from purifier.models.invoices import Invoice

__all__ = [
    "User",
    "Customer",
    "Product",
    "Order",
    "Service",
    "Invoice",
]
