"""Models package - exports all SQLAlchemy models."""
# Catalog (read by the sales engine)
from sales_catalog.models.product import Product
from sales_catalog.models.client import Client
from sales_catalog.models.discount import Discount

# Sales
from sales_catalog.models.sale import Sale, PaymentMethod
from sales_catalog.models.sale_item import SaleItem

__all__ = [
    'Product', 'Client', 'Discount',
    'Sale', 'PaymentMethod', 'SaleItem',
]
