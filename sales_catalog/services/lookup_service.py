"""
Read-only catalog lookups used by the sales engine.

Products, discounts and clients are owned by the catalog administration;
the sales engine only reads them, outside of the sale write transaction.
"""
from typing import Optional
from uuid import UUID
from sales_catalog.models import Product, Discount, Client


def find_product_by_id(session, product_id: UUID) -> Optional[Product]:
    """Return the product (deleted or not), or None."""
    return session.get(Product, product_id)


def find_discount_by_product_id(session, product_id: UUID) -> Optional[Discount]:
    """Return the discount attached to a product, or None. At most one exists."""
    return session.query(Discount).filter(Discount.product_id == product_id).first()


def find_client_by_id(session, client_id: UUID) -> Optional[Client]:
    """Return a non-deleted client by id, or None."""
    return session.query(Client).filter(
        Client.id == client_id,
        Client.is_deleted == False  # noqa: E712
    ).first()


def find_client_by_tax_id(session, tax_id: str) -> Optional[Client]:
    """Return a non-deleted client by tax id (NIT), or None."""
    return session.query(Client).filter(
        Client.tax_id == tax_id,
        Client.is_deleted == False  # noqa: E712
    ).first()
