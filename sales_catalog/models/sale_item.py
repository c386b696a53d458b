"""Sale Item model."""
import uuid
from sqlalchemy import Column, Integer, Numeric, DateTime, Uuid, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sales_catalog.database import Base


class SaleItem(Base):
    """
    Sale Item (line of a sale).

    unit_price is a snapshot of the product price when the sale was made,
    so later catalog changes never alter historical sales.
    """

    __tablename__ = 'sale_item'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_sale_item_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='ck_sale_item_unit_price_non_negative'),
        CheckConstraint('discount_applied >= 0', name='ck_sale_item_discount_non_negative'),
        CheckConstraint('discount_applied <= unit_price * quantity', name='ck_sale_item_discount_within_line'),
        UniqueConstraint('sale_id', 'line_no', name='uq_sale_item_line_no'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sale_id = Column(Uuid, ForeignKey('sale.id'), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey('product.id'), nullable=False)
    line_no = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount_applied = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    sale = relationship('Sale', back_populates='items')
    product = relationship('Product')

    def __repr__(self):
        return f"<SaleItem(id={self.id}, product_id={self.product_id}, qty={self.quantity})>"
