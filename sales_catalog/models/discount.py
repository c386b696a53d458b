"""Discount model."""
import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Uuid, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship, backref
from sqlalchemy.sql import func, true
from sales_catalog.database import Base


class Discount(Base):
    """
    Percentage discount attached to exactly one product.

    Applies to a sale whose date falls inside [valid_from, valid_to]
    (both inclusive, valid_to open-ended when NULL) while is_active is set.
    """

    __tablename__ = 'discount'
    __table_args__ = (
        CheckConstraint('percentage >= 0 AND percentage <= 100', name='ck_discount_percentage_range'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(50), nullable=False, unique=True)
    percentage = Column(Numeric(5, 2), nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_to = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    product_id = Column(Uuid, ForeignKey('product.id'), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship('Product', backref=backref('discount', uselist=False))

    def __repr__(self):
        return f"<Discount(id={self.id}, code='{self.code}', percentage={self.percentage}, active={self.is_active})>"
