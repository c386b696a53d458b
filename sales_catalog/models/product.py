"""Product model."""
import uuid
from sqlalchemy import Column, String, Text, Boolean, Numeric, DateTime, Uuid, CheckConstraint
from sqlalchemy.sql import func, false
from sales_catalog.database import Base


class Product(Base):
    """Catalog product. Read-only for the sales engine."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_product_price_non_negative'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    unit = Column(String(20), nullable=False, default='unit')
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.code}', price={self.price})>"

    @property
    def is_available(self):
        """Products can be sold until they are soft-deleted."""
        return not self.is_deleted
