"""Sale model."""
import enum
import uuid
from sqlalchemy import Column, Boolean, Numeric, DateTime, Enum, Uuid, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false
from sales_catalog.database import Base


class PaymentMethod(str, enum.Enum):
    """Accepted payment methods. Only cash is taken today."""
    CASH = 'cash'

    @classmethod
    def parse(cls, value):
        """Accept enum members or their wire value, case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f'Unsupported payment method: {value!r}')


class Sale(Base):
    """
    Sale header.

    Monetary columns are computed server-side when the sale is created and
    never change afterwards, cancellation included.
    """

    __tablename__ = 'sale'
    __table_args__ = (
        CheckConstraint('subtotal >= 0', name='ck_sale_subtotal_non_negative'),
        CheckConstraint('discount_total >= 0', name='ck_sale_discount_total_non_negative'),
        CheckConstraint('total >= 0', name='ck_sale_total_non_negative'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey('client.id'), nullable=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_total = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(
        Enum(PaymentMethod, name='payment_method', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PaymentMethod.CASH
    )
    is_canceled = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship('Client', back_populates='sales')
    items = relationship(
        'SaleItem',
        back_populates='sale',
        cascade='save-update, merge',
        order_by='SaleItem.line_no'
    )

    def __repr__(self):
        return f"<Sale(id={self.id}, total={self.total}, canceled={self.is_canceled})>"
