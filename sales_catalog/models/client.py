"""Client model."""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false
from sales_catalog.database import Base


class Client(Base):
    """Client (buyer). Identified externally by its tax id (NIT)."""

    __tablename__ = 'client'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    tax_id = Column(String(50), nullable=False, unique=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    sales = relationship('Sale', back_populates='client')

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', tax_id='{self.tax_id}')>"
