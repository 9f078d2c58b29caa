from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("CUS"))
    name = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    tax_exempt = Column(Boolean, nullable=False, default=False)
    credit_limit = Column(Numeric(15, 2), nullable=True)
    loyalty_points = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    receipts = relationship("Receipt", back_populates="customer")


class Receipt(Base):
    """Money received from a customer against a sales order / invoice."""
    __tablename__ = "receipts"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("RCT"))
    trx_id = Column(String(20), unique=True, nullable=False)
    trx_date = Column(Date, nullable=False, index=True)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = Column(String(255), nullable=False)
    state = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    so_id = Column(String(50), nullable=True)
    invoice_num = Column(String(50), nullable=True)
    so_balance = Column(Numeric(15, 2), nullable=True)
    pmt_mode = Column(String(30), nullable=False, default="Credit Card")
    amount_received = Column(Numeric(15, 2), nullable=False)
    points_awarded = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="receipts")
