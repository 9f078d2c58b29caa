import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class InvoiceType(str, enum.Enum):
    online = "online"
    pos = "pos"
    website = "website"
    store_pickup = "store_pickup"


class InvoicePaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class Invoice(Base):
    """Bill issued for an order or a point-of-sale sale. Lines are snapshots."""
    __tablename__ = "invoices"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("INV"))
    invoice_number = Column(String(30), unique=True, nullable=False, index=True)
    order_id = Column(String(20), ForeignKey("orders.id"), nullable=True, unique=True)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True, index=True)

    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(30), nullable=True)
    customer_email = Column(String(255), nullable=True)
    customer_address = Column(String(500), nullable=True)

    invoice_type = Column(Enum(InvoiceType), nullable=False, default=InvoiceType.online, index=True)
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    adjustment = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    shipping_type = Column(String(50), nullable=True)
    terms = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    payment_method = Column(String(20), nullable=True)
    payment_status = Column(Enum(InvoicePaymentStatus), nullable=False, default=InvoicePaymentStatus.paid)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="invoice")
    customer = relationship("Customer")
    items = relationship(
        "InvoiceItem", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceItem.id"
    )

    def __repr__(self):
        return f"<Invoice(invoice_number='{self.invoice_number}', total='{self.total_amount}')>"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(String(20), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    discount = Column(Numeric(15, 2), nullable=False, default=0)
    tax = Column(Numeric(15, 2), nullable=False, default=0)
    subtotal = Column(Numeric(15, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")
