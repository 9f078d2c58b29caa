import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class CreditMemoType(str, enum.Enum):
    VENDOR = "VENDOR"      # goods or value returned to a vendor
    CUSTOMER = "CUSTOMER"  # goods or value returned by a customer


class CreditMemoReason(str, enum.Enum):
    DAMAGED = "DAMAGED"
    RATE_DIFFERENCE = "RATE_DIFFERENCE"
    RETURN = "RETURN"
    SCHEME = "SCHEME"
    OTHER = "OTHER"


class CreditMemoStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"


class CreditMemo(Base):
    __tablename__ = "credit_memos"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("CM"))
    credit_memo_number = Column(String(30), unique=True, nullable=False, index=True)
    type = Column(Enum(CreditMemoType), nullable=False, index=True)
    reason = Column(Enum(CreditMemoReason), nullable=False)
    status = Column(Enum(CreditMemoStatus), nullable=False, default=CreditMemoStatus.DRAFT, index=True)

    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=True, index=True)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True, index=True)
    invoice_id = Column(String(20), ForeignKey("invoices.id"), nullable=True)
    shipment_id = Column(String(20), ForeignKey("shipments.id"), nullable=True)

    affects_inventory = Column(Boolean, nullable=False, default=True)
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor")
    customer = relationship("Customer")
    items = relationship(
        "CreditMemoItem", back_populates="credit_memo", cascade="all, delete-orphan", order_by="CreditMemoItem.id"
    )

    @property
    def party_name(self):
        party = self.vendor if self.type == CreditMemoType.VENDOR else self.customer
        return party.name if party else None


class CreditMemoItem(Base):
    __tablename__ = "credit_memo_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    credit_memo_id = Column(String(20), ForeignKey("credit_memos.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    tax_percent = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total = Column(Numeric(15, 2), nullable=False)

    credit_memo = relationship("CreditMemo", back_populates="items")
    product = relationship("Product")
