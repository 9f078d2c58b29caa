import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class PaymentType(str, enum.Enum):
    sale = "sale"
    refund = "refund"
    vendor = "vendor"
    expense = "expense"
    adjustment = "adjustment"


class PaymentMethod(str, enum.Enum):
    cash = "cash"
    card = "card"
    check = "check"
    digital = "digital"
    other = "other"


# Money in is positive, money out is negative. Adjustments keep the sign given.
INCOMING_TYPES = (PaymentType.sale,)
OUTGOING_TYPES = (PaymentType.refund, PaymentType.vendor, PaymentType.expense)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PAY"))
    type = Column(Enum(PaymentType), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    method = Column(Enum(PaymentMethod), nullable=False)
    reference = Column(String(100), nullable=True)  # check number, transaction id

    order_ref = Column(String(50), nullable=True)
    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=True, index=True)
    purchase_order_id = Column(String(20), ForeignKey("purchase_orders.id"), nullable=True, index=True)

    notes = Column(Text, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    vendor = relationship("Vendor")
    purchase_order = relationship("PurchaseOrder", back_populates="payments")
