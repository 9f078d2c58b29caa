import enum
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id
from backoffice.utils import purchase_math


class PurchaseOrderStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    partial = "partial"
    received = "received"
    cancelled = "cancelled"


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PO"))
    po_number = Column(String(30), unique=True, nullable=False, index=True)
    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=False, index=True)
    status = Column(Enum(PurchaseOrderStatus), nullable=False, default=PurchaseOrderStatus.draft, index=True)

    # Stored aggregates, recomputed whenever items change
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    shipping_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    expected_date = Column(Date, nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor", back_populates="purchase_orders")
    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )
    payments = relationship("Payment", back_populates="purchase_order")

    @property
    def total_paid(self) -> Decimal:
        # vendor payments are stored negative (money out)
        return sum((-p.amount for p in self.payments), purchase_math.ZERO)

    @property
    def balance_due(self) -> Decimal:
        return purchase_math.balance_due(self.total_amount, self.total_paid)

    @property
    def payment_status(self) -> purchase_math.PaymentStatus:
        return purchase_math.payment_status(self.total_amount, self.total_paid)

    @property
    def shipping_status(self) -> purchase_math.ShippingStatus:
        return purchase_math.shipping_status(
            self.items, cancelled=self.status == PurchaseOrderStatus.cancelled
        )

    @property
    def vendor_name(self):
        return self.vendor.name if self.vendor else None

    def __repr__(self):
        return f"<PurchaseOrder(po_number='{self.po_number}', status='{self.status}')>"


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id = Column(String(20), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)

    quantity_ordered = Column(Integer, nullable=False)
    quantity_received = Column(Integer, nullable=False, default=0)

    unit_cost = Column(Numeric(15, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    shipping = Column(Numeric(15, 2), nullable=False, default=0)

    cost_excl_tax = Column(Numeric(15, 2), nullable=False, default=0)
    total_tax = Column(Numeric(15, 2), nullable=False, default=0)
    cost_incl_tax = Column(Numeric(15, 2), nullable=False, default=0)
    total_price = Column(Numeric(15, 2), nullable=False, default=0)

    purchase_order = relationship("PurchaseOrder", back_populates="items")
    product = relationship("Product")

    @property
    def quantity_outstanding(self) -> int:
        return max(0, self.quantity_ordered - (self.quantity_received or 0))
