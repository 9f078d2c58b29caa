import enum
from decimal import Decimal
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id
from backoffice.utils import purchase_math


class POSPaymentMethod(str, enum.Enum):
    cash = "cash"
    card = "card"
    digital = "digital"
    split = "split"


class SaleType(str, enum.Enum):
    pos = "pos"
    website = "website"
    store_pickup = "store_pickup"


class POSSale(Base):
    __tablename__ = "pos_sales"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("POS"))
    sale_number = Column(String(30), unique=True, nullable=False, index=True)
    invoice_id = Column(String(20), ForeignKey("invoices.id"), nullable=False)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(30), nullable=True)
    customer_email = Column(String(255), nullable=True)

    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    payment_method = Column(Enum(POSPaymentMethod), nullable=False)
    split_cash = Column(Numeric(15, 2), nullable=True)
    split_card = Column(Numeric(15, 2), nullable=True)
    split_digital = Column(Numeric(15, 2), nullable=True)

    sale_type = Column(Enum(SaleType), nullable=False, default=SaleType.pos, index=True)
    points_awarded = Column(Integer, nullable=False, default=0)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    invoice = relationship("Invoice")
    customer = relationship("Customer")
    items = relationship(
        "POSSaleItem", back_populates="sale", cascade="all, delete-orphan", order_by="POSSaleItem.id"
    )

    @property
    def invoice_number(self):
        return self.invoice.invoice_number if self.invoice else None

    @property
    def total_cost(self) -> Decimal:
        return sum((purchase_math.to_money(i.quantity * (i.unit_cost or 0)) for i in self.items), purchase_math.ZERO)


class POSSaleItem(Base):
    __tablename__ = "pos_sale_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(String(20), ForeignKey("pos_sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    unit_cost = Column(Numeric(15, 2), nullable=False, default=0)
    discount = Column(Numeric(15, 2), nullable=False, default=0)
    tax = Column(Numeric(15, 2), nullable=False, default=0)
    subtotal = Column(Numeric(15, 2), nullable=False)

    sale = relationship("POSSale", back_populates="items")
