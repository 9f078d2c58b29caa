import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class MovementType(str, enum.Enum):
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    RETURN_IN = "RETURN_IN"
    RETURN_OUT = "RETURN_OUT"
    ADJUSTMENT = "ADJUSTMENT"
    SHIPMENT_OUT = "SHIPMENT_OUT"
    SHIPMENT_IN = "SHIPMENT_IN"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PRD"))
    name = Column(String(255), nullable=False)
    sku = Column(String(64), unique=True, nullable=True, index=True)
    barcode = Column(String(64), nullable=True, index=True)
    description = Column(Text, nullable=True)

    price = Column(Numeric(15, 2), nullable=False, default=0)
    cost_price = Column(Numeric(15, 2), nullable=True)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)

    stock_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=5)

    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor", back_populates="products")
    movements = relationship("StockMovement", back_populates="product", cascade="all, delete-orphan")

    @property
    def is_low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.low_stock_threshold or 0)


class StockMovement(Base):
    """Signed stock change; quantity_change > 0 adds stock."""
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False, index=True)
    movement_type = Column(Enum(MovementType), nullable=False)
    quantity_change = Column(Integer, nullable=False)

    reference_type = Column(String(30), nullable=True)   # PURCHASE_ORDER / ADJUSTMENT
    reference_id = Column(String(30), nullable=True)
    notes = Column(String(255), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="movements")
