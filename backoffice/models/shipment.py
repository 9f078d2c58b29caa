import enum
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class ShipmentType(str, enum.Enum):
    GROUND = "GROUND"        # outbound delivery
    GROUND_RG = "GROUND_RG"  # goods returned by the customer


class ShipmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PACKED = "PACKED"
    DISPATCHED = "DISPATCHED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    RETURNED = "RETURNED"


CLOSED_SHIPMENT_STATUSES = (ShipmentStatus.DELIVERED, ShipmentStatus.FAILED, ShipmentStatus.RETURNED)


class ShipmentItemStatus(str, enum.Enum):
    PENDING = "PENDING"
    PACKED = "PACKED"
    DISPATCHED = "DISPATCHED"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("SHP"))
    shipment_number = Column(String(30), unique=True, nullable=False, index=True)
    shipment_type = Column(Enum(ShipmentType), nullable=False, index=True)
    invoice_id = Column(String(20), ForeignKey("invoices.id"), nullable=True, index=True)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True)

    transporter_name = Column(String(255), nullable=True)
    vehicle_number = Column(String(50), nullable=True)
    lr_number = Column(String(50), nullable=True)

    dispatch_date = Column(DateTime(timezone=True), nullable=True)
    expected_delivery_date = Column(Date, nullable=True)
    delivered_date = Column(DateTime(timezone=True), nullable=True)

    freight_charge = Column(Numeric(15, 2), nullable=False, default=0)
    weight_kg = Column(Numeric(10, 3), nullable=True)
    volume_cbm = Column(Numeric(10, 3), nullable=True)
    status = Column(Enum(ShipmentStatus), nullable=False, default=ShipmentStatus.PENDING, index=True)
    proof_of_delivery_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    invoice = relationship("Invoice")
    customer = relationship("Customer")
    items = relationship(
        "ShipmentItem", back_populates="shipment", cascade="all, delete-orphan", order_by="ShipmentItem.id"
    )

    @property
    def invoice_number(self):
        return self.invoice.invoice_number if self.invoice else None

    def __repr__(self):
        return f"<Shipment(shipment_number='{self.shipment_number}', status='{self.status}')>"


class ShipmentItem(Base):
    __tablename__ = "shipment_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(String(20), ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    status = Column(Enum(ShipmentItemStatus), nullable=False, default=ShipmentItemStatus.PENDING)

    shipment = relationship("Shipment", back_populates="items")
    product = relationship("Product")
