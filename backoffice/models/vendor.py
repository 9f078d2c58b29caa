import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class VendorStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"


# Payment terms are agreed in days
PAYMENT_TERMS_DAYS = (15, 30, 45)


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("VEN"))
    supplier_code = Column(String(20), unique=True, nullable=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    contact_name = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    tax_id = Column(String(50), nullable=True)
    payment_terms_days = Column(Integer, nullable=True)
    credit_limit = Column(Numeric(15, 2), nullable=True)
    status = Column(Enum(VendorStatus), nullable=False, default=VendorStatus.ACTIVE)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    purchase_orders = relationship("PurchaseOrder", back_populates="vendor")
    products = relationship("Product", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor(id='{self.id}', name='{self.name}')>"
