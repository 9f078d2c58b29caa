"""
Purchase order schemas.

Line figures and order totals are computed server side; clients only send
quantities, unit costs, tax rates and per-line shipping.
"""

from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from backoffice.models.payment import PaymentMethod
from backoffice.models.purchase_order import PurchaseOrderStatus
from backoffice.schemas.common import check_money_places
from backoffice.schemas.payment import PaymentResponse
from backoffice.utils.purchase_math import PaymentStatus, ShippingStatus


# ============================================================================
# Request Schemas
# ============================================================================

class PurchaseOrderItemCreate(BaseModel):
    """One line of a purchase order"""
    product_id: str = Field(..., min_length=1)
    product_name: Optional[str] = Field(None, max_length=255, description="Defaults to the product's name")
    quantity_ordered: int = Field(..., gt=0)
    unit_cost: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100, description="Percent")
    shipping: Decimal = Field(Decimal("0"), ge=0)

    @field_validator("unit_cost", "tax_rate", "shipping")
    @classmethod
    def validate_money(cls, v, info):
        return check_money_places(v, info.field_name)

    class Config:
        json_schema_extra = {
            "example": {
                "product_id": "PRD-ABCDEFGH",
                "quantity_ordered": 10,
                "unit_cost": "4.50",
                "tax_rate": "8.25",
                "shipping": "3.00",
            }
        }


class PurchaseOrderCreate(BaseModel):
    vendor_id: str = Field(..., min_length=1)
    po_number: Optional[str] = Field(None, max_length=30, description="Generated (P + 5 digits) when omitted")
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1)
    expected_date: Optional[date] = None
    notes: Optional[str] = None


class PurchaseOrderUpdate(BaseModel):
    """Draft only. Sending items replaces every line."""
    vendor_id: Optional[str] = None
    items: Optional[List[PurchaseOrderItemCreate]] = Field(None, min_length=1)
    expected_date: Optional[date] = None
    notes: Optional[str] = None


class ReceiveLine(BaseModel):
    item_id: int
    quantity_received: int = Field(..., ge=0)


class ReceiveRequest(BaseModel):
    items: List[ReceiveLine] = Field(..., min_length=1)


class PurchaseOrderPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod = PaymentMethod.check
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        return check_money_places(v)


# ============================================================================
# Response Schemas
# ============================================================================

class PurchaseOrderItemResponse(BaseModel):
    id: int
    product_id: str
    product_name: str
    quantity_ordered: int
    quantity_received: int
    quantity_outstanding: int
    unit_cost: Decimal
    tax_rate: Decimal
    shipping: Decimal
    cost_excl_tax: Decimal
    total_tax: Decimal
    cost_incl_tax: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class PurchaseOrderSummary(BaseModel):
    """List view row"""
    id: str
    po_number: str
    vendor_id: str
    vendor_name: Optional[str] = None
    status: PurchaseOrderStatus
    total_amount: Decimal
    total_paid: Decimal
    balance_due: Decimal
    payment_status: PaymentStatus
    shipping_status: ShippingStatus
    expected_date: Optional[date] = None
    received_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderResponse(PurchaseOrderSummary):
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    items: List[PurchaseOrderItemResponse]
    payments: List[PaymentResponse] = []


class PurchaseOrderListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    purchase_orders: List[PurchaseOrderSummary]


class PONumberResponse(BaseModel):
    po_number: str
