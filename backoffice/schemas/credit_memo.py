from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from backoffice.models.credit_memo import CreditMemoReason, CreditMemoStatus, CreditMemoType
from backoffice.schemas.common import check_money_places


class CreditMemoItemCreate(BaseModel):
    product_id: Optional[str] = None
    product_name: Optional[str] = Field(None, max_length=255, description="Required without product_id")
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    tax_percent: Decimal = Field(Decimal("0"), ge=0, le=100)

    @field_validator("unit_price", "tax_percent")
    @classmethod
    def validate_money(cls, v, info):
        return check_money_places(v, info.field_name)


class CreditMemoCreate(BaseModel):
    """VENDOR memos need vendor_id, CUSTOMER memos need customer_id."""
    type: CreditMemoType
    reason: CreditMemoReason
    items: List[CreditMemoItemCreate] = Field(..., min_length=1)
    vendor_id: Optional[str] = None
    customer_id: Optional[str] = None
    invoice_id: Optional[str] = None
    shipment_id: Optional[str] = None
    affects_inventory: bool = True
    notes: Optional[str] = None


class CreditMemoUpdate(BaseModel):
    """Draft only. Sending items replaces every line."""
    reason: Optional[CreditMemoReason] = None
    items: Optional[List[CreditMemoItemCreate]] = Field(None, min_length=1)
    affects_inventory: Optional[bool] = None
    notes: Optional[str] = None


class CreditMemoItemResponse(BaseModel):
    id: int
    product_id: Optional[str] = None
    product_name: str
    quantity: int
    unit_price: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    total: Decimal

    class Config:
        from_attributes = True


class CreditMemoResponse(BaseModel):
    id: str
    credit_memo_number: str
    type: CreditMemoType
    reason: CreditMemoReason
    status: CreditMemoStatus
    vendor_id: Optional[str] = None
    customer_id: Optional[str] = None
    party_name: Optional[str] = None
    invoice_id: Optional[str] = None
    shipment_id: Optional[str] = None
    affects_inventory: bool
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    items: List[CreditMemoItemResponse]

    class Config:
        from_attributes = True


class CreditMemoListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    credit_memos: List[CreditMemoResponse]


class VendorReturnsRow(BaseModel):
    vendor_id: str
    vendor_name: Optional[str] = None
    count: int
    total_amount: Decimal


class ReasonBreakdownRow(BaseModel):
    reason: CreditMemoReason
    count: int
    total_amount: Decimal
    percent: float


class ProductReturnsRow(BaseModel):
    product_id: str
    product_name: Optional[str] = None
    quantity_returned: int
    total_value: Decimal
