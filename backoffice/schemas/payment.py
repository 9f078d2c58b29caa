from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from backoffice.models.payment import PaymentMethod, PaymentType
from backoffice.schemas.common import check_money_places


class PaymentCreate(BaseModel):
    """
    Amount may be given unsigned; the stored sign follows the type
    (sale positive; refund, vendor, expense negative; adjustment as given).
    """
    type: PaymentType
    amount: Decimal
    method: PaymentMethod = PaymentMethod.cash
    reference: Optional[str] = Field(None, max_length=100)
    order_ref: Optional[str] = Field(None, max_length=50)
    vendor_id: Optional[str] = None
    purchase_order_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v == 0:
            raise ValueError("Amount cannot be zero")
        return check_money_places(v)


class PaymentResponse(BaseModel):
    id: str
    type: PaymentType
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    order_ref: Optional[str] = None
    vendor_id: Optional[str] = None
    purchase_order_id: Optional[str] = None
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentListResponse(BaseModel):
    total: int
    total_in: Decimal
    total_out: Decimal
    net: Decimal
    payments: List[PaymentResponse]
