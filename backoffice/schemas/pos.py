from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from backoffice.models.pos import POSPaymentMethod, SaleType
from backoffice.schemas.common import check_money_places
from backoffice.schemas.product import ProductResponse


class POSSaleItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    discount: Decimal = Field(Decimal("0"), ge=0, description="Line discount, money")

    @field_validator("discount")
    @classmethod
    def validate_discount(cls, v):
        return check_money_places(v, "Discount")


class POSSaleCreate(BaseModel):
    items: List[POSSaleItemCreate] = Field(..., min_length=1)
    payment_method: POSPaymentMethod
    discount_amount: Decimal = Field(Decimal("0"), ge=0, description="Bill discount, money")
    split_cash: Optional[Decimal] = Field(None, ge=0)
    split_card: Optional[Decimal] = Field(None, ge=0)
    split_digital: Optional[Decimal] = Field(None, ge=0)
    customer_id: Optional[str] = None
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=30)
    customer_email: Optional[str] = Field(None, max_length=255)
    sale_type: SaleType = SaleType.pos

    @field_validator("discount_amount", "split_cash", "split_card", "split_digital")
    @classmethod
    def validate_money(cls, v, info):
        return check_money_places(v, info.field_name)


class POSSaleItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    discount: Decimal
    tax: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class POSSaleSummary(BaseModel):
    id: str
    sale_number: str
    invoice_id: str
    invoice_number: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    total_amount: Decimal
    payment_method: POSPaymentMethod
    sale_type: SaleType
    created_at: datetime

    class Config:
        from_attributes = True


class POSSaleResponse(POSSaleSummary):
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    split_cash: Optional[Decimal] = None
    split_card: Optional[Decimal] = None
    split_digital: Optional[Decimal] = None
    points_awarded: int
    items: List[POSSaleItemResponse]


class POSSaleListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    total_amount: Decimal
    sales: List[POSSaleSummary]


class POSProductSearchResponse(BaseModel):
    products: List[ProductResponse]
