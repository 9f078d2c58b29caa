from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from backoffice.models.product import MovementType
from backoffice.schemas.common import check_money_places


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=64)
    barcode: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0)
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100, description="Percent, applied at the point of sale")
    low_stock_threshold: int = Field(5, ge=0)
    vendor_id: Optional[str] = None

    @field_validator("price", "cost_price", "tax_rate")
    @classmethod
    def validate_money(cls, v, info):
        return check_money_places(v, info.field_name)


class ProductCreate(ProductBase):
    stock_quantity: int = Field(0, ge=0, description="Opening stock")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=64)
    barcode: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    vendor_id: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("price", "cost_price", "tax_rate")
    @classmethod
    def validate_money(cls, v, info):
        return check_money_places(v, info.field_name)


class ProductResponse(ProductBase):
    id: str
    stock_quantity: int
    is_active: bool
    is_low_stock: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    total: int
    products: List[ProductResponse]


class StockAdjustRequest(BaseModel):
    quantity_change: int = Field(..., description="Signed change; negative removes stock")
    notes: Optional[str] = Field(None, max_length=255)


class StockMovementResponse(BaseModel):
    id: int
    product_id: str
    movement_type: MovementType
    quantity_change: int
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StockMovementListResponse(BaseModel):
    total: int
    movements: List[StockMovementResponse]
