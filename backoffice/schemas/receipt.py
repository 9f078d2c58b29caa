from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal


class ReceiptCreate(BaseModel):
    trx_id: Optional[str] = Field(None, max_length=20, description="Generated (RT...) when omitted")
    trx_date: Optional[date] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = Field(None, max_length=255)
    state: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    so_id: Optional[str] = Field(None, max_length=50)
    invoice_num: Optional[str] = Field(None, max_length=50)
    so_balance: Optional[Decimal] = None
    pmt_mode: Optional[str] = Field(None, max_length=30)
    amount_received: Decimal = Field(..., ge=0)


class ReceiptUpdate(BaseModel):
    trx_id: Optional[str] = Field(None, max_length=20)
    trx_date: Optional[date] = None
    customer_id: Optional[str] = Field(None, description="null detaches the receipt from its customer")
    customer_name: Optional[str] = Field(None, max_length=255)
    state: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    so_id: Optional[str] = Field(None, max_length=50)
    invoice_num: Optional[str] = Field(None, max_length=50)
    so_balance: Optional[Decimal] = None
    pmt_mode: Optional[str] = Field(None, max_length=30)
    amount_received: Optional[Decimal] = Field(None, ge=0)

    @field_validator("trx_id", "trx_date", "customer_name", "pmt_mode", "amount_received")
    @classmethod
    def not_null(cls, v, info):
        # omit the field to leave it unchanged
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ReceiptResponse(BaseModel):
    id: str
    trx_id: str
    trx_date: date
    customer_id: Optional[str] = None
    customer_name: str
    state: Optional[str] = None
    city: Optional[str] = None
    so_id: Optional[str] = None
    invoice_num: Optional[str] = None
    so_balance: Optional[Decimal] = None
    pmt_mode: str
    amount_received: Decimal
    points_awarded: int
    created_at: datetime

    class Config:
        from_attributes = True


class ReceiptListResponse(BaseModel):
    total: int
    receipts: List[ReceiptResponse]


class TrxIdResponse(BaseModel):
    trx_id: str
