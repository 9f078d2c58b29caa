from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from backoffice.models.vendor import VendorStatus
from backoffice.schemas.common import check_money_places


class VendorBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    tax_id: Optional[str] = Field(None, max_length=50)
    payment_terms_days: Optional[int] = Field(None, description="15, 30 or 45")
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("credit_limit")
    @classmethod
    def validate_credit_limit(cls, v):
        return check_money_places(v, "Credit limit")


class VendorCreate(VendorBase):
    supplier_code: Optional[str] = Field(None, max_length=20, description="Generated (SUP + 5 digits) when omitted")
    status: VendorStatus = VendorStatus.ACTIVE


class VendorUpdate(BaseModel):
    supplier_code: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    tax_id: Optional[str] = Field(None, max_length=50)
    payment_terms_days: Optional[int] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    status: Optional[VendorStatus] = None
    notes: Optional[str] = None

    @field_validator("credit_limit")
    @classmethod
    def validate_credit_limit(cls, v):
        return check_money_places(v, "Credit limit")


class VendorResponse(VendorBase):
    id: str
    supplier_code: Optional[str] = None
    status: VendorStatus
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VendorListResponse(BaseModel):
    total: int
    vendors: List[VendorResponse]


class SupplierCodeResponse(BaseModel):
    supplier_code: str


class VendorBalanceResponse(BaseModel):
    vendor_id: str
    as_of: Optional[date] = None
    balance: Decimal


class VendorStatementEntry(BaseModel):
    id: int
    date: datetime
    account_type: str
    reference_type: str
    reference_id: str
    description: Optional[str] = None
    debit: Decimal
    credit: Decimal
    balance: Decimal


class VendorStatementResponse(BaseModel):
    vendor_id: str
    vendor_name: str
    opening_balance: Decimal
    closing_balance: Decimal
    entries: List[VendorStatementEntry]


class OutstandingPayable(BaseModel):
    vendor_id: str
    supplier_code: Optional[str] = None
    name: str
    balance: Decimal


class OutstandingPayablesResponse(BaseModel):
    total_outstanding: Decimal
    vendors: List[OutstandingPayable]
