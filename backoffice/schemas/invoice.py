from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from backoffice.models.invoice import InvoicePaymentStatus, InvoiceType


class InvoiceUpdate(BaseModel):
    """Amounts and lines are fixed once issued."""
    customer_address: Optional[str] = Field(None, max_length=500)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=30)
    shipping_type: Optional[str] = Field(None, max_length=50)
    terms: Optional[str] = None
    notes: Optional[str] = None


class InvoiceItemResponse(BaseModel):
    id: int
    product_id: Optional[str] = None
    product_name: str
    quantity: int
    price: Decimal
    discount: Decimal
    tax: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class InvoiceSummary(BaseModel):
    id: str
    invoice_number: str
    order_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: str
    customer_phone: Optional[str] = None
    invoice_type: InvoiceType
    total_amount: Decimal
    payment_method: Optional[str] = None
    payment_status: InvoicePaymentStatus
    created_at: datetime

    class Config:
        from_attributes = True


class InvoiceResponse(InvoiceSummary):
    customer_email: Optional[str] = None
    customer_address: Optional[str] = None
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    adjustment: Decimal
    shipping_type: Optional[str] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    items: List[InvoiceItemResponse]


class InvoiceListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    invoices: List[InvoiceSummary]
