from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from backoffice.models.order import OrderPaymentStatus, OrderStatus
from backoffice.models.payment import PaymentMethod


# ============================================================================
# Request Schemas
# ============================================================================

class OrderItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    """Lines are priced from the product. Give payment_method to take payment now."""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    customer_id: Optional[str] = None
    customer_name: Optional[str] = Field(None, max_length=255, description="Required without customer_id")
    payment_method: Optional[PaymentMethod] = None
    pickup_location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "CUS-ABCDEFGH",
                "items": [{"product_id": "PRD-ABCDEFGH", "quantity": 2}],
                "payment_method": "card",
            }
        }


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=255)


class OrderPaymentRequest(BaseModel):
    method: PaymentMethod = PaymentMethod.cash


class OrderInvoiceRequest(BaseModel):
    adjustment: Decimal = Decimal("0")
    shipping_type: Optional[str] = Field(None, max_length=50)
    terms: Optional[str] = None
    customer_address: Optional[str] = Field(None, max_length=500)


# ============================================================================
# Response Schemas
# ============================================================================

class OrderItemResponse(BaseModel):
    id: int
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class OrderStatusHistoryResponse(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderSummary(BaseModel):
    id: str
    order_number: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    status: OrderStatus
    payment_status: OrderPaymentStatus
    payment_method: Optional[PaymentMethod] = None
    total_amount: Decimal
    points_awarded: int
    pickup_location: str
    created_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(OrderSummary):
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    items: List[OrderItemResponse]
    status_history: List[OrderStatusHistoryResponse] = []


class OrderListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    orders: List[OrderSummary]
