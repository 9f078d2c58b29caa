from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from backoffice.models.shipment import ShipmentItemStatus, ShipmentStatus, ShipmentType
from backoffice.schemas.common import check_money_places
from backoffice.schemas.credit_memo import CreditMemoResponse


class ShipmentItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    product_name: Optional[str] = Field(None, max_length=255)
    quantity: int = Field(..., gt=0)


class ShipmentDetails(BaseModel):
    transporter_name: Optional[str] = Field(None, max_length=255)
    vehicle_number: Optional[str] = Field(None, max_length=50)
    lr_number: Optional[str] = Field(None, max_length=50, description="Lorry receipt / consignment number")
    expected_delivery_date: Optional[date] = None
    freight_charge: Optional[Decimal] = Field(None, ge=0)
    weight_kg: Optional[Decimal] = Field(None, ge=0)
    volume_cbm: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("freight_charge")
    @classmethod
    def validate_freight(cls, v):
        return check_money_places(v, "Freight charge")


class ShipmentCreate(ShipmentDetails):
    shipment_type: ShipmentType = ShipmentType.GROUND
    invoice_id: Optional[str] = None
    customer_id: Optional[str] = None
    items: List[ShipmentItemCreate] = Field(..., min_length=1)


class ShipmentUpdate(ShipmentDetails):
    pass


class ShipmentStatusUpdate(BaseModel):
    status: ShipmentStatus


class MarkDeliveredRequest(BaseModel):
    proof_of_delivery_url: Optional[str] = Field(None, max_length=500)


class ReturnReceivedRequest(BaseModel):
    auto_create_credit_memo: bool = False
    customer_id: Optional[str] = None


class ShipmentItemResponse(BaseModel):
    id: int
    product_id: str
    product_name: str
    quantity: int
    status: ShipmentItemStatus

    class Config:
        from_attributes = True


class ShipmentResponse(BaseModel):
    id: str
    shipment_number: str
    shipment_type: ShipmentType
    status: ShipmentStatus
    invoice_id: Optional[str] = None
    invoice_number: Optional[str] = None
    customer_id: Optional[str] = None
    transporter_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    lr_number: Optional[str] = None
    dispatch_date: Optional[datetime] = None
    expected_delivery_date: Optional[date] = None
    delivered_date: Optional[datetime] = None
    freight_charge: Decimal
    weight_kg: Optional[Decimal] = None
    volume_cbm: Optional[Decimal] = None
    proof_of_delivery_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    items: List[ShipmentItemResponse]

    class Config:
        from_attributes = True


class ShipmentListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    shipments: List[ShipmentResponse]


class ReturnReceivedResponse(BaseModel):
    shipment: ShipmentResponse
    credit_memo: Optional[CreditMemoResponse] = None
