from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.shipment import ShipmentStatus, ShipmentType
from backoffice.models.user import User
from backoffice.schemas.credit_memo import CreditMemoResponse
from backoffice.schemas.shipment import (
    MarkDeliveredRequest,
    ReturnReceivedRequest,
    ReturnReceivedResponse,
    ShipmentCreate,
    ShipmentListResponse,
    ShipmentResponse,
    ShipmentStatusUpdate,
    ShipmentUpdate,
)
from backoffice.services import shipment_service

router = APIRouter()

NOT_FOUND = "Shipment not found"


@router.get("", response_model=ShipmentListResponse)
def list_shipments(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    shipment_type: Optional[ShipmentType] = Query(None),
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    invoice_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    shipments, total = shipment_service.get_all_shipments(
        db, skip=skip, limit=limit, shipment_type=shipment_type, status=status_filter, invoice_id=invoice_id
    )
    return ShipmentListResponse(
        total=total, skip=skip, limit=limit,
        shipments=[ShipmentResponse.model_validate(s) for s in shipments],
    )


@router.get("/{shipment_id}", response_model=ShipmentResponse)
def get_shipment(
    shipment_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    shipment = shipment_service.get_shipment_by_id(db, shipment_id)
    if not shipment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return ShipmentResponse.model_validate(shipment)


@router.post("", response_model=ShipmentResponse, status_code=status.HTTP_201_CREATED)
def create_shipment(
    data: ShipmentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        fields = data.model_dump()
        fields["items"] = [item.model_dump() for item in data.items]
        shipment = shipment_service.create_shipment(db, created_by_id=current_user.id, **fields)
        return ShipmentResponse.model_validate(shipment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{shipment_id}", response_model=ShipmentResponse)
def update_shipment(
    shipment_id: str,
    data: ShipmentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        shipment = shipment_service.update_shipment(db, shipment_id, **data.model_dump(exclude_unset=True))
        if not shipment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        return ShipmentResponse.model_validate(shipment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{shipment_id}/status", response_model=ShipmentResponse)
def update_shipment_status(
    shipment_id: str,
    data: ShipmentStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        shipment = shipment_service.update_status(db, shipment_id, data.status)
        if not shipment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        return ShipmentResponse.model_validate(shipment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{shipment_id}/mark-delivered", response_model=ShipmentResponse)
def mark_delivered(
    shipment_id: str,
    data: MarkDeliveredRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        shipment = shipment_service.mark_delivered(
            db, shipment_id, proof_of_delivery_url=data.proof_of_delivery_url, created_by_id=current_user.id
        )
        if not shipment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        return ShipmentResponse.model_validate(shipment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{shipment_id}/mark-return-received", response_model=ReturnReceivedResponse)
def mark_return_received(
    shipment_id: str,
    data: ReturnReceivedRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Book returned goods into stock, optionally raising a draft customer credit memo."""
    try:
        result = shipment_service.mark_return_received(
            db, shipment_id,
            auto_create_credit_memo=data.auto_create_credit_memo,
            customer_id=data.customer_id,
            created_by_id=current_user.id,
        )
        if not result:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        memo = result["credit_memo"]
        return ReturnReceivedResponse(
            shipment=ShipmentResponse.model_validate(result["shipment"]),
            credit_memo=CreditMemoResponse.model_validate(memo) if memo is not None else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
