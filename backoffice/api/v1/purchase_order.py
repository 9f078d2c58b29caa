"""
Purchase order routes: lifecycle (create, edit, send, receive, cancel,
delete) and vendor payments recorded against an order.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.purchase_order import PurchaseOrderStatus
from backoffice.models.user import User
from backoffice.schemas.common import ErrorResponse, SuccessResponse
from backoffice.schemas.payment import PaymentResponse
from backoffice.schemas.purchase_order import (
    PONumberResponse,
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderPaymentCreate,
    PurchaseOrderResponse,
    PurchaseOrderSummary,
    PurchaseOrderUpdate,
    ReceiveRequest,
)
from backoffice.services.purchase_order_service import PurchaseOrderService
from backoffice.logger_config import logger


router = APIRouter()

NOT_FOUND = "Purchase order not found"


def _not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)


@router.get("/", response_model=PurchaseOrderListResponse)
def list_purchase_orders(
    skip: int = Query(default=0, ge=0, description="Number of records to skip"),
    limit: int = Query(default=50, ge=1, le=500, description="Number of records to return"),
    status_filter: Optional[PurchaseOrderStatus] = Query(default=None, alias="status"),
    vendor_id: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=100, description="Search PO number or vendor name"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Get a list of purchase orders with filtering and pagination."""
    logger.info(f"API: Listing purchase orders - skip={skip}, limit={limit}, status={status_filter}")

    orders, total = PurchaseOrderService(db).get_all_purchase_orders(
        skip=skip, limit=limit, status=status_filter, vendor_id=vendor_id, search=search
    )
    return PurchaseOrderListResponse(
        total=total,
        skip=skip,
        limit=limit,
        purchase_orders=[PurchaseOrderSummary.model_validate(po) for po in orders],
    )


@router.get("/generate-number", response_model=PONumberResponse)
def generate_po_number(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return PONumberResponse(po_number=PurchaseOrderService(db).generate_po_number())


@router.get("/{po_id}", response_model=PurchaseOrderResponse)
def get_purchase_order(
    po_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    po = PurchaseOrderService(db).get_purchase_order(po_id)
    if not po:
        raise _not_found()
    return PurchaseOrderResponse.model_validate(po)


@router.post(
    "/",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a draft purchase order",
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
    },
)
def create_purchase_order(
    data: PurchaseOrderCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Create a purchase order in draft status.

    Per line: cost_excl_tax = qty x unit_cost, total_tax = cost_excl_tax x
    tax_rate / 100, total_price = cost_excl_tax + total_tax + shipping.
    Order totals are the sums of the line figures.
    """
    try:
        logger.info(f"API: Creating purchase order for vendor {data.vendor_id}")
        po = PurchaseOrderService(db).create_purchase_order(
            vendor_id=data.vendor_id,
            items=[item.model_dump() for item in data.items],
            po_number=data.po_number,
            expected_date=data.expected_date,
            notes=data.notes,
            created_by_id=current_user.id,
        )
        return PurchaseOrderResponse.model_validate(po)
    except ValueError as e:
        logger.error(f"API: Validation error in purchase order creation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"API: Unexpected error in purchase order creation: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create purchase order"
        )


@router.put("/{po_id}", response_model=PurchaseOrderResponse)
def update_purchase_order(
    po_id: str,
    data: PurchaseOrderUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Edit a draft purchase order."""
    fields = data.model_dump(exclude_unset=True)
    try:
        po = PurchaseOrderService(db).update_purchase_order(po_id, **fields)
        if not po:
            raise _not_found()
        return PurchaseOrderResponse.model_validate(po)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{po_id}/send", response_model=PurchaseOrderResponse)
def send_purchase_order(
    po_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        po = PurchaseOrderService(db).send_purchase_order(po_id)
        if not po:
            raise _not_found()
        return PurchaseOrderResponse.model_validate(po)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{po_id}/receive", response_model=PurchaseOrderResponse)
def receive_purchase_order(
    po_id: str,
    data: ReceiveRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Receive goods, fully or partially. Quantities above what is still
    outstanding on a line are clamped. Stock increases immediately; the
    vendor payable is posted when the whole order has arrived.
    """
    try:
        po = PurchaseOrderService(db).receive_purchase_order(
            po_id,
            [line.model_dump() for line in data.items],
            created_by_id=current_user.id,
        )
        if not po:
            raise _not_found()
        return PurchaseOrderResponse.model_validate(po)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"API: Unexpected error receiving purchase order {po_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to receive purchase order"
        )


@router.post("/{po_id}/cancel", response_model=PurchaseOrderResponse)
def cancel_purchase_order(
    po_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        po = PurchaseOrderService(db).cancel_purchase_order(po_id)
        if not po:
            raise _not_found()
        return PurchaseOrderResponse.model_validate(po)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{po_id}", response_model=SuccessResponse)
def delete_purchase_order(
    po_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        if not PurchaseOrderService(db).delete_purchase_order(po_id):
            raise _not_found()
        return SuccessResponse(message="Purchase order deleted successfully")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ============================================================================
# Payments
# ============================================================================

@router.post("/{po_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def add_purchase_order_payment(
    po_id: str,
    data: PurchaseOrderPaymentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Pay the vendor against this order; the amount cannot exceed the balance due."""
    try:
        payment = PurchaseOrderService(db).add_payment(
            po_id,
            amount=data.amount,
            method=data.method,
            reference=data.reference,
            notes=data.notes,
            created_by_id=current_user.id,
        )
        if not payment:
            raise _not_found()
        return PaymentResponse.model_validate(payment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{po_id}/payments", response_model=List[PaymentResponse])
def list_purchase_order_payments(
    po_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    payments = PurchaseOrderService(db).get_payments(po_id)
    if payments is None:
        raise _not_found()
    return [PaymentResponse.model_validate(p) for p in payments]
