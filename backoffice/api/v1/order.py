"""
Customer order routes: place, pay, move through pickup statuses, cancel
(via status), and bill an order with an invoice.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.order import OrderPaymentStatus, OrderStatus
from backoffice.models.user import User
from backoffice.schemas.invoice import InvoiceResponse
from backoffice.schemas.order import (
    OrderCreate,
    OrderInvoiceRequest,
    OrderListResponse,
    OrderPaymentRequest,
    OrderResponse,
    OrderStatusUpdate,
    OrderSummary,
)
from backoffice.services import invoice_service
from backoffice.services.order_service import OrderService
from backoffice.logger_config import logger


router = APIRouter()

NOT_FOUND = "Order not found"


def _not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)


@router.get("/", response_model=OrderListResponse)
def list_orders(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
    payment_status: Optional[OrderPaymentStatus] = Query(default=None),
    customer_id: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=100, description="Search order number or customer name"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    orders, total = OrderService(db).get_all_orders(
        skip=skip, limit=limit, status=status_filter, payment_status=payment_status,
        customer_id=customer_id, search=search,
    )
    return OrderListResponse(
        total=total, skip=skip, limit=limit,
        orders=[OrderSummary.model_validate(o) for o in orders],
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    order = OrderService(db).get_order(order_id)
    if not order:
        raise _not_found()
    return OrderResponse.model_validate(order)


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Place an order; stock is reserved by moving it out immediately."""
    try:
        logger.info(f"API: Creating order with {len(data.items)} lines")
        order = OrderService(db).create_order(
            items=[item.model_dump() for item in data.items],
            customer_id=data.customer_id,
            customer_name=data.customer_name,
            payment_method=data.payment_method,
            pickup_location=data.pickup_location,
            notes=data.notes,
            created_by_id=current_user.id,
        )
        return OrderResponse.model_validate(order)
    except ValueError as e:
        logger.error(f"API: Validation error in order creation: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Cancelling restocks the lines and refunds a paid order."""
    try:
        order = OrderService(db).update_status(order_id, data.status, notes=data.notes, created_by_id=current_user.id)
        if not order:
            raise _not_found()
        return OrderResponse.model_validate(order)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{order_id}/pay", response_model=OrderResponse)
def pay_order(
    order_id: str,
    data: OrderPaymentRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        order = OrderService(db).pay_order(order_id, data.method, created_by_id=current_user.id)
        if not order:
            raise _not_found()
        return OrderResponse.model_validate(order)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{order_id}/invoice", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def invoice_order(
    order_id: str,
    data: OrderInvoiceRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        invoice = invoice_service.create_invoice_for_order(
            db, order_id, created_by_id=current_user.id, **data.model_dump()
        )
        if not invoice:
            raise _not_found()
        return InvoiceResponse.model_validate(invoice)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
