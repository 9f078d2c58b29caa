from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.payment import PaymentMethod, PaymentType
from backoffice.models.user import User
from backoffice.schemas.common import SuccessResponse
from backoffice.schemas.payment import PaymentCreate, PaymentListResponse, PaymentResponse
from backoffice.services import payment_service
from backoffice.logger_config import logger

router = APIRouter()


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    data: PaymentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Record a payment. The stored sign follows the payment type."""
    try:
        payment = payment_service.create_payment(
            db,
            payment_type=data.type,
            amount=data.amount,
            method=data.method,
            reference=data.reference,
            order_ref=data.order_ref,
            vendor_id=data.vendor_id,
            purchase_order_id=data.purchase_order_id,
            notes=data.notes,
            created_by_id=current_user.id,
        )
        return PaymentResponse.model_validate(payment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error creating payment")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create payment",
        )


@router.get("", response_model=PaymentListResponse)
def list_payments(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    payment_type: Optional[PaymentType] = Query(None, alias="type"),
    method: Optional[PaymentMethod] = Query(None),
    vendor_id: Optional[str] = Query(None),
    purchase_order_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
):
    """List payments with money in / money out totals for the filtered set."""
    rows, total, totals = payment_service.get_all_payments(
        db,
        skip=skip,
        limit=limit,
        payment_type=payment_type,
        method=method,
        vendor_id=vendor_id,
        purchase_order_id=purchase_order_id,
        start_date=start_date,
        end_date=end_date,
    )
    return PaymentListResponse(
        total=total,
        payments=[PaymentResponse.model_validate(p) for p in rows],
        **totals,
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    payment = payment_service.get_payment_by_id(db, payment_id)
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return PaymentResponse.model_validate(payment)


@router.delete("/{payment_id}", response_model=SuccessResponse)
def delete_payment(
    payment_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Delete a payment and the ledger entries it posted."""
    try:
        if not payment_service.delete_payment(db, payment_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
        logger.info(f"Payment {payment_id} deleted by {current_user.email}")
        return SuccessResponse(message="Payment deleted successfully")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
