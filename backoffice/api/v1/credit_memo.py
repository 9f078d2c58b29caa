"""
Credit memo routes: draft, edit, approve (posts ledger and stock), cancel,
and return analytics over approved memos.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.credit_memo import CreditMemoStatus, CreditMemoType
from backoffice.models.user import User
from backoffice.schemas.credit_memo import (
    CreditMemoCreate,
    CreditMemoListResponse,
    CreditMemoResponse,
    CreditMemoUpdate,
    ProductReturnsRow,
    ReasonBreakdownRow,
    VendorReturnsRow,
)
from backoffice.services.credit_memo_service import CreditMemoService
from backoffice.logger_config import logger

router = APIRouter()

NOT_FOUND = "Credit memo not found"


def _not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)


@router.get("", response_model=CreditMemoListResponse)
def list_credit_memos(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    memo_type: Optional[CreditMemoType] = Query(None, alias="type"),
    status_filter: Optional[CreditMemoStatus] = Query(None, alias="status"),
    vendor_id: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    memos, total = CreditMemoService(db).get_all_credit_memos(
        skip=skip, limit=limit, memo_type=memo_type, status=status_filter,
        vendor_id=vendor_id, customer_id=customer_id,
    )
    return CreditMemoListResponse(
        total=total, skip=skip, limit=limit,
        credit_memos=[CreditMemoResponse.model_validate(m) for m in memos],
    )


@router.get("/analytics/returns-by-vendor", response_model=List[VendorReturnsRow])
def returns_by_vendor(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return CreditMemoService(db).returns_by_vendor()


@router.get("/analytics/reason-breakdown", response_model=List[ReasonBreakdownRow])
def reason_breakdown(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return CreditMemoService(db).reason_breakdown()


@router.get("/analytics/returns-by-product", response_model=List[ProductReturnsRow])
def returns_by_product(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return CreditMemoService(db).returns_by_product()


@router.get("/{memo_id}", response_model=CreditMemoResponse)
def get_credit_memo(
    memo_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    memo = CreditMemoService(db).get_credit_memo(memo_id)
    if not memo:
        raise _not_found()
    return CreditMemoResponse.model_validate(memo)


@router.post("", response_model=CreditMemoResponse, status_code=status.HTTP_201_CREATED)
def create_credit_memo(
    data: CreditMemoCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        logger.info(f"API: Creating {data.type.value} credit memo ({data.reason.value})")
        memo = CreditMemoService(db).create_credit_memo(
            memo_type=data.type,
            reason=data.reason,
            items=[item.model_dump() for item in data.items],
            vendor_id=data.vendor_id,
            customer_id=data.customer_id,
            invoice_id=data.invoice_id,
            shipment_id=data.shipment_id,
            affects_inventory=data.affects_inventory,
            notes=data.notes,
            created_by_id=current_user.id,
        )
        return CreditMemoResponse.model_validate(memo)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{memo_id}", response_model=CreditMemoResponse)
def update_credit_memo(
    memo_id: str,
    data: CreditMemoUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        fields = data.model_dump(exclude_unset=True)
        if data.items is not None:
            fields["items"] = [item.model_dump() for item in data.items]
        memo = CreditMemoService(db).update_credit_memo(memo_id, **fields)
        if not memo:
            raise _not_found()
        return CreditMemoResponse.model_validate(memo)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{memo_id}/approve", response_model=CreditMemoResponse)
def approve_credit_memo(
    memo_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        memo = CreditMemoService(db).approve_credit_memo(memo_id, approved_by_id=current_user.id)
        if not memo:
            raise _not_found()
        return CreditMemoResponse.model_validate(memo)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{memo_id}/cancel", response_model=CreditMemoResponse)
def cancel_credit_memo(
    memo_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        memo = CreditMemoService(db).cancel_credit_memo(memo_id, cancelled_by_id=current_user.id)
        if not memo:
            raise _not_found()
        return CreditMemoResponse.model_validate(memo)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
