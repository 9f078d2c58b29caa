from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.user import User
from backoffice.schemas.common import SuccessResponse
from backoffice.schemas.receipt import (
    ReceiptCreate,
    ReceiptListResponse,
    ReceiptResponse,
    ReceiptUpdate,
    TrxIdResponse,
)
from backoffice.services import receipt_service

router = APIRouter()


@router.get("", response_model=ReceiptListResponse)
def list_receipts(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None, description="Search trx id, customer name or invoice number"),
    customer_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    receipts, total = receipt_service.get_all_receipts(
        db, skip=skip, limit=limit, search=search,
        customer_id=customer_id, start_date=start_date, end_date=end_date,
    )
    return ReceiptListResponse(
        total=total,
        receipts=[ReceiptResponse.model_validate(r) for r in receipts],
    )


@router.get("/generate-id", response_model=TrxIdResponse)
def generate_trx_id(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return TrxIdResponse(trx_id=receipt_service.generate_trx_id(db))


@router.get("/{receipt_id}", response_model=ReceiptResponse)
def get_receipt(
    receipt_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    receipt = receipt_service.get_receipt_by_id(db, receipt_id)
    if not receipt:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")
    return ReceiptResponse.model_validate(receipt)


@router.post("", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED)
def create_receipt(
    data: ReceiptCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Record money received; linked customers earn loyalty points."""
    try:
        receipt = receipt_service.create_receipt(db, **data.model_dump())
        return ReceiptResponse.model_validate(receipt)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{receipt_id}", response_model=ReceiptResponse)
def update_receipt(
    receipt_id: str,
    data: ReceiptUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        receipt = receipt_service.update_receipt(db, receipt_id, **data.model_dump(exclude_unset=True))
        if not receipt:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")
        return ReceiptResponse.model_validate(receipt)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{receipt_id}", response_model=SuccessResponse)
def delete_receipt(
    receipt_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        if not receipt_service.delete_receipt(db, receipt_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")
        return SuccessResponse(message="Receipt deleted successfully")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
