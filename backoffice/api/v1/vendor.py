from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.user import User
from backoffice.models.vendor import VendorStatus
from backoffice.schemas.common import SuccessResponse
from backoffice.schemas.vendor import (
    OutstandingPayablesResponse,
    SupplierCodeResponse,
    VendorBalanceResponse,
    VendorCreate,
    VendorListResponse,
    VendorResponse,
    VendorStatementResponse,
    VendorUpdate,
)
from backoffice.services import ledger_service, vendor_service
from backoffice.utils.date_range import end_of_day
from backoffice.utils.purchase_math import ZERO
from backoffice.logger_config import logger

router = APIRouter()


@router.get("/", response_model=VendorListResponse)
def list_vendors(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None, description="Search by name, contact, email, supplier code or city"),
    status_filter: Optional[VendorStatus] = Query(None, alias="status"),
    is_active: Optional[bool] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get all vendors with optional search."""
    vendors, total = vendor_service.get_all_vendors(
        db, skip=skip, limit=limit, search=search, status=status_filter, is_active=is_active
    )
    return VendorListResponse(
        total=total,
        vendors=[VendorResponse.model_validate(v) for v in vendors]
    )


@router.get("/generate-code", response_model=SupplierCodeResponse)
def generate_supplier_code(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return SupplierCodeResponse(supplier_code=vendor_service.generate_supplier_code(db))


@router.get("/outstanding", response_model=OutstandingPayablesResponse)
def outstanding_payables(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Vendors with a payable balance, largest first."""
    rows = vendor_service.get_outstanding_payables(db, limit=limit)
    return OutstandingPayablesResponse(
        total_outstanding=sum((r["balance"] for r in rows), ZERO),
        vendors=rows,
    )


@router.get("/{vendor_id}", response_model=VendorResponse)
def get_vendor(
    vendor_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    vendor = vendor_service.get_vendor_by_id(db, vendor_id)
    if not vendor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vendor not found"
        )
    return VendorResponse.model_validate(vendor)


@router.post("/", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
def create_vendor(
    vendor_data: VendorCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Create a new vendor."""
    try:
        vendor = vendor_service.create_vendor(db, **vendor_data.model_dump())
        logger.info(f"Vendor {vendor.supplier_code} created by {current_user.email}")
        return VendorResponse.model_validate(vendor)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.put("/{vendor_id}", response_model=VendorResponse)
def update_vendor(
    vendor_id: str,
    vendor_data: VendorUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Update vendor information."""
    try:
        vendor = vendor_service.update_vendor(db, vendor_id, **vendor_data.model_dump(exclude_unset=True))
        if not vendor:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vendor not found"
            )
        return VendorResponse.model_validate(vendor)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.delete("/{vendor_id}", response_model=SuccessResponse)
def delete_vendor(
    vendor_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete a vendor without purchase orders."""
    try:
        success = vendor_service.delete_vendor(db, vendor_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vendor not found"
            )
        logger.info(f"Vendor {vendor_id} deleted by {current_user.email}")
        return SuccessResponse(message="Vendor deleted successfully")
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/{vendor_id}/balance", response_model=VendorBalanceResponse)
def vendor_balance(
    vendor_id: str,
    as_of: Optional[date] = Query(None, description="Balance at the end of this day"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Positive balance = amount owed to the vendor."""
    if not vendor_service.get_vendor_by_id(db, vendor_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    balance = ledger_service.get_vendor_balance(
        db, vendor_id, as_of=end_of_day(as_of) if as_of else None
    )
    return VendorBalanceResponse(vendor_id=vendor_id, as_of=as_of, balance=balance)


@router.get("/{vendor_id}/ledger", response_model=VendorStatementResponse)
def vendor_statement(
    vendor_id: str,
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Vendor ledger entries with a running balance."""
    vendor = vendor_service.get_vendor_by_id(db, vendor_id)
    if not vendor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    if from_date and to_date and from_date > to_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="from_date must be on or before to_date")

    entries, opening = ledger_service.get_vendor_statement(
        db, vendor_id, from_date=from_date, to_date=to_date, skip=skip, limit=limit
    )
    closing = entries[-1]["balance"] if entries else opening
    return VendorStatementResponse(
        vendor_id=vendor.id,
        vendor_name=vendor.name,
        opening_balance=opening,
        closing_balance=closing,
        entries=entries,
    )
