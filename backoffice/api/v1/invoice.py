from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.invoice import InvoicePaymentStatus, InvoiceType
from backoffice.models.user import User
from backoffice.schemas.invoice import InvoiceListResponse, InvoiceResponse, InvoiceSummary, InvoiceUpdate
from backoffice.services import invoice_service

router = APIRouter()


@router.get("", response_model=InvoiceListResponse)
def list_invoices(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    search: Optional[str] = Query(None, description="Search invoice number, customer name or phone"),
    invoice_type: Optional[InvoiceType] = Query(None),
    payment_status: Optional[InvoicePaymentStatus] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    invoices, total = invoice_service.get_all_invoices(
        db, skip=skip, limit=limit, search=search, invoice_type=invoice_type,
        payment_status=payment_status, start_date=start_date, end_date=end_date,
    )
    return InvoiceListResponse(
        total=total, skip=skip, limit=limit,
        invoices=[InvoiceSummary.model_validate(i) for i in invoices],
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.get_invoice_by_id(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: str,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.update_invoice(db, invoice_id, **data.model_dump(exclude_unset=True))
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)
