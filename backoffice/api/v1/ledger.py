from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType
from backoffice.models.user import User
from backoffice.schemas.ledger import LedgerEntryResponse, LedgerListResponse
from backoffice.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=LedgerListResponse)
def list_ledger_entries(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    account_type: Optional[LedgerAccountType] = Query(None),
    reference_type: Optional[LedgerReferenceType] = Query(None),
    reference_id: Optional[str] = Query(None),
    party_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Browse ledger entries, newest first, with debit/credit totals of the filtered set."""
    rows, total, totals = LedgerService(db).list_entries(
        skip=skip,
        limit=limit,
        account_type=account_type,
        reference_type=reference_type,
        reference_id=reference_id,
        party_id=party_id,
        start_date=start_date,
        end_date=end_date,
    )
    return LedgerListResponse(
        total=total,
        entries=[LedgerEntryResponse.model_validate(r) for r in rows],
        **totals,
    )
