from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType, PartyType


class LedgerEntryResponse(BaseModel):
    id: int
    date: datetime
    account_type: LedgerAccountType
    party_type: Optional[PartyType] = None
    party_id: Optional[str] = None
    debit: Decimal
    credit: Decimal
    reference_type: LedgerReferenceType
    reference_id: str
    description: Optional[str] = None
    created_by_id: Optional[int] = None

    class Config:
        from_attributes = True


class LedgerListResponse(BaseModel):
    total: int
    total_debit: Decimal
    total_credit: Decimal
    entries: List[LedgerEntryResponse]
