from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.logger_config import logger
from backoffice.models.expense import ExpensePaymentMode
from backoffice.models.ledger import (
    LedgerAccountType,
    LedgerEntry,
    LedgerReferenceType,
    PartyType,
)
from backoffice.models.payment import PaymentMethod
from backoffice.utils.date_range import end_of_day, start_of_day
from backoffice.utils.purchase_math import ZERO, to_money


_METHOD_ACCOUNTS = {
    PaymentMethod.cash: LedgerAccountType.CASH,
    PaymentMethod.card: LedgerAccountType.CARD,
    PaymentMethod.check: LedgerAccountType.BANK,
    PaymentMethod.digital: LedgerAccountType.UPI,
    PaymentMethod.other: LedgerAccountType.CASH,
}

_MODE_ACCOUNTS = {
    ExpensePaymentMode.CASH: LedgerAccountType.CASH,
    ExpensePaymentMode.BANK: LedgerAccountType.BANK,
    ExpensePaymentMode.UPI: LedgerAccountType.UPI,
    ExpensePaymentMode.CARD: LedgerAccountType.CARD,
}


def account_for_method(method: PaymentMethod) -> LedgerAccountType:
    return _METHOD_ACCOUNTS.get(method, LedgerAccountType.CASH)


def account_for_payment_mode(mode: ExpensePaymentMode) -> LedgerAccountType:
    return _MODE_ACCOUNTS.get(mode, LedgerAccountType.CASH)


# ==================== POSTING ====================

def post_entries(
    db: Session,
    entries: Iterable[dict],
    created_by_id: Optional[int] = None,
    entry_date: Optional[datetime] = None,
) -> List[LedgerEntry]:
    """
    Add ledger rows to the session. The caller owns the transaction.

    Each entry: {account_type, debit, credit, reference_type, reference_id,
    description?, party_type?, party_id?}
    """
    rows = []
    for e in entries:
        row = LedgerEntry(
            account_type=e["account_type"],
            party_type=e.get("party_type"),
            party_id=e.get("party_id"),
            debit=to_money(e.get("debit", ZERO)),
            credit=to_money(e.get("credit", ZERO)),
            reference_type=e["reference_type"],
            reference_id=e["reference_id"],
            description=e.get("description"),
            created_by_id=created_by_id,
        )
        if entry_date is not None:
            row.date = entry_date
        db.add(row)
        rows.append(row)

    logger.debug(
        "Ledger entries staged: "
        + ", ".join(f"{r.account_type.value} Dr {r.debit} Cr {r.credit}" for r in rows)
    )
    return rows


def post_vendor_ledger(
    db: Session,
    vendor_id: str,
    entries: Iterable[dict],
    created_by_id: Optional[int] = None,
) -> List[LedgerEntry]:
    """Post entries where the VENDOR side carries the vendor as party."""
    tagged = []
    for e in entries:
        e = dict(e)
        if e["account_type"] == LedgerAccountType.VENDOR:
            e["party_type"] = PartyType.VENDOR
            e["party_id"] = vendor_id
        tagged.append(e)
    return post_entries(db, tagged, created_by_id=created_by_id)


def delete_entries_for_reference(
    db: Session,
    reference_type: LedgerReferenceType,
    reference_id: str,
) -> int:
    """Remove every ledger row posted for a document. The caller owns the transaction."""
    rows = db.query(LedgerEntry).filter(
        LedgerEntry.reference_type == reference_type,
        LedgerEntry.reference_id == reference_id,
    ).all()
    for row in rows:
        db.delete(row)
    logger.debug(f"Ledger entries removed for {reference_type.value} {reference_id}: {len(rows)}")
    return len(rows)


# ==================== VENDOR BALANCES ====================

def get_vendor_balance(db: Session, vendor_id: str, as_of: Optional[datetime] = None) -> Decimal:
    """
    Vendor balance = sum(debit) - sum(credit) over VENDOR party rows.
    Positive = we owe the vendor.
    """
    query = db.query(
        func.coalesce(func.sum(LedgerEntry.debit), 0),
        func.coalesce(func.sum(LedgerEntry.credit), 0),
    ).filter(
        LedgerEntry.party_type == PartyType.VENDOR,
        LedgerEntry.party_id == vendor_id,
    )
    if as_of is not None:
        query = query.filter(LedgerEntry.date <= as_of)

    total_debit, total_credit = query.one()
    balance = to_money(total_debit) - to_money(total_credit)
    logger.debug(f"Vendor {vendor_id} balance: Debit={total_debit}, Credit={total_credit}, Balance={balance}")
    return balance


def get_vendor_balances_bulk(db: Session, vendor_ids: List[str]) -> Dict[str, Decimal]:
    """Balances for many vendors in one query; vendors without entries are absent."""
    if not vendor_ids:
        return {}
    rows = db.query(
        LedgerEntry.party_id,
        func.coalesce(func.sum(LedgerEntry.debit), 0),
        func.coalesce(func.sum(LedgerEntry.credit), 0),
    ).filter(
        LedgerEntry.party_type == PartyType.VENDOR,
        LedgerEntry.party_id.in_(vendor_ids),
    ).group_by(LedgerEntry.party_id).all()
    return {party_id: to_money(debit) - to_money(credit) for party_id, debit, credit in rows}


def get_vendor_statement(
    db: Session,
    vendor_id: str,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[dict], Decimal]:
    """
    Vendor statement: entries in the window, oldest first, each with the running balance.
    Returns (entries, opening_balance) where opening_balance is the balance before from_date.
    """
    opening = ZERO
    query = db.query(LedgerEntry).filter(
        LedgerEntry.party_type == PartyType.VENDOR,
        LedgerEntry.party_id == vendor_id,
    )
    if from_date:
        window_start = start_of_day(from_date)
        query = query.filter(LedgerEntry.date >= window_start)
        opening = _vendor_balance_before(db, vendor_id, window_start)
    if to_date:
        query = query.filter(LedgerEntry.date <= end_of_day(to_date))

    rows = query.order_by(LedgerEntry.date.asc(), LedgerEntry.id.asc()).all()

    running = opening
    entries = []
    for row in rows:
        running += to_money(row.debit) - to_money(row.credit)
        entries.append({
            "id": row.id,
            "date": row.date,
            "account_type": row.account_type.value,
            "reference_type": row.reference_type.value,
            "reference_id": row.reference_id,
            "description": row.description,
            "debit": to_money(row.debit),
            "credit": to_money(row.credit),
            "balance": running,
        })

    return entries[skip:skip + limit], opening


def _vendor_balance_before(db: Session, vendor_id: str, before: datetime) -> Decimal:
    debit, credit = db.query(
        func.coalesce(func.sum(LedgerEntry.debit), 0),
        func.coalesce(func.sum(LedgerEntry.credit), 0),
    ).filter(
        LedgerEntry.party_type == PartyType.VENDOR,
        LedgerEntry.party_id == vendor_id,
        LedgerEntry.date < before,
    ).one()
    return to_money(debit) - to_money(credit)


class LedgerService:
    """
    Browsing the general ledger
    """
    def __init__(self, db: Session):
        self.db = db

    def list_entries(
        self,
        skip: int = 0,
        limit: int = 50,
        account_type: Optional[LedgerAccountType] = None,
        reference_type: Optional[LedgerReferenceType] = None,
        reference_id: Optional[str] = None,
        party_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[List[LedgerEntry], int, dict]:
        query = self.db.query(LedgerEntry)

        if account_type:
            query = query.filter(LedgerEntry.account_type == account_type)
        if reference_type:
            query = query.filter(LedgerEntry.reference_type == reference_type)
        if reference_id:
            query = query.filter(LedgerEntry.reference_id == reference_id)
        if party_id:
            query = query.filter(LedgerEntry.party_id == party_id)

        # Date range filtering
        if start_date:
            query = query.filter(LedgerEntry.date >= start_of_day(start_date))
            logger.debug(f"Filtering by start_date: {start_date}")
        if end_date:
            query = query.filter(LedgerEntry.date <= end_of_day(end_date))
            logger.debug(f"Filtering by end_date: {end_date}")

        total_count = query.count()

        totals_row = query.with_entities(
            func.coalesce(func.sum(LedgerEntry.debit), 0),
            func.coalesce(func.sum(LedgerEntry.credit), 0),
        ).first()
        totals = {
            "total_debit": to_money(totals_row[0]),
            "total_credit": to_money(totals_row[1]),
        }

        rows = (
            query
            .order_by(LedgerEntry.date.desc(), LedgerEntry.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return rows, total_count, totals
