from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseCategoryType,
    ExpensePaymentMode,
    RecurrenceType,
)
from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType
from backoffice.services import ledger_service
from backoffice.utils.date_range import first_of_month, last_of_month, start_of_day, utcnow
from backoffice.utils.purchase_math import ZERO, to_money


def _today() -> date:
    return utcnow().date()


def generate_expense_number(db: Session) -> str:
    number = generate_numeric_code("EXP", digits=6)
    while db.query(Expense).filter(Expense.expense_number == number).first():
        number = generate_numeric_code("EXP", digits=6)
    return number


def _post_expense_ledger(db: Session, expense: Expense, created_by_id: Optional[int] = None):
    """DR EXPENSE, CR the cash/bank/UPI/card account the expense was paid from."""
    description = expense.description or "Expense"
    ledger_service.post_entries(
        db,
        [
            {
                "account_type": LedgerAccountType.EXPENSE,
                "debit": expense.amount,
                "credit": ZERO,
                "reference_type": LedgerReferenceType.EXPENSE,
                "reference_id": expense.id,
                "description": description,
            },
            {
                "account_type": ledger_service.account_for_payment_mode(expense.payment_mode),
                "debit": ZERO,
                "credit": expense.amount,
                "reference_type": LedgerReferenceType.EXPENSE,
                "reference_id": expense.id,
                "description": description,
            },
        ],
        created_by_id=created_by_id,
        entry_date=start_of_day(expense.date),
    )


def _check_recurrence(is_recurring: bool, recurrence_type: RecurrenceType) -> RecurrenceType:
    if not is_recurring:
        return RecurrenceType.NONE
    if recurrence_type == RecurrenceType.NONE:
        raise ValueError("Recurring expenses need a MONTHLY or YEARLY recurrence type")
    return recurrence_type


def create_expense(
    db: Session,
    amount: Decimal,
    expense_category_id: str,
    payment_mode: ExpensePaymentMode,
    expense_date: Optional[date] = None,
    description: Optional[str] = None,
    vendor_name: Optional[str] = None,
    is_recurring: bool = False,
    recurrence_type: RecurrenceType = RecurrenceType.NONE,
    created_by_id: Optional[int] = None,
) -> Expense:
    """Create a single expense; date defaults to today. Posts DR EXPENSE / CR <payment mode account>."""
    amount = to_money(amount)
    if amount <= 0:
        raise ValueError("Amount must be greater than 0")

    category = db.query(ExpenseCategory).filter(ExpenseCategory.id == expense_category_id).first()
    if not category:
        raise ValueError("Expense category not found")

    expense = Expense(
        expense_number=generate_expense_number(db),
        date=expense_date or _today(),
        expense_category_id=category.id,
        description=description,
        amount=amount,
        payment_mode=payment_mode,
        vendor_name=vendor_name,
        is_recurring=is_recurring,
        recurrence_type=_check_recurrence(is_recurring, recurrence_type),
        created_by_id=created_by_id,
    )
    db.add(expense)
    try:
        db.flush()  # get expense.id for ledger
        _post_expense_ledger(db, expense, created_by_id)
        db.commit()
        db.refresh(expense)
    except Exception:
        db.rollback()
        logger.exception("Error creating expense")
        raise ValueError("Failed to create expense.")

    logger.info(f"Expense created: {expense.expense_number} - {category.name} - {amount}")
    return expense


def get_expense_by_id(db: Session, expense_id: str) -> Optional[Expense]:
    """Get a live (not deleted) expense."""
    return (
        db.query(Expense)
        .options(joinedload(Expense.category))
        .filter(Expense.id == expense_id, Expense.deleted_at.is_(None))
        .first()
    )


def get_all_expenses(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    expense_category_id: Optional[str] = None,
    payment_mode: Optional[ExpensePaymentMode] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    is_recurring: Optional[bool] = None,
) -> Tuple[List[Expense], int, Decimal]:
    """List live expenses with filters. Returns (rows, total_count, total_amount)."""
    query = (
        db.query(Expense)
        .options(joinedload(Expense.category))
        .filter(Expense.deleted_at.is_(None))
    )
    if expense_category_id:
        query = query.filter(Expense.expense_category_id == expense_category_id)
    if payment_mode:
        query = query.filter(Expense.payment_mode == payment_mode)
    if start_date is not None:
        query = query.filter(Expense.date >= start_date)
    if end_date is not None:
        query = query.filter(Expense.date <= end_date)
    if is_recurring is not None:
        query = query.filter(Expense.is_recurring == is_recurring)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.outerjoin(ExpenseCategory, Expense.expense_category_id == ExpenseCategory.id).filter(
            or_(
                Expense.expense_number.ilike(term),
                Expense.description.ilike(term),
                Expense.vendor_name.ilike(term),
                ExpenseCategory.name.ilike(term),
            )
        )

    total_count = query.count()
    total_row = query.with_entities(func.coalesce(func.sum(Expense.amount), 0)).first()
    total_amount = to_money(total_row[0]) if total_row else ZERO

    rows = (
        query.order_by(Expense.date.desc(), Expense.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total_count, total_amount


def update_expense(
    db: Session,
    expense_id: str,
    updated_by_id: Optional[int] = None,
    **fields,
) -> Optional[Expense]:
    """
    Update an expense. Only keys present in `fields` are touched.
    The ledger pair is reposted when amount, payment mode, date or description change.
    """
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        return None

    if "amount" in fields:
        fields["amount"] = to_money(fields["amount"])
        if fields["amount"] <= 0:
            raise ValueError("Amount must be greater than 0")

    if "expense_category_id" in fields:
        category = db.query(ExpenseCategory).filter(ExpenseCategory.id == fields["expense_category_id"]).first()
        if not category:
            raise ValueError("Expense category not found")

    if "expense_date" in fields:
        fields["date"] = fields.pop("expense_date")

    repost = any(
        key in fields and fields[key] != getattr(expense, key)
        for key in ("amount", "payment_mode", "date", "description")
    )

    for key, value in fields.items():
        setattr(expense, key, value)
    expense.recurrence_type = _check_recurrence(expense.is_recurring, expense.recurrence_type)

    try:
        if repost:
            ledger_service.delete_entries_for_reference(db, LedgerReferenceType.EXPENSE, expense.id)
            _post_expense_ledger(db, expense, updated_by_id)
        db.commit()
        db.refresh(expense)
    except Exception:
        db.rollback()
        logger.exception("Error updating expense")
        raise ValueError("Failed to update expense.")

    logger.info(f"Expense updated: {expense.expense_number} (ledger reposted: {repost})")
    return expense


def delete_expense(db: Session, expense_id: str) -> bool:
    """Soft delete; the ledger rows are removed."""
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        return False

    expense.deleted_at = utcnow()
    ledger_service.delete_entries_for_reference(db, LedgerReferenceType.EXPENSE, expense.id)
    try:
        db.commit()
        logger.info(f"Expense deleted: {expense.expense_number}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting expense: {e}")
        raise ValueError("Failed to delete expense.")


def get_expense_summary(db: Session, start_date: date, end_date: date) -> dict:
    """Totals for a date range: overall, fixed vs variable, per category and the largest category."""
    rows = (
        db.query(
            ExpenseCategory.id,
            ExpenseCategory.name,
            ExpenseCategory.type,
            ExpenseCategory.color_tag,
            func.coalesce(func.sum(Expense.amount), 0),
            func.count(Expense.id),
        )
        .join(Expense, Expense.expense_category_id == ExpenseCategory.id)
        .filter(
            Expense.deleted_at.is_(None),
            Expense.date >= start_date,
            Expense.date <= end_date,
        )
        .group_by(ExpenseCategory.id, ExpenseCategory.name, ExpenseCategory.type, ExpenseCategory.color_tag)
        .all()
    )

    by_category = [
        {
            "category_id": cat_id,
            "name": name,
            "type": cat_type.value,
            "color_tag": color,
            "amount": to_money(amount),
            "count": count,
        }
        for cat_id, name, cat_type, color, amount, count in rows
    ]
    by_category.sort(key=lambda r: r["amount"], reverse=True)

    total = sum((r["amount"] for r in by_category), ZERO)
    fixed = sum((r["amount"] for r in by_category if r["type"] == ExpenseCategoryType.FIXED.value), ZERO)

    return {
        "start_date": start_date,
        "end_date": end_date,
        "total": total,
        "fixed": fixed,
        "variable": total - fixed,
        "by_category": by_category,
        "highest_category": (
            {"name": by_category[0]["name"], "amount": by_category[0]["amount"]} if by_category else None
        ),
    }


# ==================== RECURRING ====================

def next_recurrence_date(last: date, recurrence_type: RecurrenceType) -> Optional[date]:
    """Next occurrence: same day next month or next year, day clamped to 28."""
    day = min(last.day, 28)
    if recurrence_type == RecurrenceType.MONTHLY:
        if last.month == 12:
            return date(last.year + 1, 1, day)
        return date(last.year, last.month + 1, day)
    if recurrence_type == RecurrenceType.YEARLY:
        return date(last.year + 1, last.month, day)
    return None


def process_recurring_expenses(
    db: Session,
    created_by_id: Optional[int] = None,
    today: Optional[date] = None,
) -> List[Expense]:
    """
    Create this month's copy of each recurring expense whose next occurrence
    falls in the current month and has not been created yet. Meant to be
    triggered by an external scheduler; running it twice creates nothing new.
    """
    today = today or _today()
    month_start = first_of_month(today)
    month_end = last_of_month(today)

    recurring = (
        db.query(Expense)
        .filter(
            Expense.is_recurring.is_(True),
            Expense.recurrence_type.in_([RecurrenceType.MONTHLY, RecurrenceType.YEARLY]),
            Expense.deleted_at.is_(None),
        )
        .order_by(Expense.date.asc())
        .all()
    )

    created = []
    for source in recurring:
        next_date = next_recurrence_date(source.date, source.recurrence_type)
        if next_date is None or next_date < month_start or next_date > month_end:
            continue

        description = source.description or f"Recurring: {source.expense_number}"
        duplicate = db.query(Expense).filter(
            Expense.expense_category_id == source.expense_category_id,
            Expense.amount == source.amount,
            Expense.description == description,
            Expense.is_recurring.is_(True),
            Expense.date >= month_start,
            Expense.date <= month_end,
            Expense.deleted_at.is_(None),
        ).first()
        if duplicate:
            logger.debug(f"Recurring expense {source.expense_number} already created this month")
            continue

        expense = Expense(
            expense_number=generate_expense_number(db),
            date=next_date,
            expense_category_id=source.expense_category_id,
            description=description,
            amount=source.amount,
            payment_mode=source.payment_mode,
            vendor_name=source.vendor_name,
            is_recurring=True,
            recurrence_type=source.recurrence_type,
            created_by_id=created_by_id,
        )
        db.add(expense)
        db.flush()
        _post_expense_ledger(db, expense, created_by_id)
        created.append(expense)

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error processing recurring expenses")
        raise ValueError("Failed to process recurring expenses.")

    for expense in created:
        db.refresh(expense)
    logger.info(f"Recurring expenses processed: {len(created)} created")
    return created
