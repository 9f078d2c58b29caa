from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.expense import ExpensePaymentMode
from backoffice.models.user import User
from backoffice.schemas.common import SuccessResponse
from backoffice.schemas.expense import (
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseNumberResponse,
    ExpenseResponse,
    ExpenseSummaryResponse,
    ExpenseUpdate,
    RecurringProcessResponse,
)
from backoffice.services.expense_service import (
    create_expense,
    delete_expense,
    generate_expense_number,
    get_all_expenses,
    get_expense_by_id,
    get_expense_summary,
    process_recurring_expenses,
    update_expense,
)
from backoffice.utils.date_range import parse_date_range
from backoffice.logger_config import logger

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_single_expense(
    data: ExpenseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Create a single expense; date defaults to today if not provided. Posts the ledger pair."""
    try:
        expense = create_expense(
            db,
            amount=data.amount,
            expense_category_id=data.expense_category_id,
            payment_mode=data.payment_mode,
            expense_date=data.date,
            description=data.description,
            vendor_name=data.vendor_name,
            is_recurring=data.is_recurring,
            recurrence_type=data.recurrence_type,
            created_by_id=current_user.id,
        )
        return ExpenseResponse.model_validate(expense)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Error creating expense")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create expense",
        )


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    expense_category_id: Optional[str] = Query(None),
    payment_mode: Optional[ExpensePaymentMode] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    is_recurring: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Search number, description, vendor or category name"),
    current_user: User = Depends(get_current_active_user),
):
    """List expenses with filters: category, payment mode, date range, search."""
    rows, total_count, total_amount = get_all_expenses(
        db,
        skip=skip,
        limit=limit,
        expense_category_id=expense_category_id,
        payment_mode=payment_mode,
        start_date=start_date,
        end_date=end_date,
        search=search,
        is_recurring=is_recurring,
    )
    return ExpenseListResponse(
        total=total_count,
        total_amount=total_amount,
        expenses=[ExpenseResponse.model_validate(r) for r in rows],
    )


@router.get("/generate-number", response_model=ExpenseNumberResponse)
def next_expense_number(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return ExpenseNumberResponse(expense_number=generate_expense_number(db))


@router.get("/summary", response_model=ExpenseSummaryResponse)
def expense_summary(
    db: Session = Depends(get_db),
    period: Optional[str] = Query("this_month", description="this_month, last_month or a number of days"),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
):
    """Totals for a period: overall, fixed vs variable, by category."""
    try:
        window_start, window_end = parse_date_range(period, start, end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return get_expense_summary(db, window_start.date(), window_end.date())


@router.post("/process-recurring", response_model=RecurringProcessResponse)
def run_recurring_expenses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Create this month's copies of recurring expenses. Safe to call repeatedly (e.g. from cron)."""
    try:
        created = process_recurring_expenses(db, created_by_id=current_user.id)
        return RecurringProcessResponse(
            created=len(created),
            expenses=[ExpenseResponse.model_validate(e) for e in created],
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return ExpenseResponse.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_single_expense(
    expense_id: str,
    data: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    fields = data.model_dump(exclude_unset=True)
    if "date" in fields:
        fields["expense_date"] = fields.pop("date")
    try:
        expense = update_expense(db, expense_id, updated_by_id=current_user.id, **fields)
        if not expense:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
        return ExpenseResponse.model_validate(expense)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{expense_id}", response_model=SuccessResponse)
def delete_single_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        if not delete_expense(db, expense_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
        return SuccessResponse(message="Expense deleted successfully")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
