"""
Financial report routes.

Every report takes the same window parameters: explicit `start`/`end`
dates, or `period` = this_month | last_month | <number of days>.
"""

from datetime import date, datetime
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.user import User
from backoffice.schemas.report import (
    ExpenseBreakdownRow,
    FinancialDashboard,
    FinancialOverview,
    FixedVsVariable,
    NetProfitMonth,
    PurchaseOrderSummaryReport,
    RevenueExpenseMonth,
)
from backoffice.services.report_service import FinancialReportService
from backoffice.utils.date_range import parse_date_range

router = APIRouter()


def report_window(
    period: Optional[str] = Query("this_month", description="this_month, last_month or a number of days (max 730)"),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
) -> Tuple[datetime, datetime]:
    try:
        return parse_date_range(period, start, end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/overview", response_model=FinancialOverview)
def financial_overview(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return FinancialReportService(db).get_financial_overview(*window)


@router.get("/revenue-vs-expenses", response_model=List[RevenueExpenseMonth])
def revenue_vs_expenses(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return FinancialReportService(db).get_revenue_vs_expenses_by_month(*window)


@router.get("/net-profit", response_model=List[NetProfitMonth])
def monthly_net_profit(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return FinancialReportService(db).get_monthly_net_profit(*window)


@router.get("/expense-breakdown", response_model=List[ExpenseBreakdownRow])
def expense_breakdown(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return FinancialReportService(db).get_expense_breakdown_by_category(*window)


@router.get("/fixed-vs-variable", response_model=FixedVsVariable)
def fixed_vs_variable(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return FinancialReportService(db).get_fixed_vs_variable_expenses(*window)


@router.get("/purchase-orders", response_model=PurchaseOrderSummaryReport)
def purchase_order_summary(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    return FinancialReportService(db).get_purchase_order_summary(*window)


@router.get("/dashboard", response_model=FinancialDashboard)
def financial_dashboard(
    window: Tuple[datetime, datetime] = Depends(report_window),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    service = FinancialReportService(db)
    return FinancialDashboard(
        overview=service.get_financial_overview(*window),
        revenue_vs_expenses=service.get_revenue_vs_expenses_by_month(*window),
        monthly_net_profit=service.get_monthly_net_profit(*window),
        expense_breakdown=service.get_expense_breakdown_by_category(*window),
        fixed_vs_variable=service.get_fixed_vs_variable_expenses(*window),
        purchase_orders=service.get_purchase_order_summary(*window),
    )
