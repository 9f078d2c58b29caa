from decimal import Decimal
from datetime import datetime
from typing import Dict, List
from pydantic import BaseModel


class FinancialOverview(BaseModel):
    start_date: datetime
    end_date: datetime
    total_revenue: Decimal
    total_cogs: Decimal
    gross_profit: Decimal
    total_purchases: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    expense_percent_of_revenue: Decimal
    profit_margin_percent: Decimal


class RevenueExpenseMonth(BaseModel):
    month: str
    revenue: Decimal
    cogs: Decimal
    expenses: Decimal


class NetProfitMonth(BaseModel):
    month: str
    net_profit: Decimal


class ExpenseBreakdownRow(BaseModel):
    name: str
    color_tag: str
    value: Decimal


class FixedVsVariable(BaseModel):
    fixed: Decimal
    variable: Decimal


class PurchaseOrderSummaryReport(BaseModel):
    count: int
    by_status: Dict[str, int]
    total_ordered: Decimal
    total_paid: Decimal
    total_outstanding: Decimal


class FinancialDashboard(BaseModel):
    """Every report for one window, in one response."""
    overview: FinancialOverview
    revenue_vs_expenses: List[RevenueExpenseMonth]
    monthly_net_profit: List[NetProfitMonth]
    expense_breakdown: List[ExpenseBreakdownRow]
    fixed_vs_variable: FixedVsVariable
    purchase_orders: PurchaseOrderSummaryReport
