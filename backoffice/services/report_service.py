"""
Financial reports.

Revenue is money actually received: sale payments plus refund payments
(refunds are stored negative). Cost of goods sold is quantity times the
cost price captured at sale, over paid orders and POS sales. Expenses are
live expenses dated in the window.

    gross_profit = revenue - cogs
    net_profit   = gross_profit - expenses
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from itertools import chain
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.logger_config import logger
from backoffice.models.expense import Expense, ExpenseCategory, ExpenseCategoryType
from backoffice.models.order import Order, OrderItem, OrderPaymentStatus
from backoffice.models.payment import Payment, PaymentType
from backoffice.models.pos import POSSale, POSSaleItem
from backoffice.models.purchase_order import PurchaseOrder, PurchaseOrderStatus
from backoffice.utils.date_range import month_key
from backoffice.utils.purchase_math import HUNDRED, ZERO, to_money


REVENUE_TYPES = (PaymentType.sale, PaymentType.refund)


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    return to_money(part / whole * HUNDRED)


class FinancialReportService:
    """Aggregates over payments, expenses and purchase orders for a window."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== BASE QUERIES ====================

    def _revenue_query(self, start: datetime, end: datetime):
        return self.db.query(Payment).filter(
            Payment.type.in_(REVENUE_TYPES),
            Payment.created_at >= start,
            Payment.created_at <= end,
        )

    def _expense_query(self, start: datetime, end: datetime):
        return self.db.query(Expense).filter(
            Expense.deleted_at.is_(None),
            Expense.date >= start.date(),
            Expense.date <= end.date(),
        )

    def total_revenue(self, start: datetime, end: datetime) -> Decimal:
        value = self._revenue_query(start, end).with_entities(
            func.coalesce(func.sum(Payment.amount), 0)
        ).scalar()
        return to_money(value)

    def total_expenses(self, start: datetime, end: datetime) -> Decimal:
        value = self._expense_query(start, end).with_entities(
            func.coalesce(func.sum(Expense.amount), 0)
        ).scalar()
        return to_money(value)

    def _cogs_rows(self, start: datetime, end: datetime):
        """(sold_at, line cost) for every line sold in the window."""
        order_lines = (
            self.db.query(Order.paid_at, OrderItem.quantity, OrderItem.unit_cost)
            .join(Order, OrderItem.order_id == Order.id)
            .filter(
                Order.payment_status == OrderPaymentStatus.paid,
                Order.paid_at >= start,
                Order.paid_at <= end,
            )
        )
        pos_lines = (
            self.db.query(POSSale.created_at, POSSaleItem.quantity, POSSaleItem.unit_cost)
            .join(POSSale, POSSaleItem.sale_id == POSSale.id)
            .filter(POSSale.created_at >= start, POSSale.created_at <= end)
        )
        for sold_at, quantity, unit_cost in chain(order_lines, pos_lines):
            yield sold_at, to_money(quantity * to_money(unit_cost))

    def total_cogs(self, start: datetime, end: datetime) -> Decimal:
        return sum((cost for _, cost in self._cogs_rows(start, end)), ZERO)

    def total_purchases(self, start: datetime, end: datetime) -> Decimal:
        """Value of purchase orders fully received in the window."""
        value = self.db.query(func.coalesce(func.sum(PurchaseOrder.total_amount), 0)).filter(
            PurchaseOrder.status == PurchaseOrderStatus.received,
            PurchaseOrder.received_at >= start,
            PurchaseOrder.received_at <= end,
        ).scalar()
        return to_money(value)

    # ==================== REPORTS ====================

    def get_financial_overview(self, start: datetime, end: datetime) -> dict:
        total_revenue = self.total_revenue(start, end)
        total_cogs = self.total_cogs(start, end)
        gross_profit = total_revenue - total_cogs
        total_expenses = self.total_expenses(start, end)
        net_profit = gross_profit - total_expenses

        overview = {
            "start_date": start,
            "end_date": end,
            "total_revenue": total_revenue,
            "total_cogs": total_cogs,
            "gross_profit": gross_profit,
            "total_purchases": self.total_purchases(start, end),
            "total_expenses": total_expenses,
            "net_profit": net_profit,
            "expense_percent_of_revenue": _percent(total_expenses, total_revenue),
            "profit_margin_percent": _percent(net_profit, total_revenue),
        }
        logger.info(
            f"Financial overview {start:%Y-%m-%d}..{end:%Y-%m-%d}: "
            f"revenue={total_revenue}, cogs={total_cogs}, expenses={total_expenses}, net={net_profit}"
        )
        return overview

    def get_revenue_vs_expenses_by_month(self, start: datetime, end: datetime) -> List[dict]:
        """One row per month ('YYYY-MM') that has revenue, cost of goods or expenses, oldest first."""
        revenue: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        cogs: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        expenses: Dict[str, Decimal] = defaultdict(lambda: ZERO)

        for created_at, amount in self._revenue_query(start, end).with_entities(
            Payment.created_at, Payment.amount
        ):
            revenue[month_key(created_at)] += to_money(amount)

        for sold_at, cost in self._cogs_rows(start, end):
            cogs[month_key(sold_at)] += cost

        for expense_date, amount in self._expense_query(start, end).with_entities(
            Expense.date, Expense.amount
        ):
            expenses[month_key(expense_date)] += to_money(amount)

        months = sorted(set(revenue) | set(cogs) | set(expenses))
        return [
            {
                "month": m,
                "revenue": revenue.get(m, ZERO),
                "cogs": cogs.get(m, ZERO),
                "expenses": expenses.get(m, ZERO),
            }
            for m in months
        ]

    def get_monthly_net_profit(self, start: datetime, end: datetime) -> List[dict]:
        return [
            {"month": row["month"], "net_profit": row["revenue"] - row["cogs"] - row["expenses"]}
            for row in self.get_revenue_vs_expenses_by_month(start, end)
        ]

    def get_expense_breakdown_by_category(self, start: datetime, end: datetime) -> List[dict]:
        rows = (
            self._expense_query(start, end)
            .join(ExpenseCategory, Expense.expense_category_id == ExpenseCategory.id)
            .with_entities(
                ExpenseCategory.name,
                ExpenseCategory.color_tag,
                func.coalesce(func.sum(Expense.amount), 0),
            )
            .group_by(ExpenseCategory.name, ExpenseCategory.color_tag)
            .all()
        )
        breakdown = [
            {"name": name, "color_tag": color, "value": to_money(value)}
            for name, color, value in rows
        ]
        breakdown.sort(key=lambda r: r["value"], reverse=True)
        return breakdown

    def get_fixed_vs_variable_expenses(self, start: datetime, end: datetime) -> dict:
        rows = (
            self._expense_query(start, end)
            .join(ExpenseCategory, Expense.expense_category_id == ExpenseCategory.id)
            .with_entities(ExpenseCategory.type, func.coalesce(func.sum(Expense.amount), 0))
            .group_by(ExpenseCategory.type)
            .all()
        )
        totals = {category_type: to_money(value) for category_type, value in rows}
        return {
            "fixed": totals.get(ExpenseCategoryType.FIXED, ZERO),
            "variable": totals.get(ExpenseCategoryType.VARIABLE, ZERO),
        }

    def get_purchase_order_summary(self, start: datetime, end: datetime) -> dict:
        """
        Purchase orders created in the window: counts by status, and for the
        non-cancelled ones what was ordered, paid and is still owed.
        """
        orders = self.db.query(PurchaseOrder).filter(
            PurchaseOrder.created_at >= start,
            PurchaseOrder.created_at <= end,
        ).all()

        by_status = {s.value: 0 for s in PurchaseOrderStatus}
        total_ordered = ZERO
        total_paid = ZERO
        for po in orders:
            by_status[po.status.value] += 1
            if po.status == PurchaseOrderStatus.cancelled:
                continue
            total_ordered += to_money(po.total_amount)
            total_paid += to_money(po.total_paid)

        return {
            "count": len(orders),
            "by_status": by_status,
            "total_ordered": total_ordered,
            "total_paid": total_paid,
            "total_outstanding": total_ordered - total_paid,
        }
