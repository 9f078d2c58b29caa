import enum
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id


class ExpenseCategoryType(str, enum.Enum):
    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


class ExpensePaymentMode(str, enum.Enum):
    CASH = "CASH"
    BANK = "BANK"
    UPI = "UPI"
    CARD = "CARD"


class RecurrenceType(str, enum.Enum):
    NONE = "NONE"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


DEFAULT_COLOR_TAG = "#6b7280"


class ExpenseCategory(Base):
    """Expense categories (rent, utilities, shipping, ...) - separate from product catalog."""
    __tablename__ = "expense_categories"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXPCAT"))
    name = Column(String(100), unique=True, nullable=False)
    type = Column(Enum(ExpenseCategoryType), nullable=False, default=ExpenseCategoryType.VARIABLE)
    color_tag = Column(String(7), nullable=False, default=DEFAULT_COLOR_TAG)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    expenses = relationship("Expense", back_populates="category")


class Expense(Base):
    """Expense entry; soft deleted through deleted_at."""
    __tablename__ = "expenses"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXP"))
    expense_number = Column(String(20), unique=True, nullable=False)
    date = Column(Date, nullable=False, index=True)
    expense_category_id = Column(String(20), ForeignKey("expense_categories.id"), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)
    payment_mode = Column(Enum(ExpensePaymentMode), nullable=False)
    vendor_name = Column(String(255), nullable=True)

    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_type = Column(Enum(RecurrenceType), nullable=False, default=RecurrenceType.NONE)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    category = relationship("ExpenseCategory", back_populates="expenses")
