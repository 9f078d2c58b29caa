from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

from backoffice.models.expense import ExpenseCategoryType, ExpensePaymentMode, RecurrenceType
from backoffice.schemas.common import check_money_places

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date


class ExpenseCreate(BaseModel):
    """Single expense create - date defaults to today on server if not provided."""
    date: Optional[DateType] = None
    expense_category_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    payment_mode: ExpensePaymentMode = ExpensePaymentMode.CASH
    description: Optional[str] = None
    vendor_name: Optional[str] = Field(None, max_length=255)
    is_recurring: bool = False
    recurrence_type: RecurrenceType = RecurrenceType.NONE

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        return check_money_places(v)


class ExpenseUpdate(BaseModel):
    date: Optional[DateType] = None
    expense_category_id: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0)
    payment_mode: Optional[ExpensePaymentMode] = None
    description: Optional[str] = None
    vendor_name: Optional[str] = Field(None, max_length=255)
    is_recurring: Optional[bool] = None
    recurrence_type: Optional[RecurrenceType] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        return check_money_places(v)


class ExpenseCategoryRef(BaseModel):
    id: str
    name: str
    type: ExpenseCategoryType
    color_tag: str

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    id: str
    expense_number: str
    date: DateType
    expense_category_id: str
    description: Optional[str] = None
    amount: Decimal
    payment_mode: ExpensePaymentMode
    vendor_name: Optional[str] = None
    is_recurring: bool
    recurrence_type: RecurrenceType
    created_by_id: Optional[int] = None
    created_at: datetime
    category: ExpenseCategoryRef

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    expenses: List[ExpenseResponse]


class CategoryAmount(BaseModel):
    category_id: str
    name: str
    type: ExpenseCategoryType
    color_tag: str
    amount: Decimal
    count: int


class HighestCategory(BaseModel):
    name: str
    amount: Decimal


class ExpenseSummaryResponse(BaseModel):
    start_date: DateType
    end_date: DateType
    total: Decimal
    fixed: Decimal
    variable: Decimal
    by_category: List[CategoryAmount]
    highest_category: Optional[HighestCategory] = None


class RecurringProcessResponse(BaseModel):
    created: int
    expenses: List[ExpenseResponse]


class ExpenseNumberResponse(BaseModel):
    expense_number: str
