from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from backoffice.models.expense import DEFAULT_COLOR_TAG, ExpenseCategoryType

COLOR_TAG_REGEX = r"^#[0-9a-fA-F]{6}$"


class ExpenseCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: ExpenseCategoryType = ExpenseCategoryType.VARIABLE
    color_tag: str = Field(DEFAULT_COLOR_TAG, pattern=COLOR_TAG_REGEX)


class ExpenseCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ExpenseCategoryType] = None
    color_tag: Optional[str] = Field(None, pattern=COLOR_TAG_REGEX)


class ExpenseCategoryResponse(BaseModel):
    id: str
    name: str
    type: ExpenseCategoryType
    color_tag: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseCategoryListResponse(BaseModel):
    total: int
    categories: List[ExpenseCategoryResponse]
