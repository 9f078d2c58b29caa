from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.expense import ExpenseCategoryType
from backoffice.models.user import User
from backoffice.schemas.common import SuccessResponse
from backoffice.schemas.expense_category import (
    ExpenseCategoryCreate,
    ExpenseCategoryUpdate,
    ExpenseCategoryResponse,
    ExpenseCategoryListResponse,
)
from backoffice.services.expense_category_service import (
    get_expense_category_by_id,
    get_all_expense_categories,
    create_expense_category,
    update_expense_category,
    delete_expense_category,
)
from backoffice.logger_config import logger

router = APIRouter()


@router.get("", response_model=ExpenseCategoryListResponse)
def list_expense_categories(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    category_type: Optional[ExpenseCategoryType] = Query(None, alias="type"),
    current_user: User = Depends(get_current_active_user),
):
    """List expense categories with optional search."""
    categories, total = get_all_expense_categories(
        db, skip=skip, limit=limit, search=search, category_type=category_type
    )
    return ExpenseCategoryListResponse(
        total=total,
        categories=[ExpenseCategoryResponse.model_validate(c) for c in categories],
    )


@router.get("/{category_id}", response_model=ExpenseCategoryResponse)
def get_expense_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    category = get_expense_category_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense category not found")
    return ExpenseCategoryResponse.model_validate(category)


@router.post("", response_model=ExpenseCategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    data: ExpenseCategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        category = create_expense_category(
            db, name=data.name, category_type=data.type, color_tag=data.color_tag
        )
        return ExpenseCategoryResponse.model_validate(category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Error creating expense category")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create expense category",
        )


@router.put("/{category_id}", response_model=ExpenseCategoryResponse)
def update_category(
    category_id: str,
    data: ExpenseCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        category = update_expense_category(
            db, category_id, name=data.name, category_type=data.type, color_tag=data.color_tag
        )
        if not category:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense category not found")
        return ExpenseCategoryResponse.model_validate(category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{category_id}", response_model=SuccessResponse)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        if not delete_expense_category(db, category_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense category not found")
        return SuccessResponse(message="Expense category deleted successfully")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
