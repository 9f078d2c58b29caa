import re
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from backoffice.models.expense import (
    DEFAULT_COLOR_TAG,
    Expense,
    ExpenseCategory,
    ExpenseCategoryType,
)
from backoffice.logger_config import logger


COLOR_TAG_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def _validate_color(color_tag: str) -> str:
    if not COLOR_TAG_PATTERN.match(color_tag or ""):
        raise ValueError("Color tag must be a hex colour like #6b7280")
    return color_tag.lower()


def get_expense_category_by_id(db: Session, category_id: str) -> Optional[ExpenseCategory]:
    """Get expense category by ID."""
    return db.query(ExpenseCategory).filter(ExpenseCategory.id == category_id).first()


def get_expense_category_by_name(db: Session, name: str) -> Optional[ExpenseCategory]:
    """Get expense category by name."""
    return db.query(ExpenseCategory).filter(ExpenseCategory.name == name).first()


def get_all_expense_categories(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    category_type: Optional[ExpenseCategoryType] = None,
) -> tuple[List[ExpenseCategory], int]:
    """Get all expense categories with optional search."""
    query = db.query(ExpenseCategory)
    if category_type:
        query = query.filter(ExpenseCategory.type == category_type)
    if search:
        term = f"%{search}%"
        query = query.filter(
            or_(
                ExpenseCategory.name.ilike(term),
                ExpenseCategory.id.ilike(term),
            )
        )
    total = query.count()
    categories = query.order_by(ExpenseCategory.name).offset(skip).limit(limit).all()
    return categories, total


def create_expense_category(
    db: Session,
    name: str,
    category_type: ExpenseCategoryType = ExpenseCategoryType.VARIABLE,
    color_tag: Optional[str] = None,
) -> ExpenseCategory:
    """Create a new expense category."""
    name = name.strip()
    if not name:
        raise ValueError("Category name is required")
    existing = get_expense_category_by_name(db, name)
    if existing:
        raise ValueError("Expense category with this name already exists")

    category = ExpenseCategory(
        name=name,
        type=category_type,
        color_tag=_validate_color(color_tag) if color_tag else DEFAULT_COLOR_TAG,
    )
    db.add(category)
    try:
        db.commit()
        db.refresh(category)
        logger.info(f"Expense category created: {category.name} ({category.type.value})")
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating expense category: {e}")
        raise ValueError("Failed to create expense category.")


def update_expense_category(
    db: Session,
    category_id: str,
    name: Optional[str] = None,
    category_type: Optional[ExpenseCategoryType] = None,
    color_tag: Optional[str] = None,
) -> Optional[ExpenseCategory]:
    """Update expense category."""
    category = get_expense_category_by_id(db, category_id)
    if not category:
        return None
    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("Category name is required")
        existing = get_expense_category_by_name(db, name)
        if existing and existing.id != category_id:
            raise ValueError("Expense category name is already taken")
        category.name = name
    if category_type is not None:
        category.type = category_type
    if color_tag is not None:
        category.color_tag = _validate_color(color_tag)
    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating expense category: {e}")
        raise ValueError("Failed to update expense category.")


def delete_expense_category(db: Session, category_id: str) -> bool:
    """Delete expense category if it has no live expenses."""
    category = get_expense_category_by_id(db, category_id)
    if not category:
        return False
    in_use = db.query(Expense).filter(
        Expense.expense_category_id == category_id,
        Expense.deleted_at.is_(None),
    ).count()
    if in_use:
        raise ValueError("Cannot delete category that has expenses. Remove or reassign expenses first.")
    # soft deleted expenses go with the category
    for expense in list(category.expenses):
        db.delete(expense)
    db.delete(category)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting expense category: {e}")
        raise ValueError("Failed to delete expense category.")
