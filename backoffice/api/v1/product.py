from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.user import User
from backoffice.schemas.common import SuccessResponse
from backoffice.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    StockAdjustRequest,
    StockMovementListResponse,
    StockMovementResponse,
)
from backoffice.services import product_service
from backoffice.logger_config import logger

router = APIRouter()


@router.get("/", response_model=ProductListResponse)
def list_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None, description="Search by name, SKU or barcode"),
    vendor_id: Optional[str] = Query(None),
    low_stock: bool = Query(False, description="Only products at or below their threshold"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    products, total = product_service.get_all_products(
        db, skip=skip, limit=limit, search=search, vendor_id=vendor_id, low_stock=low_stock
    )
    return ProductListResponse(
        total=total,
        products=[ProductResponse.model_validate(p) for p in products]
    )


@router.get("/low-stock", response_model=ProductListResponse)
def list_low_stock(
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    products, total = product_service.get_all_products(db, limit=limit, low_stock=True)
    return ProductListResponse(
        total=total,
        products=[ProductResponse.model_validate(p) for p in products]
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = product_service.get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        product = product_service.create_product(db, **product_data.model_dump())
        return ProductResponse.model_validate(product)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        product = product_service.update_product(db, product_id, **product_data.model_dump(exclude_unset=True))
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return ProductResponse.model_validate(product)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{product_id}", response_model=SuccessResponse)
def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        if not product_service.delete_product(db, product_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        logger.info(f"Product {product_id} deleted by {current_user.email}")
        return SuccessResponse(message="Product deleted successfully")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{product_id}/adjust-stock", response_model=ProductResponse)
def adjust_stock(
    product_id: str,
    data: StockAdjustRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Manual stock correction; the resulting stock can never go below zero."""
    try:
        product = product_service.adjust_stock(
            db, product_id, data.quantity_change, notes=data.notes, created_by_id=current_user.id
        )
        return ProductResponse.model_validate(product)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{product_id}/movements", response_model=StockMovementListResponse)
def list_movements(
    product_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    if not product_service.get_product_by_id(db, product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    rows, total = product_service.get_movements(db, product_id, skip=skip, limit=limit)
    return StockMovementListResponse(
        total=total,
        movements=[StockMovementResponse.model_validate(m) for m in rows]
    )
