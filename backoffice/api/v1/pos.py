from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from backoffice.core.dependencies import get_db, get_current_active_user
from backoffice.models.pos import SaleType
from backoffice.models.user import User
from backoffice.schemas.pos import (
    POSProductSearchResponse,
    POSSaleCreate,
    POSSaleListResponse,
    POSSaleResponse,
    POSSaleSummary,
)
from backoffice.schemas.product import ProductResponse
from backoffice.services import pos_service
from backoffice.logger_config import logger

router = APIRouter()


@router.get("/products/search", response_model=POSProductSearchResponse)
def search_products(
    q: str = Query(..., min_length=1),
    search_type: Optional[str] = Query(None, alias="type", pattern="^(barcode|sku|name)$"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Exact barcode or SKU lookup for scanners; partial match otherwise."""
    products = pos_service.search_products(db, q, search_type)
    return POSProductSearchResponse(products=[ProductResponse.model_validate(p) for p in products])


@router.post("/sales", response_model=POSSaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    data: POSSaleCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    try:
        fields = data.model_dump()
        fields["items"] = [item.model_dump() for item in data.items]
        sale = pos_service.create_sale(db, created_by_id=current_user.id, **fields)
        return POSSaleResponse.model_validate(sale)
    except ValueError as e:
        logger.error(f"API: Validation error in POS sale: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/sales", response_model=POSSaleListResponse)
def list_sales(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    sale_type: Optional[SaleType] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    sales, total, total_amount = pos_service.get_all_sales(
        db, skip=skip, limit=limit, sale_type=sale_type, start_date=start_date, end_date=end_date
    )
    return POSSaleListResponse(
        total=total, skip=skip, limit=limit, total_amount=total_amount,
        sales=[POSSaleSummary.model_validate(s) for s in sales],
    )


@router.get("/sales/{sale_id}", response_model=POSSaleResponse)
def get_sale(
    sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    sale = pos_service.get_sale_by_id(db, sale_id)
    if not sale:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return POSSaleResponse.model_validate(sale)
