from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from backoffice.models.product import Product, StockMovement, MovementType
from backoffice.models.credit_memo import CreditMemoItem
from backoffice.models.invoice import InvoiceItem
from backoffice.models.order import OrderItem
from backoffice.models.pos import POSSaleItem
from backoffice.models.purchase_order import PurchaseOrderItem
from backoffice.models.shipment import ShipmentItem
from backoffice.models.vendor import Vendor
from backoffice.logger_config import logger


PRODUCT_REFERENCES = (
    (PurchaseOrderItem, "purchase orders"),
    (OrderItem, "orders"),
    (InvoiceItem, "invoices"),
    (POSSaleItem, "POS sales"),
    (ShipmentItem, "shipments"),
    (CreditMemoItem, "credit memos"),
)


def get_product_by_id(db: Session, product_id: str) -> Optional[Product]:
    """Get product by ID."""
    return db.query(Product).filter(Product.id == product_id).first()


def get_product_by_sku(db: Session, sku: str) -> Optional[Product]:
    return db.query(Product).filter(Product.sku == sku).first()


def get_all_products(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    vendor_id: Optional[str] = None,
    low_stock: bool = False,
) -> tuple[List[Product], int]:
    """Get all products with optional search filtering."""
    query = db.query(Product)

    if vendor_id:
        query = query.filter(Product.vendor_id == vendor_id)
    if low_stock:
        query = query.filter(Product.stock_quantity <= Product.low_stock_threshold)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(search_term),
                Product.sku.ilike(search_term),
                Product.barcode.ilike(search_term),
            )
        )

    total = query.count()
    products = query.order_by(Product.name).offset(skip).limit(limit).all()
    return products, total


def create_product(db: Session, **fields) -> Product:
    """Create a new product."""
    sku = fields.get("sku")
    if sku and get_product_by_sku(db, sku):
        raise ValueError("Product with this SKU already exists")

    vendor_id = fields.get("vendor_id")
    if vendor_id and not db.query(Vendor).filter(Vendor.id == vendor_id).first():
        raise ValueError("Vendor not found")

    product = Product(**fields)
    db.add(product)
    try:
        db.commit()
        db.refresh(product)
        logger.info(f"Product created: {product.name} ({product.id})")
        return product
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating product: {str(e)}")
        raise ValueError("Failed to create product.")


def update_product(db: Session, product_id: str, **fields) -> Optional[Product]:
    """Update product details. Stock only changes through movements."""
    product = get_product_by_id(db, product_id)
    if not product:
        return None

    sku = fields.get("sku")
    if sku:
        existing = get_product_by_sku(db, sku)
        if existing and existing.id != product_id:
            raise ValueError("SKU is already used by another product")

    vendor_id = fields.get("vendor_id")
    if vendor_id and not db.query(Vendor).filter(Vendor.id == vendor_id).first():
        raise ValueError("Vendor not found")

    for key, value in fields.items():
        setattr(product, key, value)

    try:
        db.commit()
        db.refresh(product)
        return product
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating product: {str(e)}")
        raise ValueError("Failed to update product.")


def delete_product(db: Session, product_id: str) -> bool:
    product = get_product_by_id(db, product_id)
    if not product:
        return False

    # products referenced by any document are only deactivated
    for model, label in PRODUCT_REFERENCES:
        if db.query(model.id).filter(model.product_id == product_id).first():
            raise ValueError(f"Cannot delete a product used on {label}. Deactivate it instead.")

    db.delete(product)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting product: {str(e)}")
        raise ValueError("Failed to delete product.")


def record_movement(
    db: Session,
    product: Product,
    movement_type: MovementType,
    quantity_change: int,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
    notes: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> StockMovement:
    """Apply a signed stock change and log it. The caller owns the transaction."""
    new_quantity = (product.stock_quantity or 0) + quantity_change
    if new_quantity < 0:
        raise ValueError(
            f"Insufficient stock for {product.name}: have {product.stock_quantity}, change {quantity_change}"
        )

    qty_before = product.stock_quantity or 0
    product.stock_quantity = new_quantity

    movement = StockMovement(
        product_id=product.id,
        movement_type=movement_type,
        quantity_change=quantity_change,
        reference_type=reference_type,
        reference_id=reference_id,
        notes=notes,
        created_by_id=created_by_id,
    )
    db.add(movement)

    logger.info(
        f"Stock updated - Product: {product.name} ({product.id}), "
        f"Qty: {qty_before} → {new_quantity} ({movement_type.value})"
    )
    return movement


def adjust_stock(
    db: Session,
    product_id: str,
    quantity_change: int,
    notes: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Product:
    """Manual stock correction."""
    product = get_product_by_id(db, product_id)
    if not product:
        raise LookupError("Product not found")
    if quantity_change == 0:
        raise ValueError("Quantity change cannot be zero")

    try:
        record_movement(
            db,
            product,
            MovementType.ADJUSTMENT,
            quantity_change,
            reference_type="ADJUSTMENT",
            notes=notes,
            created_by_id=created_by_id,
        )
        db.commit()
        db.refresh(product)
        return product
    except ValueError:
        db.rollback()
        raise


def get_movements(
    db: Session,
    product_id: str,
    skip: int = 0,
    limit: int = 50,
) -> tuple[List[StockMovement], int]:
    query = db.query(StockMovement).filter(StockMovement.product_id == product_id)
    total = query.count()
    rows = query.order_by(StockMovement.id.desc()).offset(skip).limit(limit).all()
    return rows, total
