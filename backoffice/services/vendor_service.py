from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from backoffice.models.common import generate_numeric_code
from backoffice.models.credit_memo import CreditMemo
from backoffice.models.ledger import LedgerEntry, PartyType
from backoffice.models.payment import Payment
from backoffice.models.vendor import Vendor, VendorStatus, PAYMENT_TERMS_DAYS
from backoffice.services import ledger_service
from backoffice.logger_config import logger


def get_vendor_by_id(db: Session, vendor_id: str) -> Optional[Vendor]:
    """Get vendor by ID."""
    return db.query(Vendor).filter(Vendor.id == vendor_id).first()


def get_vendor_by_code(db: Session, supplier_code: str) -> Optional[Vendor]:
    """Get vendor by supplier code (e.g. 'SUP48213')."""
    return db.query(Vendor).filter(Vendor.supplier_code == supplier_code).first()


def generate_supplier_code(db: Session) -> str:
    code = generate_numeric_code("SUP", digits=5)
    while get_vendor_by_code(db, code):
        code = generate_numeric_code("SUP", digits=5)
    return code


def get_all_vendors(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[VendorStatus] = None,
    is_active: Optional[bool] = None,
) -> tuple[List[Vendor], int]:
    """Get all vendors with optional search filtering."""
    query = db.query(Vendor)

    if status:
        query = query.filter(Vendor.status == status)
    if is_active is not None:
        query = query.filter(Vendor.is_active == is_active)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Vendor.name.ilike(search_term),
                Vendor.contact_name.ilike(search_term),
                Vendor.email.ilike(search_term),
                Vendor.supplier_code.ilike(search_term),
                Vendor.city.ilike(search_term),
            )
        )

    total = query.count()
    vendors = query.order_by(Vendor.name).offset(skip).limit(limit).all()

    return vendors, total


def _validate_terms(payment_terms_days: Optional[int]):
    if payment_terms_days is not None and payment_terms_days not in PAYMENT_TERMS_DAYS:
        raise ValueError(f"Payment terms must be one of {', '.join(str(d) for d in PAYMENT_TERMS_DAYS)} days")


def create_vendor(db: Session, **fields) -> Vendor:
    """Create a new vendor; supplier_code is generated when not given."""
    _validate_terms(fields.get("payment_terms_days"))

    supplier_code = fields.pop("supplier_code", None)
    if supplier_code:
        if get_vendor_by_code(db, supplier_code):
            raise ValueError("Supplier code is already taken by another vendor")
    else:
        supplier_code = generate_supplier_code(db)

    vendor = Vendor(supplier_code=supplier_code, **fields)
    db.add(vendor)

    try:
        db.commit()
        db.refresh(vendor)
        logger.info(f"Vendor created: {vendor.name} ({vendor.supplier_code})")
        return vendor
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating vendor: {str(e)}")
        raise ValueError("Failed to create vendor.")


def update_vendor(db: Session, vendor_id: str, **fields) -> Optional[Vendor]:
    """Update vendor information. Only keys present in `fields` are touched."""
    vendor = get_vendor_by_id(db, vendor_id)
    if not vendor:
        return None

    if "payment_terms_days" in fields:
        _validate_terms(fields["payment_terms_days"])

    supplier_code = fields.get("supplier_code")
    if supplier_code:
        existing = get_vendor_by_code(db, supplier_code)
        if existing and existing.id != vendor_id:
            raise ValueError("Supplier code is already taken by another vendor")

    for key, value in fields.items():
        setattr(vendor, key, value)

    # a blocked or inactive vendor cannot stay flagged active
    if "status" in fields and vendor.status != VendorStatus.ACTIVE:
        vendor.is_active = False
    elif "status" in fields:
        vendor.is_active = True

    try:
        db.commit()
        db.refresh(vendor)
        return vendor
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating vendor: {str(e)}")
        raise ValueError("Failed to update vendor.")


def delete_vendor(db: Session, vendor_id: str) -> bool:
    """Delete a vendor with no purchase orders, payments, credit memos or ledger history."""
    vendor = get_vendor_by_id(db, vendor_id)
    if not vendor:
        return False

    if vendor.purchase_orders:
        raise ValueError("Cannot delete vendor with purchase orders. Deactivate the vendor instead.")
    if db.query(Payment.id).filter(Payment.vendor_id == vendor_id).first():
        raise ValueError("Cannot delete vendor with recorded payments. Deactivate the vendor instead.")
    if db.query(CreditMemo.id).filter(CreditMemo.vendor_id == vendor_id).first():
        raise ValueError("Cannot delete vendor with credit memos. Deactivate the vendor instead.")
    ledger_row = (
        db.query(LedgerEntry.id)
        .filter(LedgerEntry.party_type == PartyType.VENDOR, LedgerEntry.party_id == vendor_id)
        .first()
    )
    if ledger_row:
        raise ValueError("Cannot delete vendor with ledger entries. Deactivate the vendor instead.")

    for product in vendor.products:
        product.vendor_id = None

    db.delete(vendor)
    try:
        db.commit()
        logger.info(f"Vendor deleted: {vendor_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting vendor: {str(e)}")
        raise ValueError("Failed to delete vendor.")


def get_outstanding_payables(db: Session, limit: int = 50) -> List[dict]:
    """Vendors we owe money to, largest balance first."""
    vendors = db.query(Vendor).all()
    balances = ledger_service.get_vendor_balances_bulk(db, [v.id for v in vendors])

    rows = [
        {
            "vendor_id": v.id,
            "supplier_code": v.supplier_code,
            "name": v.name,
            "balance": balances[v.id],
        }
        for v in vendors
        if balances.get(v.id, 0) > 0
    ]
    rows.sort(key=lambda r: r["balance"], reverse=True)
    logger.info(f"Outstanding payables: {len(rows)} vendors")
    return rows[:limit]
