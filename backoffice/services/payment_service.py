from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.logger_config import logger
from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType
from backoffice.models.payment import (
    INCOMING_TYPES,
    OUTGOING_TYPES,
    Payment,
    PaymentMethod,
    PaymentType,
)
from backoffice.models.purchase_order import PurchaseOrder, PurchaseOrderStatus
from backoffice.models.vendor import Vendor
from backoffice.services import ledger_service
from backoffice.utils.date_range import end_of_day, start_of_day
from backoffice.utils.purchase_math import ZERO, to_money


def signed_amount(payment_type: PaymentType, amount) -> Decimal:
    """Apply the sign convention: money in is positive, money out is negative."""
    value = to_money(amount)
    if value == 0:
        raise ValueError("Payment amount cannot be zero")
    if payment_type in INCOMING_TYPES:
        return abs(value)
    if payment_type in OUTGOING_TYPES:
        return -abs(value)
    return value


def get_payment_by_id(db: Session, payment_id: str) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.id == payment_id).first()


def get_all_payments(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    payment_type: Optional[PaymentType] = None,
    method: Optional[PaymentMethod] = None,
    vendor_id: Optional[str] = None,
    purchase_order_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[Payment], int, dict]:
    """List payments, newest first, with the money in / money out totals of the filtered set."""
    query = db.query(Payment)

    if payment_type:
        query = query.filter(Payment.type == payment_type)
    if method:
        query = query.filter(Payment.method == method)
    if vendor_id:
        query = query.filter(Payment.vendor_id == vendor_id)
    if purchase_order_id:
        query = query.filter(Payment.purchase_order_id == purchase_order_id)
    if start_date:
        query = query.filter(Payment.created_at >= start_of_day(start_date))
    if end_date:
        query = query.filter(Payment.created_at <= end_of_day(end_date))

    total = query.count()

    incoming = query.filter(Payment.amount > 0).with_entities(
        func.coalesce(func.sum(Payment.amount), 0)
    ).scalar()
    outgoing = query.filter(Payment.amount < 0).with_entities(
        func.coalesce(func.sum(Payment.amount), 0)
    ).scalar()
    totals = {
        "total_in": to_money(incoming),
        "total_out": -to_money(outgoing),
        "net": to_money(incoming) + to_money(outgoing),
    }

    payments = query.order_by(Payment.created_at.desc()).offset(skip).limit(limit).all()
    logger.info(f"Retrieved {len(payments)} payments out of {total} total")
    return payments, total, totals


def vendor_payable(db: Session, vendor_id: str) -> Decimal:
    """
    What can still be paid to a vendor outside an open purchase order.

    The ledger balance already nets every payment. Advances on purchase
    orders whose payable is not posted yet (sent or partially received)
    are added back, since they settle a debt the ledger does not show yet.
    """
    advances = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .join(PurchaseOrder, Payment.purchase_order_id == PurchaseOrder.id)
        .filter(
            PurchaseOrder.vendor_id == vendor_id,
            PurchaseOrder.status.in_([PurchaseOrderStatus.sent, PurchaseOrderStatus.partial]),
        )
        .scalar()
    )
    return ledger_service.get_vendor_balance(db, vendor_id) - to_money(advances)


def _post_vendor_payment_ledger(db: Session, payment: Payment, description: str, created_by_id: Optional[int]):
    paid = -payment.amount
    ledger_service.post_vendor_ledger(
        db,
        payment.vendor_id,
        [
            {
                "account_type": ledger_service.account_for_method(payment.method),
                "debit": paid,
                "credit": ZERO,
                "reference_type": LedgerReferenceType.PAYMENT,
                "reference_id": payment.id,
                "description": description,
            },
            {
                "account_type": LedgerAccountType.VENDOR,
                "debit": ZERO,
                "credit": paid,
                "reference_type": LedgerReferenceType.PAYMENT,
                "reference_id": payment.id,
                "description": description,
            },
        ],
        created_by_id=created_by_id,
    )


def record_vendor_payment(
    db: Session,
    purchase_order: PurchaseOrder,
    amount,
    method: PaymentMethod,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Payment:
    """
    Pay a vendor against a purchase order.

    The amount must be positive and not exceed the PO balance due. The
    payment is stored negative and a DR <method account> / CR VENDOR pair
    is posted against the vendor.
    """
    value = to_money(amount)
    if value <= 0:
        raise ValueError("Payment amount must be greater than 0")
    if purchase_order.status in (PurchaseOrderStatus.draft, PurchaseOrderStatus.cancelled):
        raise ValueError(f"Cannot record a payment on a {purchase_order.status.value} purchase order")

    due = purchase_order.balance_due
    if value > due:
        raise ValueError(f"Payment amount ({value}) exceeds balance due ({due})")

    if purchase_order.status == PurchaseOrderStatus.received:
        # direct vendor payments may already have settled this payable
        payable = vendor_payable(db, purchase_order.vendor_id)
        if value > payable:
            raise ValueError(f"Payment amount ({value}) exceeds vendor outstanding balance ({max(payable, ZERO)})")

    payment = Payment(
        type=PaymentType.vendor,
        amount=-value,
        method=method,
        reference=reference,
        order_ref=purchase_order.po_number,
        vendor_id=purchase_order.vendor_id,
        purchase_order_id=purchase_order.id,
        notes=notes,
        created_by_id=created_by_id,
    )
    db.add(payment)

    try:
        db.flush()
        _post_vendor_payment_ledger(
            db, payment, f"Payment for PO {purchase_order.po_number}", created_by_id
        )
        db.commit()
        db.refresh(payment)
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Vendor payment recorded - PO: {purchase_order.po_number}, Amount: {value}, "
        f"Balance: {due} → {due - value}"
    )
    return payment


def create_payment(
    db: Session,
    payment_type: PaymentType,
    amount,
    method: PaymentMethod,
    reference: Optional[str] = None,
    order_ref: Optional[str] = None,
    vendor_id: Optional[str] = None,
    purchase_order_id: Optional[str] = None,
    notes: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Payment:
    """Record an ad-hoc payment. Vendor payments against a PO go through record_vendor_payment."""
    if payment_type == PaymentType.vendor and purchase_order_id:
        po = db.query(PurchaseOrder).filter(PurchaseOrder.id == purchase_order_id).first()
        if not po:
            raise ValueError("Purchase order not found")
        return record_vendor_payment(
            db, po, abs(to_money(amount)), method,
            reference=reference, notes=notes, created_by_id=created_by_id,
        )

    if purchase_order_id:
        raise ValueError("Only vendor payments can reference a purchase order")

    if vendor_id:
        vendor = db.query(Vendor).filter(Vendor.id == vendor_id).first()
        if not vendor:
            raise ValueError("Vendor not found")
    elif payment_type == PaymentType.vendor:
        raise ValueError("vendor_id is required for vendor payments")

    value = signed_amount(payment_type, amount)

    if payment_type == PaymentType.vendor:
        outstanding = vendor_payable(db, vendor_id)
        if -value > outstanding:
            raise ValueError(
                f"Payment amount exceeds vendor outstanding balance ({max(outstanding, ZERO)})"
            )

    payment = Payment(
        type=payment_type,
        amount=value,
        method=method,
        reference=reference,
        order_ref=order_ref,
        vendor_id=vendor_id,
        notes=notes,
        created_by_id=created_by_id,
    )
    db.add(payment)

    try:
        db.flush()
        if payment_type == PaymentType.vendor:
            _post_vendor_payment_ledger(db, payment, "Direct vendor payment", created_by_id)
        db.commit()
        db.refresh(payment)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Payment created: {payment.id} ({payment_type.value}) {value}")
    return payment


def stage_payment(
    db: Session,
    payment_type: PaymentType,
    amount,
    method: PaymentMethod,
    order_ref: Optional[str] = None,
    notes: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Payment:
    """Add a customer sale or refund payment to the session. The caller owns the transaction."""
    payment = Payment(
        type=payment_type,
        amount=signed_amount(payment_type, amount),
        method=method,
        order_ref=order_ref,
        notes=notes,
        created_by_id=created_by_id,
    )
    db.add(payment)
    logger.debug(f"Payment staged: {payment_type.value} {payment.amount} ({method.value}) for {order_ref}")
    return payment


def delete_payment(db: Session, payment_id: str) -> bool:
    """Delete a payment together with the ledger rows it posted."""
    payment = get_payment_by_id(db, payment_id)
    if not payment:
        return False

    removed = ledger_service.delete_entries_for_reference(db, LedgerReferenceType.PAYMENT, payment.id)
    db.delete(payment)
    try:
        db.commit()
        logger.info(f"Payment deleted: {payment_id} (ledger rows removed: {removed})")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting payment: {str(e)}")
        raise ValueError("Failed to delete payment.")
