import secrets
import string
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.logger_config import logger
from backoffice.models.customer import Customer, Receipt
from backoffice.services.customer_service import award_points, points_for_amount, revoke_points
from backoffice.utils.date_range import utcnow
from backoffice.utils.purchase_math import to_money


TRX_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_trx_id(db: Session) -> str:
    trx_id = "RT" + "".join(secrets.choice(TRX_ID_ALPHABET) for _ in range(8))
    while db.query(Receipt).filter(Receipt.trx_id == trx_id).first():
        trx_id = "RT" + "".join(secrets.choice(TRX_ID_ALPHABET) for _ in range(8))
    return trx_id


def get_receipt_by_id(db: Session, receipt_id: str) -> Optional[Receipt]:
    return db.query(Receipt).filter(Receipt.id == receipt_id).first()


def get_all_receipts(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    customer_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> tuple[List[Receipt], int]:
    query = db.query(Receipt)

    if customer_id:
        query = query.filter(Receipt.customer_id == customer_id)
    if start_date:
        query = query.filter(Receipt.trx_date >= start_date)
    if end_date:
        query = query.filter(Receipt.trx_date <= end_date)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Receipt.trx_id.ilike(search_term),
                Receipt.customer_name.ilike(search_term),
                Receipt.invoice_num.ilike(search_term),
            )
        )

    total = query.count()
    receipts = query.order_by(Receipt.trx_date.desc(), Receipt.created_at.desc()).offset(skip).limit(limit).all()
    return receipts, total


def create_receipt(db: Session, **fields) -> Receipt:
    """
    Record money received from a customer.

    When linked to a customer, the customer name defaults to theirs and
    loyalty points are awarded for the amount received.
    """
    amount = to_money(fields.get("amount_received") or 0)
    if amount < 0:
        raise ValueError("Amount received cannot be negative")
    fields["amount_received"] = amount

    trx_id = fields.pop("trx_id", None)
    if trx_id:
        if db.query(Receipt).filter(Receipt.trx_id == trx_id).first():
            raise ValueError(f"Transaction id {trx_id} already exists")
    else:
        trx_id = generate_trx_id(db)

    customer = None
    if fields.get("customer_id"):
        customer = db.query(Customer).filter(Customer.id == fields["customer_id"]).first()
        if not customer:
            raise ValueError("Customer not found")
        fields["customer_name"] = fields.get("customer_name") or customer.name
        fields["city"] = fields.get("city") or customer.city
        fields["state"] = fields.get("state") or customer.state

    if not fields.get("customer_name"):
        raise ValueError("customer_name is required when no customer is linked")

    fields["trx_date"] = fields.get("trx_date") or utcnow().date()
    if not fields.get("pmt_mode"):
        fields.pop("pmt_mode", None)

    points = points_for_amount(amount) if customer else 0
    receipt = Receipt(trx_id=trx_id, points_awarded=points, **fields)
    db.add(receipt)
    award_points(customer, points)

    try:
        db.commit()
        db.refresh(receipt)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating receipt: {str(e)}")
        raise ValueError("Failed to create receipt.")

    logger.info(f"Receipt created: {receipt.trx_id} - {receipt.customer_name} - {amount} (points: {points})")
    return receipt


def update_receipt(db: Session, receipt_id: str, **fields) -> Optional[Receipt]:
    """Update a receipt; loyalty points follow changes to the amount or the linked customer."""
    receipt = get_receipt_by_id(db, receipt_id)
    if not receipt:
        return None

    if "amount_received" in fields:
        fields["amount_received"] = to_money(fields["amount_received"])
        if fields["amount_received"] < 0:
            raise ValueError("Amount received cannot be negative")

    trx_id = fields.get("trx_id")
    if trx_id:
        existing = db.query(Receipt).filter(Receipt.trx_id == trx_id).first()
        if existing and existing.id != receipt_id:
            raise ValueError(f"Transaction id {trx_id} already exists")

    old_customer = receipt.customer
    new_customer = old_customer
    customer_changed = "customer_id" in fields and fields["customer_id"] != receipt.customer_id
    if customer_changed:
        new_customer = None
        if fields["customer_id"]:
            new_customer = db.query(Customer).filter(Customer.id == fields["customer_id"]).first()
            if not new_customer:
                raise ValueError("Customer not found")
    amount_changed = (
        "amount_received" in fields and fields["amount_received"] != to_money(receipt.amount_received)
    )

    for key, value in fields.items():
        setattr(receipt, key, value)

    if customer_changed:
        revoke_points(old_customer, receipt.points_awarded)
        receipt.points_awarded = points_for_amount(receipt.amount_received) if new_customer else 0
        award_points(new_customer, receipt.points_awarded)
    elif amount_changed and new_customer:
        # same customer: only the difference moves, so redeemed points stay redeemed
        new_points = points_for_amount(receipt.amount_received)
        delta = new_points - (receipt.points_awarded or 0)
        if delta > 0:
            award_points(new_customer, delta)
        else:
            revoke_points(new_customer, -delta)
        receipt.points_awarded = new_points

    try:
        db.commit()
        db.refresh(receipt)
        return receipt
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating receipt: {str(e)}")
        raise ValueError("Failed to update receipt.")


def delete_receipt(db: Session, receipt_id: str) -> bool:
    receipt = get_receipt_by_id(db, receipt_id)
    if not receipt:
        return False

    revoke_points(receipt.customer, receipt.points_awarded)
    db.delete(receipt)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting receipt: {str(e)}")
        raise ValueError("Failed to delete receipt.")
