from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from backoffice.core.config import settings
from backoffice.models.customer import Customer
from backoffice.utils.purchase_math import to_money
from backoffice.logger_config import logger


def get_customer_by_id(db: Session, customer_id: str) -> Optional[Customer]:
    """Get customer by ID (e.g. 'CUS-ABCDEFGH')."""
    return db.query(Customer).filter(Customer.id == customer_id).first()


def get_customer_by_email(db: Session, email: str) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.email == email).first()


def get_all_customers(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> tuple[List[Customer], int]:
    """Get all customers with optional search filtering."""
    query = db.query(Customer)

    if is_active is not None:
        query = query.filter(Customer.is_active == is_active)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(search_term),
                Customer.company.ilike(search_term),
                Customer.email.ilike(search_term),
                Customer.phone.ilike(search_term),
                Customer.id.ilike(search_term),
            )
        )

    total = query.count()
    customers = query.order_by(Customer.name).offset(skip).limit(limit).all()
    return customers, total


def create_customer(db: Session, **fields) -> Customer:
    """Create a new customer."""
    email = fields.get("email")
    if email and get_customer_by_email(db, email):
        raise ValueError("Customer with this email already exists")

    customer = Customer(**fields)
    db.add(customer)
    try:
        db.commit()
        db.refresh(customer)
        logger.info(f"Customer created: {customer.name} ({customer.id})")
        return customer
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating customer: {str(e)}")
        raise ValueError("Failed to create customer.")


def update_customer(db: Session, customer_id: str, **fields) -> Optional[Customer]:
    """Update customer information. Loyalty points only change through receipts and redemption."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    email = fields.get("email")
    if email:
        existing = get_customer_by_email(db, email)
        if existing and existing.id != customer_id:
            raise ValueError("Email is already taken by another customer")

    for key, value in fields.items():
        setattr(customer, key, value)

    try:
        db.commit()
        db.refresh(customer)
        return customer
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating customer: {str(e)}")
        raise ValueError("Failed to update customer.")


def delete_customer(db: Session, customer_id: str) -> bool:
    """Delete a customer. Their receipts stay, keeping the customer name."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return False

    for receipt in customer.receipts:
        receipt.customer_id = None

    db.delete(customer)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting customer: {str(e)}")
        raise ValueError("Failed to delete customer.")


# ==================== LOYALTY ====================

def points_for_amount(amount) -> int:
    """Points earned for an amount received: whole currency units times the configured rate."""
    value = to_money(amount)
    if value <= 0:
        return 0
    return int(value) * settings.LOYALTY_POINTS_PER_UNIT


def award_points(customer: Optional[Customer], points: int):
    if customer and points:
        customer.loyalty_points = (customer.loyalty_points or 0) + points


def revoke_points(customer: Optional[Customer], points: int):
    # points already redeemed cannot be taken back below zero
    if customer and points:
        customer.loyalty_points = max(0, (customer.loyalty_points or 0) - points)


def redeem_points(db: Session, customer_id: str, points: int) -> Optional[dict]:
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None
    if points <= 0:
        raise ValueError("Points must be greater than 0")
    if (customer.loyalty_points or 0) < points:
        raise ValueError("Insufficient loyalty points")

    customer.loyalty_points -= points
    db.commit()
    db.refresh(customer)

    discount = to_money(points * settings.LOYALTY_POINT_VALUE)
    logger.info(f"Loyalty points redeemed - Customer: {customer.id}, Points: {points}, Discount: {discount}")
    return {
        "customer_id": customer.id,
        "redeemed_points": points,
        "remaining_points": customer.loyalty_points,
        "discount_amount": discount,
    }
