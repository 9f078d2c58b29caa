from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.invoice import Invoice, InvoiceItem, InvoicePaymentStatus, InvoiceType
from backoffice.models.order import Order, OrderPaymentStatus, OrderStatus
from backoffice.utils.date_range import end_of_day, start_of_day
from backoffice.utils.purchase_math import ZERO, to_money


def generate_invoice_number(db: Session) -> str:
    number = generate_numeric_code("INV", digits=6)
    while db.query(Invoice).filter(Invoice.invoice_number == number).first():
        number = generate_numeric_code("INV", digits=6)
    return number


def get_invoice_by_id(db: Session, invoice_id: str) -> Optional[Invoice]:
    return (
        db.query(Invoice)
        .options(joinedload(Invoice.items))
        .filter(Invoice.id == invoice_id)
        .first()
    )


def get_all_invoices(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    search: Optional[str] = None,
    invoice_type: Optional[InvoiceType] = None,
    payment_status: Optional[InvoicePaymentStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> tuple[List[Invoice], int]:
    """Newest first. search matches the invoice number, customer name or phone."""
    query = db.query(Invoice)

    if invoice_type:
        query = query.filter(Invoice.invoice_type == invoice_type)
    if payment_status:
        query = query.filter(Invoice.payment_status == payment_status)
    if start_date:
        query = query.filter(Invoice.created_at >= start_of_day(start_date))
    if end_date:
        query = query.filter(Invoice.created_at <= end_of_day(end_date))
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Invoice.invoice_number.ilike(search_term),
                Invoice.customer_name.ilike(search_term),
                Invoice.customer_phone.ilike(search_term),
            )
        )

    total = query.count()
    invoices = query.order_by(Invoice.created_at.desc(), Invoice.invoice_number.desc()).offset(skip).limit(limit).all()
    logger.info(f"Retrieved {len(invoices)} invoices out of {total} total")
    return invoices, total


def stage_invoice(db: Session, items: Iterable[dict], **fields) -> Invoice:
    """
    Add an invoice and its lines to the session. The caller owns the transaction.

    items: [{"product_id", "product_name", "quantity", "price", "discount"?, "tax"?, "subtotal"}]
    """
    invoice = Invoice(invoice_number=generate_invoice_number(db), **fields)
    for item in items:
        invoice.items.append(
            InvoiceItem(
                product_id=item.get("product_id"),
                product_name=item["product_name"],
                quantity=item["quantity"],
                price=to_money(item["price"]),
                discount=to_money(item.get("discount") or 0),
                tax=to_money(item.get("tax") or 0),
                subtotal=to_money(item["subtotal"]),
            )
        )
    db.add(invoice)
    return invoice


def create_invoice_for_order(
    db: Session,
    order_id: str,
    adjustment: Decimal = ZERO,
    shipping_type: Optional[str] = None,
    terms: Optional[str] = None,
    customer_address: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Optional[Invoice]:
    """Bill an order. One invoice per order; cancelled orders cannot be billed."""
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        return None
    if order.status == OrderStatus.cancelled:
        raise ValueError("Cannot invoice a cancelled order")
    if order.invoice:
        raise ValueError(f"Order already invoiced as {order.invoice.invoice_number}")

    adjustment = to_money(adjustment or 0)
    total = to_money(order.total_amount) + adjustment
    if total < 0:
        raise ValueError("Adjustment cannot make the invoice total negative")

    customer = order.customer
    invoice = stage_invoice(
        db,
        [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "price": item.price,
                "subtotal": item.subtotal,
            }
            for item in order.items
        ],
        order_id=order.id,
        customer_id=order.customer_id,
        customer_name=order.customer_name,
        customer_phone=customer.phone if customer else None,
        customer_email=customer.email if customer else None,
        customer_address=customer_address or (customer.address if customer else None),
        invoice_type=InvoiceType.store_pickup,
        subtotal=to_money(order.total_amount),
        adjustment=adjustment,
        total_amount=total,
        shipping_type=shipping_type,
        terms=terms,
        payment_method=order.payment_method.value if order.payment_method else None,
        payment_status=(
            InvoicePaymentStatus.paid
            if order.payment_status == OrderPaymentStatus.paid
            else InvoicePaymentStatus.pending
        ),
        created_by_id=created_by_id,
    )

    try:
        db.commit()
        db.refresh(invoice)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating invoice: {str(e)}")
        raise ValueError("Failed to create invoice.")

    logger.info(f"Invoice created: {invoice.invoice_number} for order {order.order_number} - {invoice.total_amount}")
    return invoice


def update_invoice(db: Session, invoice_id: str, **fields) -> Optional[Invoice]:
    """Only the descriptive fields change; amounts and lines are fixed once issued."""
    invoice = get_invoice_by_id(db, invoice_id)
    if not invoice:
        return None

    for key in ("customer_address", "customer_email", "customer_phone", "shipping_type", "terms", "notes"):
        if key in fields:
            setattr(invoice, key, fields[key])

    db.commit()
    db.refresh(invoice)
    logger.info(f"Invoice updated: {invoice.invoice_number}")
    return invoice
