"""
Point of sale: product lookup and counter sales.

A sale validates stock, prices each line with the product's tax rate,
applies line and bill discounts, takes payment (one method or a split),
issues an invoice and moves stock out, all in one transaction.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.customer import Customer
from backoffice.models.invoice import InvoicePaymentStatus, InvoiceType
from backoffice.models.payment import PaymentMethod, PaymentType
from backoffice.models.pos import POSPaymentMethod, POSSale, POSSaleItem, SaleType
from backoffice.models.product import MovementType, Product
from backoffice.services import invoice_service, payment_service, product_service
from backoffice.services.customer_service import award_points, points_for_amount
from backoffice.utils import sales_math
from backoffice.utils.date_range import end_of_day, start_of_day
from backoffice.utils.purchase_math import ZERO, to_money


POS_REFERENCE = "POS_SALE"

SEARCH_TYPES = ("barcode", "sku", "name")

TENDER_METHODS = {
    POSPaymentMethod.cash: PaymentMethod.cash,
    POSPaymentMethod.card: PaymentMethod.card,
    POSPaymentMethod.digital: PaymentMethod.digital,
}


def search_products(db: Session, q: str, search_type: Optional[str] = None, limit: int = 20) -> List[Product]:
    """Active products by exact barcode or SKU, or by partial name, SKU or barcode."""
    query = db.query(Product).filter(Product.is_active.is_(True))
    term = (q or "").strip()
    if not term:
        return []

    if search_type == "barcode":
        query = query.filter(Product.barcode == term)
    elif search_type == "sku":
        query = query.filter(Product.sku == term)
    elif search_type == "name":
        query = query.filter(Product.name.ilike(f"%{term}%"))
    else:
        like = f"%{term}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like), Product.barcode.ilike(like)))

    return query.order_by(Product.name).limit(limit).all()


def generate_sale_number(db: Session) -> str:
    number = generate_numeric_code("POS", digits=6)
    while db.query(POSSale).filter(POSSale.sale_number == number).first():
        number = generate_numeric_code("POS", digits=6)
    return number


def get_sale_by_id(db: Session, sale_id: str) -> Optional[POSSale]:
    return (
        db.query(POSSale)
        .options(joinedload(POSSale.items), joinedload(POSSale.invoice))
        .filter(POSSale.id == sale_id)
        .first()
    )


def get_all_sales(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    sale_type: Optional[SaleType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> tuple[List[POSSale], int, Decimal]:
    query = db.query(POSSale)
    if sale_type:
        query = query.filter(POSSale.sale_type == sale_type)
    if start_date:
        query = query.filter(POSSale.created_at >= start_of_day(start_date))
    if end_date:
        query = query.filter(POSSale.created_at <= end_of_day(end_date))

    total = query.count()
    sales = query.order_by(POSSale.created_at.desc(), POSSale.sale_number.desc()).all()
    total_amount = sum((to_money(s.total_amount) for s in sales), ZERO)
    return sales[skip:skip + limit], total, total_amount


def _tenders(sale: POSSale) -> List[tuple]:
    if sale.payment_method != POSPaymentMethod.split:
        return [(TENDER_METHODS[sale.payment_method], sale.total_amount)]
    parts = [
        (PaymentMethod.cash, sale.split_cash),
        (PaymentMethod.card, sale.split_card),
        (PaymentMethod.digital, sale.split_digital),
    ]
    return [(method, amount) for method, amount in parts if amount and to_money(amount) > 0]


def create_sale(
    db: Session,
    items: List[Dict],
    payment_method: POSPaymentMethod,
    discount_amount=ZERO,
    split_cash: Optional[Decimal] = None,
    split_card: Optional[Decimal] = None,
    split_digital: Optional[Decimal] = None,
    customer_id: Optional[str] = None,
    customer_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
    customer_email: Optional[str] = None,
    sale_type: SaleType = SaleType.pos,
    created_by_id: Optional[int] = None,
) -> POSSale:
    """
    Ring up a sale.

    items: [{"product_id", "quantity", "discount"?}]; repeated products are merged.
    """
    if not items:
        raise ValueError("A sale needs at least one item")

    customer = None
    if customer_id:
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise ValueError("Customer not found")
        customer_name = customer_name or customer.name
        customer_phone = customer_phone or customer.phone
        customer_email = customer_email or customer.email

    priced = []
    for line in sales_math.consolidate_lines(items):
        product = db.query(Product).filter(Product.id == line["product_id"]).first()
        if not product or not product.is_active:
            raise ValueError(f"Product {line['product_id']} not found or inactive")
        if (product.stock_quantity or 0) < line["quantity"]:
            raise ValueError(f"Insufficient stock for {product.name}. Available: {product.stock_quantity}")
        amounts = sales_math.compute_sale_line(line["quantity"], product.price, product.tax_rate or 0, line["discount"])
        priced.append((product, amounts))

    totals = sales_math.compute_sale_totals([a for _, a in priced], discount_amount)
    if payment_method == POSPaymentMethod.split:
        sales_math.check_split(totals.total_amount, split_cash, split_card, split_digital)
    else:
        split_cash = split_card = split_digital = None

    sale_number = generate_sale_number(db)
    lines = [
        {
            "product_id": product.id,
            "product_name": product.name,
            "quantity": a.quantity,
            "price": a.price,
            "discount": a.discount,
            "tax": a.tax,
            "subtotal": a.subtotal,
        }
        for product, a in priced
    ]

    try:
        invoice = invoice_service.stage_invoice(
            db,
            lines,
            customer_id=customer.id if customer else None,
            customer_name=customer_name or "Walk-in Customer",
            customer_phone=customer_phone,
            customer_email=customer_email,
            invoice_type=InvoiceType(sale_type.value),
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            payment_method=payment_method.value,
            payment_status=InvoicePaymentStatus.paid,
            created_by_id=created_by_id,
        )

        sale = POSSale(
            sale_number=sale_number,
            invoice=invoice,
            customer=customer,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email,
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            payment_method=payment_method,
            split_cash=split_cash,
            split_card=split_card,
            split_digital=split_digital,
            sale_type=sale_type,
            points_awarded=points_for_amount(totals.total_amount) if customer else 0,
            created_by_id=created_by_id,
        )
        for product, a in priced:
            sale.items.append(
                POSSaleItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=a.quantity,
                    price=a.price,
                    unit_cost=to_money(product.cost_price or 0),
                    discount=a.discount,
                    tax=a.tax,
                    subtotal=a.subtotal,
                )
            )
            product_service.record_movement(
                db,
                product,
                MovementType.SALE,
                -a.quantity,
                reference_type=POS_REFERENCE,
                reference_id=sale_number,
                notes=f"POS sale {sale_number}",
                created_by_id=created_by_id,
            )
        db.add(sale)

        for method, amount in _tenders(sale):
            if to_money(amount) > 0:
                payment_service.stage_payment(
                    db, PaymentType.sale, amount, method,
                    order_ref=sale_number, notes="POS sale", created_by_id=created_by_id,
                )
        award_points(customer, sale.points_awarded)

        db.commit()
        db.refresh(sale)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating POS sale: {str(e)}")
        raise ValueError("Failed to create sale.")
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"POS sale created: {sale.sale_number} - Invoice: {invoice.invoice_number} - "
        f"Total: {sale.total_amount} ({payment_method.value})"
    )
    return sale
