"""
Shipments: outbound deliveries (GROUND) and customer returns (GROUND_RG).

Status moves PENDING -> PACKED -> DISPATCHED -> IN_TRANSIT through
update_status; DELIVERED and RETURNED are reached only through
mark_delivered and mark_return_received, which also move stock. A delivery
for an invoiced sale does not move stock again: the sale already did.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.credit_memo import CreditMemoReason, CreditMemoType
from backoffice.models.customer import Customer
from backoffice.models.invoice import Invoice
from backoffice.models.product import MovementType, Product
from backoffice.models.shipment import (
    CLOSED_SHIPMENT_STATUSES,
    Shipment,
    ShipmentItem,
    ShipmentItemStatus,
    ShipmentStatus,
    ShipmentType,
)
from backoffice.services import product_service
from backoffice.services.credit_memo_service import CreditMemoService
from backoffice.utils.date_range import utcnow
from backoffice.utils.purchase_math import to_money


SHIPMENT_REFERENCE = "SHIPMENT"

# statuses a user may set directly
SETTABLE_STATUSES = (
    ShipmentStatus.PENDING,
    ShipmentStatus.PACKED,
    ShipmentStatus.DISPATCHED,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.FAILED,
)

NUMBER_PREFIX = {ShipmentType.GROUND: "SH-", ShipmentType.GROUND_RG: "RG-"}


def generate_shipment_number(db: Session, shipment_type: ShipmentType) -> str:
    prefix = NUMBER_PREFIX[shipment_type]
    number = generate_numeric_code(prefix, digits=6)
    while db.query(Shipment).filter(Shipment.shipment_number == number).first():
        number = generate_numeric_code(prefix, digits=6)
    return number


def get_shipment_by_id(db: Session, shipment_id: str) -> Optional[Shipment]:
    return (
        db.query(Shipment)
        .options(joinedload(Shipment.items), joinedload(Shipment.invoice))
        .filter(Shipment.id == shipment_id)
        .first()
    )


def get_all_shipments(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    shipment_type: Optional[ShipmentType] = None,
    status: Optional[ShipmentStatus] = None,
    invoice_id: Optional[str] = None,
) -> tuple[List[Shipment], int]:
    query = db.query(Shipment)
    if shipment_type:
        query = query.filter(Shipment.shipment_type == shipment_type)
    if status:
        query = query.filter(Shipment.status == status)
    if invoice_id:
        query = query.filter(Shipment.invoice_id == invoice_id)

    total = query.count()
    shipments = query.order_by(Shipment.created_at.desc(), Shipment.shipment_number.desc()).offset(skip).limit(limit).all()
    return shipments, total


def create_shipment(
    db: Session,
    shipment_type: ShipmentType,
    items: List[Dict],
    invoice_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    created_by_id: Optional[int] = None,
    **fields,
) -> Shipment:
    """items: [{"product_id", "quantity", "product_name"?}]"""
    if not items:
        raise ValueError("A shipment needs at least one item")

    invoice = None
    if invoice_id:
        invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise ValueError("Invoice not found")
    if customer_id:
        if not db.query(Customer).filter(Customer.id == customer_id).first():
            raise ValueError("Customer not found")
    elif invoice:
        customer_id = invoice.customer_id

    freight = to_money(fields.pop("freight_charge", None) or 0)
    if freight < 0:
        raise ValueError("Freight charge cannot be negative")

    shipment = Shipment(
        shipment_number=generate_shipment_number(db, shipment_type),
        shipment_type=shipment_type,
        invoice=invoice,
        customer_id=customer_id,
        freight_charge=freight,
        status=ShipmentStatus.PENDING,
        created_by_id=created_by_id,
        **fields,
    )
    for data in items:
        product = db.query(Product).filter(Product.id == data["product_id"]).first()
        if not product:
            raise ValueError(f"Product {data['product_id']} not found")
        if int(data["quantity"]) <= 0:
            raise ValueError("Quantity must be greater than 0")
        shipment.items.append(
            ShipmentItem(
                product_id=product.id,
                product_name=data.get("product_name") or product.name,
                quantity=int(data["quantity"]),
                status=ShipmentItemStatus.PENDING,
            )
        )
    db.add(shipment)

    try:
        db.commit()
        db.refresh(shipment)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating shipment: {str(e)}")
        raise ValueError("Failed to create shipment.")

    logger.info(f"Shipment created: {shipment.shipment_number} ({shipment_type.value}) - Items: {len(shipment.items)}")
    return shipment


def update_shipment(db: Session, shipment_id: str, **fields) -> Optional[Shipment]:
    """Transport details only; closed shipments are read-only."""
    shipment = get_shipment_by_id(db, shipment_id)
    if not shipment:
        return None
    if shipment.status in CLOSED_SHIPMENT_STATUSES:
        raise ValueError(f"Cannot edit a {shipment.status.value} shipment")

    if "freight_charge" in fields:
        fields["freight_charge"] = to_money(fields["freight_charge"] or 0)
        if fields["freight_charge"] < 0:
            raise ValueError("Freight charge cannot be negative")
    for key, value in fields.items():
        setattr(shipment, key, value)

    db.commit()
    db.refresh(shipment)
    return shipment


def update_status(db: Session, shipment_id: str, new_status: ShipmentStatus) -> Optional[Shipment]:
    shipment = get_shipment_by_id(db, shipment_id)
    if not shipment:
        return None
    if new_status not in SETTABLE_STATUSES:
        raise ValueError(
            f"Status must be one of {', '.join(s.value for s in SETTABLE_STATUSES)}; "
            "use mark-delivered or mark-return-received to close a shipment"
        )
    if shipment.status in CLOSED_SHIPMENT_STATUSES:
        raise ValueError(f"Cannot change status of a {shipment.status.value} shipment")

    shipment.status = new_status
    if new_status == ShipmentStatus.DISPATCHED and not shipment.dispatch_date:
        shipment.dispatch_date = utcnow()
    if new_status in (ShipmentStatus.PACKED, ShipmentStatus.DISPATCHED):
        for item in shipment.items:
            item.status = ShipmentItemStatus(new_status.value)

    db.commit()
    db.refresh(shipment)
    logger.info(f"Shipment {shipment.shipment_number} status: {new_status.value}")
    return shipment


def mark_delivered(
    db: Session,
    shipment_id: str,
    proof_of_delivery_url: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Optional[Shipment]:
    shipment = get_shipment_by_id(db, shipment_id)
    if not shipment:
        return None
    if shipment.shipment_type != ShipmentType.GROUND:
        raise ValueError("Return shipments are closed with mark-return-received")
    if shipment.status in CLOSED_SHIPMENT_STATUSES:
        raise ValueError(f"Shipment is already {shipment.status.value}")

    try:
        # invoiced goods left stock when they were sold
        if not shipment.invoice_id:
            for item in shipment.items:
                product_service.record_movement(
                    db,
                    item.product,
                    MovementType.SHIPMENT_OUT,
                    -item.quantity,
                    reference_type=SHIPMENT_REFERENCE,
                    reference_id=shipment.shipment_number,
                    notes=f"Delivered on {shipment.shipment_number}",
                    created_by_id=created_by_id,
                )
        for item in shipment.items:
            item.status = ShipmentItemStatus.DELIVERED
        shipment.status = ShipmentStatus.DELIVERED
        shipment.delivered_date = utcnow()
        if proof_of_delivery_url:
            shipment.proof_of_delivery_url = proof_of_delivery_url

        db.commit()
        db.refresh(shipment)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Shipment delivered: {shipment.shipment_number}")
    return shipment


def _invoice_prices(shipment: Shipment) -> Dict[str, Decimal]:
    if not shipment.invoice:
        return {}
    return {item.product_id: item.price for item in shipment.invoice.items if item.product_id}


def mark_return_received(
    db: Session,
    shipment_id: str,
    auto_create_credit_memo: bool = False,
    customer_id: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> Optional[dict]:
    """
    Book a customer return back into stock.

    With auto_create_credit_memo a DRAFT customer credit memo is raised for
    the returned goods, priced from the linked invoice where possible. The
    memo does not move stock again when approved.
    """
    shipment = get_shipment_by_id(db, shipment_id)
    if not shipment:
        return None
    if shipment.shipment_type != ShipmentType.GROUND_RG:
        raise ValueError("Only return shipments (GROUND_RG) can be received back")
    if shipment.status in CLOSED_SHIPMENT_STATUSES:
        raise ValueError(f"Shipment is already {shipment.status.value}")

    customer_id = customer_id or shipment.customer_id
    if auto_create_credit_memo and not customer_id:
        raise ValueError("customer_id is required to raise a credit memo")

    try:
        for item in shipment.items:
            product_service.record_movement(
                db,
                item.product,
                MovementType.SHIPMENT_IN,
                item.quantity,
                reference_type=SHIPMENT_REFERENCE,
                reference_id=shipment.shipment_number,
                notes=f"Returned on {shipment.shipment_number}",
                created_by_id=created_by_id,
            )
            item.status = ShipmentItemStatus.RETURNED
        shipment.status = ShipmentStatus.RETURNED
        shipment.delivered_date = utcnow()

        credit_memo = None
        if auto_create_credit_memo:
            prices = _invoice_prices(shipment)
            credit_memo = CreditMemoService(db).stage_credit_memo(
                memo_type=CreditMemoType.CUSTOMER,
                reason=CreditMemoReason.RETURN,
                customer_id=customer_id,
                invoice_id=shipment.invoice_id,
                shipment_id=shipment.id,
                affects_inventory=False,
                notes=f"Return {shipment.shipment_number}",
                items=[
                    {
                        "product_id": item.product_id,
                        "product_name": item.product_name,
                        "quantity": item.quantity,
                        "unit_price": prices.get(item.product_id, item.product.price),
                    }
                    for item in shipment.items
                ],
                created_by_id=created_by_id,
            )

        db.commit()
        db.refresh(shipment)
        if credit_memo is not None:
            db.refresh(credit_memo)
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Return received: {shipment.shipment_number}"
        + (f" - credit memo {credit_memo.credit_memo_number}" if credit_memo is not None else "")
    )
    return {"shipment": shipment, "credit_memo": credit_memo}
