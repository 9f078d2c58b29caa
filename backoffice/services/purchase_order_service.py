"""
Purchase order lifecycle.

draft -> sent -> partial -> received, with cancel allowed until the order is
fully received. Stock moves in as lines are received; the vendor payable is
posted once, when the order becomes fully received.
"""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType
from backoffice.models.payment import Payment, PaymentMethod
from backoffice.models.product import MovementType, Product
from backoffice.models.purchase_order import (
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)
from backoffice.models.vendor import Vendor
from backoffice.services import ledger_service, payment_service, product_service
from backoffice.utils import purchase_math
from backoffice.utils.date_range import utcnow


class PurchaseOrderService:
    """Service for purchase orders and the payments made against them."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def generate_po_number(self) -> str:
        po_number = generate_numeric_code("P", digits=5)
        while self._get_by_number(po_number):
            po_number = generate_numeric_code("P", digits=5)
        return po_number

    def _get_by_number(self, po_number: str) -> Optional[PurchaseOrder]:
        return self.db.query(PurchaseOrder).filter(PurchaseOrder.po_number == po_number).first()

    def get_purchase_order(self, po_id: str) -> Optional[PurchaseOrder]:
        po = (
            self.db.query(PurchaseOrder)
            .options(
                joinedload(PurchaseOrder.vendor),
                joinedload(PurchaseOrder.items),
                joinedload(PurchaseOrder.payments),
            )
            .filter(PurchaseOrder.id == po_id)
            .first()
        )
        if not po:
            logger.warning(f"Purchase order not found: {po_id}")
        return po

    def get_all_purchase_orders(
        self,
        skip: int = 0,
        limit: int = 50,
        status: Optional[PurchaseOrderStatus] = None,
        vendor_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[List[PurchaseOrder], int]:
        query = self.db.query(PurchaseOrder).outerjoin(Vendor, PurchaseOrder.vendor_id == Vendor.id)

        if status:
            query = query.filter(PurchaseOrder.status == status)
            logger.debug(f"Filtering by status: {status}")
        if vendor_id:
            query = query.filter(PurchaseOrder.vendor_id == vendor_id)
            logger.debug(f"Filtering by vendor_id: {vendor_id}")
        if search:
            search_term = f"%{search}%"
            query = query.filter(
                or_(PurchaseOrder.po_number.ilike(search_term), Vendor.name.ilike(search_term))
            )
            logger.debug(f"Searching with term: {search}")

        total = query.count()
        orders = query.order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.po_number.desc()).offset(skip).limit(limit).all()

        logger.info(f"Retrieved {len(orders)} purchase orders out of {total} total")
        return orders, total

    # ==================== ITEMS ====================

    def _build_items(self, items: List[Dict]) -> List[PurchaseOrderItem]:
        """
        Validate item payloads and compute their stored line figures.

        items: [{"product_id", "quantity_ordered", "unit_cost", "tax_rate"?, "shipping"?, "product_name"?}]
        """
        if not items:
            raise ValueError("A purchase order needs at least one item")

        rows = []
        for idx, data in enumerate(items):
            product = self.db.query(Product).filter(Product.id == data["product_id"]).first()
            if not product:
                raise ValueError(f"Product {data['product_id']} not found")

            line = purchase_math.compute_line(
                data["quantity_ordered"],
                data["unit_cost"],
                data.get("tax_rate") or 0,
                data.get("shipping") or 0,
            )
            logger.debug(
                f"Line {idx + 1}: {product.name} x{data['quantity_ordered']} @ {data['unit_cost']} = {line.total_price}"
            )
            rows.append(
                PurchaseOrderItem(
                    product_id=product.id,
                    product_name=data.get("product_name") or product.name,
                    quantity_ordered=int(data["quantity_ordered"]),
                    quantity_received=0,
                    unit_cost=purchase_math.to_money(data["unit_cost"]),
                    tax_rate=purchase_math.to_decimal(data.get("tax_rate") or 0),
                    shipping=line.shipping,
                    cost_excl_tax=line.cost_excl_tax,
                    total_tax=line.total_tax,
                    cost_incl_tax=line.cost_incl_tax,
                    total_price=line.total_price,
                )
            )
        return rows

    @staticmethod
    def _apply_totals(po: PurchaseOrder):
        totals = purchase_math.compute_totals(po.items)
        po.subtotal = totals.subtotal
        po.tax_amount = totals.tax_amount
        po.shipping_amount = totals.shipping_amount
        po.total_amount = totals.total_amount

    # ==================== LIFECYCLE ====================

    def create_purchase_order(
        self,
        vendor_id: str,
        items: List[Dict],
        po_number: Optional[str] = None,
        expected_date: Optional[date] = None,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> PurchaseOrder:
        logger.info(f"Starting purchase order creation - Vendor: {vendor_id}, Items: {len(items or [])}")

        vendor = self.db.query(Vendor).filter(Vendor.id == vendor_id).first()
        if not vendor:
            raise ValueError("Vendor not found")

        if po_number:
            if self._get_by_number(po_number):
                raise ValueError(f"PO number {po_number} already exists")
        else:
            po_number = self.generate_po_number()

        po = PurchaseOrder(
            po_number=po_number,
            vendor_id=vendor.id,
            status=PurchaseOrderStatus.draft,
            expected_date=expected_date,
            notes=notes,
            created_by_id=created_by_id,
        )
        po.items = self._build_items(items)
        self._apply_totals(po)
        self.db.add(po)

        try:
            self.db.commit()
            self.db.refresh(po)
        except IntegrityError as ie:
            self.db.rollback()
            logger.error(f"Database integrity error in purchase order creation: {str(ie)}")
            raise ValueError("Failed to create purchase order due to database constraint.")

        logger.info(
            f"Purchase order created: {po.po_number} - Vendor: {vendor.name} - "
            f"Total: {po.total_amount} - Items: {len(po.items)}"
        )
        return po

    def update_purchase_order(self, po_id: str, **fields) -> Optional[PurchaseOrder]:
        """Edit a draft PO. Passing `items` replaces every line and recomputes totals."""
        po = self.get_purchase_order(po_id)
        if not po:
            return None
        if po.status != PurchaseOrderStatus.draft:
            raise ValueError("Can only edit draft purchase orders")

        if "vendor_id" in fields and fields["vendor_id"] != po.vendor_id:
            if not self.db.query(Vendor).filter(Vendor.id == fields["vendor_id"]).first():
                raise ValueError("Vendor not found")
            po.vendor_id = fields["vendor_id"]

        items = fields.pop("items", None)
        if items is not None:
            po.items = self._build_items(items)
            self._apply_totals(po)

        for key in ("expected_date", "notes"):
            if key in fields:
                setattr(po, key, fields[key])

        self.db.commit()
        self.db.refresh(po)
        logger.info(f"Purchase order updated: {po.po_number} - Total: {po.total_amount}")
        return po

    def send_purchase_order(self, po_id: str) -> Optional[PurchaseOrder]:
        po = self.get_purchase_order(po_id)
        if not po:
            return None
        if po.status != PurchaseOrderStatus.draft:
            raise ValueError(f"Only draft purchase orders can be sent (current: {po.status.value})")

        po.status = PurchaseOrderStatus.sent
        self.db.commit()
        self.db.refresh(po)
        logger.info(f"Purchase order sent: {po.po_number}")
        return po

    def receive_purchase_order(
        self,
        po_id: str,
        lines: List[Dict],
        created_by_id: Optional[int] = None,
    ) -> Optional[PurchaseOrder]:
        """
        Book received quantities.

        lines: [{"item_id": int, "quantity_received": int}]. Each quantity is
        clamped to what is still outstanding on the line. Stock goes up and a
        PURCHASE movement is written per applied line. When every line is
        complete the PO becomes received and the vendor payable is posted.
        """
        po = self.get_purchase_order(po_id)
        if not po:
            return None
        if po.status in (PurchaseOrderStatus.cancelled, PurchaseOrderStatus.received):
            raise ValueError(f"Cannot receive a {po.status.value} purchase order")

        items_by_id = {item.id: item for item in po.items}
        unknown = [line["item_id"] for line in lines if line["item_id"] not in items_by_id]
        if unknown:
            raise ValueError(f"Items not on this purchase order: {', '.join(str(i) for i in unknown)}")

        try:
            for line in lines:
                item = items_by_id[line["item_id"]]
                qty = purchase_math.receivable_quantity(
                    item.quantity_ordered, item.quantity_received, line["quantity_received"]
                )
                if qty <= 0:
                    continue

                item.quantity_received = (item.quantity_received or 0) + qty
                product_service.record_movement(
                    self.db,
                    item.product,
                    MovementType.PURCHASE,
                    qty,
                    reference_type=LedgerReferenceType.PURCHASE_ORDER.value,
                    reference_id=po.id,
                    notes=f"Received on PO {po.po_number}",
                    created_by_id=created_by_id,
                )

            all_received = purchase_math.shipping_status(po.items) == purchase_math.ShippingStatus.received
            po.status = PurchaseOrderStatus.received if all_received else PurchaseOrderStatus.partial

            if all_received:
                po.received_at = utcnow()
                if po.total_amount > 0:
                    self._post_payable(po, created_by_id)

            self.db.commit()
            self.db.refresh(po)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Purchase order received: {po.po_number} - Status: {po.status.value}")
        return po

    def _post_payable(self, po: PurchaseOrder, created_by_id: Optional[int]):
        ledger_service.post_vendor_ledger(
            self.db,
            po.vendor_id,
            [
                {
                    "account_type": LedgerAccountType.VENDOR,
                    "debit": po.total_amount,
                    "credit": purchase_math.ZERO,
                    "reference_type": LedgerReferenceType.PURCHASE_ORDER,
                    "reference_id": po.id,
                    "description": f"PO {po.po_number} received",
                },
                {
                    "account_type": LedgerAccountType.PURCHASE,
                    "debit": purchase_math.ZERO,
                    "credit": po.total_amount,
                    "reference_type": LedgerReferenceType.PURCHASE_ORDER,
                    "reference_id": po.id,
                    "description": f"PO {po.po_number}",
                },
            ],
            created_by_id=created_by_id,
        )
        logger.info(f"Vendor payable posted - PO: {po.po_number}, Amount: {po.total_amount}")

    def cancel_purchase_order(self, po_id: str) -> Optional[PurchaseOrder]:
        po = self.get_purchase_order(po_id)
        if not po:
            return None
        if po.status in (PurchaseOrderStatus.received, PurchaseOrderStatus.cancelled):
            raise ValueError(f"Cannot cancel a {po.status.value} purchase order")

        po.status = PurchaseOrderStatus.cancelled
        self.db.commit()
        self.db.refresh(po)
        logger.info(f"Purchase order cancelled: {po.po_number}")
        return po

    def delete_purchase_order(self, po_id: str) -> bool:
        po = self.get_purchase_order(po_id)
        if not po:
            return False
        if po.status != PurchaseOrderStatus.draft:
            raise ValueError("Only draft purchase orders can be deleted")

        self.db.delete(po)
        self.db.commit()
        logger.info(f"Purchase order deleted: {po.po_number}")
        return True

    # ==================== PAYMENTS ====================

    def add_payment(
        self,
        po_id: str,
        amount,
        method: PaymentMethod,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> Optional[Payment]:
        po = self.get_purchase_order(po_id)
        if not po:
            return None
        return payment_service.record_vendor_payment(
            self.db, po, amount, method,
            reference=reference, notes=notes, created_by_id=created_by_id,
        )

    def get_payments(self, po_id: str) -> Optional[List[Payment]]:
        po = self.get_purchase_order(po_id)
        if not po:
            return None
        return sorted(po.payments, key=lambda p: p.created_at or utcnow())
