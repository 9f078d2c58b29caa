"""
Credit memos for goods or value returned to vendors or by customers.

DRAFT -> APPROVED, or DRAFT/APPROVED -> CANCELLED. Approval posts the ledger
and, when the memo affects inventory, moves stock: vendor memos send goods
back out (RETURN_OUT), customer memos bring them in (RETURN_IN). Cancelling
an approved memo removes its ledger rows and reverses its stock movements.
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.credit_memo import (
    CreditMemo,
    CreditMemoItem,
    CreditMemoReason,
    CreditMemoStatus,
    CreditMemoType,
)
from backoffice.models.customer import Customer
from backoffice.models.invoice import Invoice
from backoffice.models.ledger import LedgerAccountType, LedgerReferenceType, PartyType
from backoffice.models.product import MovementType, Product
from backoffice.models.shipment import Shipment
from backoffice.models.vendor import Vendor
from backoffice.services import ledger_service, product_service
from backoffice.utils import purchase_math
from backoffice.utils.date_range import utcnow


CREDIT_MEMO_REFERENCE = LedgerReferenceType.CREDIT_MEMO.value


class CreditMemoService:
    """Service for vendor and customer credit memos."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def generate_credit_memo_number(self) -> str:
        number = generate_numeric_code("CM", digits=6)
        while self.db.query(CreditMemo).filter(CreditMemo.credit_memo_number == number).first():
            number = generate_numeric_code("CM", digits=6)
        return number

    def get_credit_memo(self, memo_id: str) -> Optional[CreditMemo]:
        return (
            self.db.query(CreditMemo)
            .options(joinedload(CreditMemo.items))
            .filter(CreditMemo.id == memo_id)
            .first()
        )

    def get_all_credit_memos(
        self,
        skip: int = 0,
        limit: int = 50,
        memo_type: Optional[CreditMemoType] = None,
        status: Optional[CreditMemoStatus] = None,
        vendor_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> tuple[List[CreditMemo], int]:
        query = self.db.query(CreditMemo)
        if memo_type:
            query = query.filter(CreditMemo.type == memo_type)
        if status:
            query = query.filter(CreditMemo.status == status)
        if vendor_id:
            query = query.filter(CreditMemo.vendor_id == vendor_id)
        if customer_id:
            query = query.filter(CreditMemo.customer_id == customer_id)

        total = query.count()
        memos = query.order_by(CreditMemo.created_at.desc(), CreditMemo.credit_memo_number.desc()).offset(skip).limit(limit).all()
        logger.info(f"Retrieved {len(memos)} credit memos out of {total} total")
        return memos, total

    # ==================== ITEMS ====================

    def _build_items(self, items: List[Dict]) -> List[CreditMemoItem]:
        """items: [{"product_id"?, "product_name"?, "quantity", "unit_price", "tax_percent"?}]"""
        if not items:
            raise ValueError("A credit memo needs at least one item")

        rows = []
        for data in items:
            product = None
            if data.get("product_id"):
                product = self.db.query(Product).filter(Product.id == data["product_id"]).first()
                if not product:
                    raise ValueError(f"Product {data['product_id']} not found")
            name = data.get("product_name") or (product.name if product else None)
            if not name:
                raise ValueError("product_name is required for lines without a product")

            line = purchase_math.compute_line(data["quantity"], data["unit_price"], data.get("tax_percent") or 0)
            rows.append(
                CreditMemoItem(
                    product_id=product.id if product else None,
                    product_name=name,
                    quantity=int(data["quantity"]),
                    unit_price=purchase_math.to_money(data["unit_price"]),
                    tax_percent=purchase_math.to_decimal(data.get("tax_percent") or 0),
                    tax_amount=line.total_tax,
                    total=line.cost_incl_tax,
                )
            )
        return rows

    @staticmethod
    def _apply_totals(memo: CreditMemo):
        memo.tax_amount = sum((i.tax_amount for i in memo.items), purchase_math.ZERO)
        memo.total_amount = sum((i.total for i in memo.items), purchase_math.ZERO)
        memo.subtotal = memo.total_amount - memo.tax_amount

    # ==================== LIFECYCLE ====================

    def stage_credit_memo(
        self,
        memo_type: CreditMemoType,
        reason: CreditMemoReason,
        items: List[Dict],
        vendor_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
        shipment_id: Optional[str] = None,
        affects_inventory: bool = True,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> CreditMemo:
        """Validate and add a DRAFT memo to the session. The caller owns the transaction."""
        if memo_type == CreditMemoType.VENDOR:
            if not vendor_id:
                raise ValueError("vendor_id is required for vendor credit memos")
            if not self.db.query(Vendor).filter(Vendor.id == vendor_id).first():
                raise ValueError("Vendor not found")
            customer_id = None
        else:
            if not customer_id:
                raise ValueError("customer_id is required for customer credit memos")
            if not self.db.query(Customer).filter(Customer.id == customer_id).first():
                raise ValueError("Customer not found")
            vendor_id = None

        if invoice_id and not self.db.query(Invoice).filter(Invoice.id == invoice_id).first():
            raise ValueError("Invoice not found")
        if shipment_id and not self.db.query(Shipment).filter(Shipment.id == shipment_id).first():
            raise ValueError("Shipment not found")

        memo = CreditMemo(
            credit_memo_number=self.generate_credit_memo_number(),
            type=memo_type,
            reason=reason,
            status=CreditMemoStatus.DRAFT,
            vendor_id=vendor_id,
            customer_id=customer_id,
            invoice_id=invoice_id,
            shipment_id=shipment_id,
            affects_inventory=affects_inventory,
            notes=notes,
            created_by_id=created_by_id,
        )
        memo.items = self._build_items(items)
        self._apply_totals(memo)
        self.db.add(memo)
        return memo

    def create_credit_memo(self, **fields) -> CreditMemo:
        memo = self.stage_credit_memo(**fields)
        try:
            self.db.commit()
            self.db.refresh(memo)
        except IntegrityError as ie:
            self.db.rollback()
            logger.error(f"Database integrity error in credit memo creation: {str(ie)}")
            raise ValueError("Failed to create credit memo due to database constraint.")

        logger.info(f"Credit memo created: {memo.credit_memo_number} ({memo.type.value}) - Total: {memo.total_amount}")
        return memo

    def update_credit_memo(self, memo_id: str, **fields) -> Optional[CreditMemo]:
        """Edit a draft. Passing `items` replaces every line and recomputes totals."""
        memo = self.get_credit_memo(memo_id)
        if not memo:
            return None
        if memo.status != CreditMemoStatus.DRAFT:
            raise ValueError("Only draft credit memos can be edited")

        items = fields.pop("items", None)
        if items is not None:
            memo.items = self._build_items(items)
            self._apply_totals(memo)
        for key in ("reason", "affects_inventory", "notes"):
            if key in fields:
                setattr(memo, key, fields[key])

        self.db.commit()
        self.db.refresh(memo)
        logger.info(f"Credit memo updated: {memo.credit_memo_number} - Total: {memo.total_amount}")
        return memo

    def approve_credit_memo(self, memo_id: str, approved_by_id: Optional[int] = None) -> Optional[CreditMemo]:
        memo = self.get_credit_memo(memo_id)
        if not memo:
            return None
        if memo.status != CreditMemoStatus.DRAFT:
            raise ValueError(f"Only draft credit memos can be approved (current: {memo.status.value})")

        try:
            if memo.total_amount > 0:
                self._post_ledger(memo, approved_by_id)
            if memo.affects_inventory:
                self._move_stock(memo, reverse=False, created_by_id=approved_by_id)
            memo.status = CreditMemoStatus.APPROVED
            memo.approved_at = utcnow()
            memo.approved_by_id = approved_by_id
            self.db.commit()
            self.db.refresh(memo)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Credit memo approved: {memo.credit_memo_number} - {memo.total_amount}")
        return memo

    def cancel_credit_memo(self, memo_id: str, cancelled_by_id: Optional[int] = None) -> Optional[CreditMemo]:
        memo = self.get_credit_memo(memo_id)
        if not memo:
            return None
        if memo.status == CreditMemoStatus.CANCELLED:
            raise ValueError("Credit memo is already cancelled")

        try:
            if memo.status == CreditMemoStatus.APPROVED:
                ledger_service.delete_entries_for_reference(self.db, LedgerReferenceType.CREDIT_MEMO, memo.id)
                if memo.affects_inventory:
                    self._move_stock(memo, reverse=True, created_by_id=cancelled_by_id)
            memo.status = CreditMemoStatus.CANCELLED
            self.db.commit()
            self.db.refresh(memo)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Credit memo cancelled: {memo.credit_memo_number}")
        return memo

    def _post_ledger(self, memo: CreditMemo, created_by_id: Optional[int]):
        description = f"Credit memo {memo.credit_memo_number} ({memo.reason.value})"
        if memo.type == CreditMemoType.VENDOR:
            # reduces what we owe the vendor
            ledger_service.post_vendor_ledger(
                self.db,
                memo.vendor_id,
                [
                    {
                        "account_type": LedgerAccountType.PURCHASE_RETURN,
                        "debit": memo.total_amount,
                        "credit": purchase_math.ZERO,
                        "reference_type": LedgerReferenceType.CREDIT_MEMO,
                        "reference_id": memo.id,
                        "description": description,
                    },
                    {
                        "account_type": LedgerAccountType.VENDOR,
                        "debit": purchase_math.ZERO,
                        "credit": memo.total_amount,
                        "reference_type": LedgerReferenceType.CREDIT_MEMO,
                        "reference_id": memo.id,
                        "description": description,
                    },
                ],
                created_by_id=created_by_id,
            )
        else:
            ledger_service.post_entries(
                self.db,
                [
                    {
                        "account_type": LedgerAccountType.SALES_RETURN,
                        "debit": memo.total_amount,
                        "credit": purchase_math.ZERO,
                        "reference_type": LedgerReferenceType.CREDIT_MEMO,
                        "reference_id": memo.id,
                        "description": description,
                    },
                    {
                        "account_type": LedgerAccountType.CUSTOMER,
                        "party_type": PartyType.CUSTOMER,
                        "party_id": memo.customer_id,
                        "debit": purchase_math.ZERO,
                        "credit": memo.total_amount,
                        "reference_type": LedgerReferenceType.CREDIT_MEMO,
                        "reference_id": memo.id,
                        "description": description,
                    },
                ],
                created_by_id=created_by_id,
            )

    def _move_stock(self, memo: CreditMemo, reverse: bool, created_by_id: Optional[int]):
        outgoing = memo.type == CreditMemoType.VENDOR
        if reverse:
            outgoing = not outgoing
        movement_type = MovementType.RETURN_OUT if outgoing else MovementType.RETURN_IN
        for item in memo.items:
            if not item.product_id:
                continue
            product_service.record_movement(
                self.db,
                item.product,
                movement_type,
                -item.quantity if outgoing else item.quantity,
                reference_type=CREDIT_MEMO_REFERENCE,
                reference_id=memo.credit_memo_number,
                notes=f"Credit memo {memo.credit_memo_number}" + (" cancelled" if reverse else ""),
                created_by_id=created_by_id,
            )

    # ==================== ANALYTICS ====================

    def returns_by_vendor(self) -> List[dict]:
        rows = (
            self.db.query(
                CreditMemo.vendor_id,
                Vendor.name,
                func.count(CreditMemo.id),
                func.coalesce(func.sum(CreditMemo.total_amount), 0),
            )
            .outerjoin(Vendor, CreditMemo.vendor_id == Vendor.id)
            .filter(CreditMemo.type == CreditMemoType.VENDOR, CreditMemo.status == CreditMemoStatus.APPROVED)
            .group_by(CreditMemo.vendor_id, Vendor.name)
            .all()
        )
        result = [
            {"vendor_id": vid, "vendor_name": name, "count": count, "total_amount": purchase_math.to_money(total)}
            for vid, name, count, total in rows
        ]
        return sorted(result, key=lambda r: r["total_amount"], reverse=True)

    def reason_breakdown(self) -> List[dict]:
        rows = (
            self.db.query(
                CreditMemo.reason,
                func.count(CreditMemo.id),
                func.coalesce(func.sum(CreditMemo.total_amount), 0),
            )
            .filter(CreditMemo.status == CreditMemoStatus.APPROVED)
            .group_by(CreditMemo.reason)
            .all()
        )
        grand = sum(count for _, count, _ in rows)
        return [
            {
                "reason": reason,
                "count": count,
                "total_amount": purchase_math.to_money(total),
                "percent": round(count * 100.0 / grand, 1) if grand else 0.0,
            }
            for reason, count, total in sorted(rows, key=lambda r: r[1], reverse=True)
        ]

    def returns_by_product(self) -> List[dict]:
        rows = (
            self.db.query(
                CreditMemoItem.product_id,
                Product.name,
                func.coalesce(func.sum(CreditMemoItem.quantity), 0),
                func.coalesce(func.sum(CreditMemoItem.total), 0),
            )
            .join(CreditMemo, CreditMemoItem.credit_memo_id == CreditMemo.id)
            .join(Product, CreditMemoItem.product_id == Product.id)
            .filter(CreditMemo.status == CreditMemoStatus.APPROVED)
            .group_by(CreditMemoItem.product_id, Product.name)
            .all()
        )
        return [
            {
                "product_id": pid,
                "product_name": name,
                "quantity_returned": int(qty),
                "total_value": purchase_math.to_money(value),
            }
            for pid, name, qty, value in sorted(rows, key=lambda r: r[2], reverse=True)
        ]
