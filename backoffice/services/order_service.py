"""
Customer sales orders for store pickup.

placed -> packed -> ready_for_pickup -> completed, with cancel allowed until
the order is completed. Stock leaves when the order is placed and comes back
on cancel. Payment is recorded as a sale payment; loyalty points follow it.
"""

from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.logger_config import logger
from backoffice.models.common import generate_numeric_code
from backoffice.models.customer import Customer
from backoffice.models.invoice import InvoicePaymentStatus
from backoffice.models.order import (
    FINAL_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderPaymentStatus,
    OrderStatus,
    OrderStatusHistory,
)
from backoffice.models.payment import PaymentMethod, PaymentType
from backoffice.models.product import MovementType, Product
from backoffice.services import payment_service, product_service
from backoffice.services.customer_service import award_points, points_for_amount, revoke_points
from backoffice.utils import purchase_math
from backoffice.utils.date_range import utcnow
from backoffice.utils.sales_math import consolidate_lines


ORDER_REFERENCE = "ORDER"


class OrderService:
    """Service for customer orders, their payment and their status history."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def generate_order_number(self) -> str:
        number = generate_numeric_code("ORD", digits=6)
        while self.db.query(Order).filter(Order.order_number == number).first():
            number = generate_numeric_code("ORD", digits=6)
        return number

    def get_order(self, order_id: str) -> Optional[Order]:
        order = (
            self.db.query(Order)
            .options(joinedload(Order.items), joinedload(Order.status_history), joinedload(Order.customer))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            logger.warning(f"Order not found: {order_id}")
        return order

    def get_all_orders(
        self,
        skip: int = 0,
        limit: int = 50,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[OrderPaymentStatus] = None,
        customer_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[List[Order], int]:
        query = self.db.query(Order)

        if status:
            query = query.filter(Order.status == status)
            logger.debug(f"Filtering by status: {status}")
        if payment_status:
            query = query.filter(Order.payment_status == payment_status)
        if customer_id:
            query = query.filter(Order.customer_id == customer_id)
        if search:
            search_term = f"%{search}%"
            query = query.filter(or_(Order.order_number.ilike(search_term), Order.customer_name.ilike(search_term)))
            logger.debug(f"Searching with term: {search}")

        total = query.count()
        orders = query.order_by(Order.created_at.desc(), Order.order_number.desc()).offset(skip).limit(limit).all()
        logger.info(f"Retrieved {len(orders)} orders out of {total} total")
        return orders, total

    # ==================== LIFECYCLE ====================

    def create_order(
        self,
        items: List[Dict],
        customer_id: Optional[str] = None,
        customer_name: Optional[str] = None,
        payment_method: Optional[PaymentMethod] = None,
        pickup_location: Optional[str] = None,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> Order:
        """
        Place an order. items: [{"product_id", "quantity"}]; repeated products are merged.

        Lines are priced at the product's current price. Every product must be
        active and in stock. Passing payment_method records the payment at once.
        """
        if not items:
            raise ValueError("An order needs at least one item")

        customer = None
        if customer_id:
            customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
            if not customer:
                raise ValueError("Customer not found")
        customer_name = customer_name or (customer.name if customer else None)
        if not customer_name:
            raise ValueError("customer_name is required when no customer is linked")

        order = Order(
            order_number=self.generate_order_number(),
            customer=customer,
            customer_name=customer_name,
            status=OrderStatus.placed,
            payment_status=OrderPaymentStatus.pending,
            pickup_location=pickup_location or "Store Pickup",
            notes=notes,
            created_by_id=created_by_id,
        )

        total = purchase_math.ZERO
        try:
            for line in consolidate_lines(items):
                product = self.db.query(Product).filter(Product.id == line["product_id"]).first()
                if not product or not product.is_active:
                    raise ValueError(f"Product {line['product_id']} not found or inactive")
                if line["quantity"] <= 0:
                    raise ValueError("Quantity must be greater than 0")
                if (product.stock_quantity or 0) < line["quantity"]:
                    raise ValueError(
                        f"Insufficient stock for {product.name}. Available: {product.stock_quantity}"
                    )

                price = purchase_math.to_money(product.price)
                subtotal = purchase_math.to_money(price * line["quantity"])
                order.items.append(
                    OrderItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=line["quantity"],
                        price=price,
                        unit_cost=purchase_math.to_money(product.cost_price or 0),
                        subtotal=subtotal,
                    )
                )
                total += subtotal

                product_service.record_movement(
                    self.db,
                    product,
                    MovementType.SALE,
                    -line["quantity"],
                    reference_type=ORDER_REFERENCE,
                    reference_id=order.order_number,
                    notes=f"Order {order.order_number}",
                    created_by_id=created_by_id,
                )

            order.total_amount = total
            order.status_history.append(
                OrderStatusHistory(status=OrderStatus.placed, notes="Order placed", created_by_id=created_by_id)
            )
            self.db.add(order)

            if payment_method:
                self._mark_paid(order, payment_method, created_by_id)

            self.db.commit()
            self.db.refresh(order)
        except IntegrityError as ie:
            self.db.rollback()
            logger.error(f"Database integrity error in order creation: {str(ie)}")
            raise ValueError("Failed to create order due to database constraint.")
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Order created: {order.order_number} - {order.customer_name} - "
            f"Total: {order.total_amount} - Items: {len(order.items)}"
        )
        return order

    def _mark_paid(self, order: Order, method: PaymentMethod, created_by_id: Optional[int]):
        if order.total_amount > 0:
            payment_service.stage_payment(
                self.db, PaymentType.sale, order.total_amount, method,
                order_ref=order.order_number, notes="Order payment", created_by_id=created_by_id,
            )
        order.payment_status = OrderPaymentStatus.paid
        order.payment_method = method
        order.paid_at = utcnow()
        order.points_awarded = points_for_amount(order.total_amount) if order.customer else 0
        award_points(order.customer, order.points_awarded)
        if order.invoice:
            order.invoice.payment_status = InvoicePaymentStatus.paid
            order.invoice.payment_method = method.value

    def pay_order(self, order_id: str, method: PaymentMethod, created_by_id: Optional[int] = None) -> Optional[Order]:
        order = self.get_order(order_id)
        if not order:
            return None
        if order.status == OrderStatus.cancelled:
            raise ValueError("Cannot pay a cancelled order")
        if order.payment_status != OrderPaymentStatus.pending:
            raise ValueError(f"Order is already {order.payment_status.value}")

        try:
            self._mark_paid(order, method, created_by_id)
            order.status_history.append(
                OrderStatusHistory(status=order.status, notes=f"Payment received ({method.value})", created_by_id=created_by_id)
            )
            self.db.commit()
            self.db.refresh(order)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order paid: {order.order_number} - {order.total_amount} ({method.value})")
        return order

    def update_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        notes: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> Optional[Order]:
        """Move an order along. Completed and cancelled orders are final."""
        order = self.get_order(order_id)
        if not order:
            return None
        if order.status in FINAL_ORDER_STATUSES:
            raise ValueError(f"Cannot change a {order.status.value} order")
        if new_status == order.status:
            raise ValueError(f"Order is already {order.status.value}")

        try:
            if new_status == OrderStatus.cancelled:
                self._cancel(order, created_by_id)
            order.status = new_status
            order.status_history.append(
                OrderStatusHistory(status=new_status, notes=notes, created_by_id=created_by_id)
            )
            self.db.commit()
            self.db.refresh(order)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} status: {new_status.value}")
        return order

    def _cancel(self, order: Order, created_by_id: Optional[int]):
        """Restock every line; refund and take back points when the order was paid."""
        for item in order.items:
            product_service.record_movement(
                self.db,
                item.product,
                MovementType.RETURN_IN,
                item.quantity,
                reference_type=ORDER_REFERENCE,
                reference_id=order.order_number,
                notes=f"Order {order.order_number} cancelled",
                created_by_id=created_by_id,
            )

        if order.payment_status == OrderPaymentStatus.paid:
            if order.total_amount > 0:
                payment_service.stage_payment(
                    self.db, PaymentType.refund, order.total_amount, order.payment_method or PaymentMethod.cash,
                    order_ref=order.order_number, notes="Order cancelled", created_by_id=created_by_id,
                )
            revoke_points(order.customer, order.points_awarded)
            order.points_awarded = 0
            order.payment_status = OrderPaymentStatus.refunded
            if order.invoice:
                order.invoice.payment_status = InvoicePaymentStatus.refunded
        logger.info(f"Order cancelled: {order.order_number} - restocked {len(order.items)} lines")
