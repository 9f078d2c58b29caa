"""initial schema: users, vendors, products, purchase orders, payments, ledger, expenses, customers,
receipts, orders, invoices, pos sales, shipments, credit memos

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "0001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


vendor_status = sa.Enum("ACTIVE", "INACTIVE", "BLOCKED", name="vendorstatus")
movement_type = sa.Enum(
    "PURCHASE", "SALE", "RETURN_IN", "RETURN_OUT", "ADJUSTMENT", "SHIPMENT_OUT", "SHIPMENT_IN",
    name="movementtype",
)
po_status = sa.Enum("draft", "sent", "partial", "received", "cancelled", name="purchaseorderstatus")
payment_type = sa.Enum("sale", "refund", "vendor", "expense", "adjustment", name="paymenttype")
payment_method = sa.Enum("cash", "card", "check", "digital", "other", name="paymentmethod")
account_type = sa.Enum(
    "VENDOR", "CUSTOMER", "PURCHASE", "SALES", "CASH", "BANK", "CARD", "UPI", "EXPENSE",
    "PURCHASE_RETURN", "SALES_RETURN",
    name="ledgeraccounttype",
)
reference_type = sa.Enum(
    "PURCHASE_ORDER", "PAYMENT", "RECEIPT", "EXPENSE", "CREDIT_MEMO", name="ledgerreferencetype"
)
party_type = sa.Enum("VENDOR", "CUSTOMER", name="partytype")
category_type = sa.Enum("FIXED", "VARIABLE", name="expensecategorytype")
expense_mode = sa.Enum("CASH", "BANK", "UPI", "CARD", name="expensepaymentmode")
recurrence_type = sa.Enum("NONE", "MONTHLY", "YEARLY", name="recurrencetype")
order_status = sa.Enum("placed", "packed", "ready_for_pickup", "completed", "cancelled", name="orderstatus")
order_payment_status = sa.Enum("pending", "paid", "refunded", name="orderpaymentstatus")
invoice_type = sa.Enum("online", "pos", "website", "store_pickup", name="invoicetype")
invoice_payment_status = sa.Enum("pending", "paid", "refunded", name="invoicepaymentstatus")
pos_payment_method = sa.Enum("cash", "card", "digital", "split", name="pospaymentmethod")
sale_type = sa.Enum("pos", "website", "store_pickup", name="saletype")
shipment_type = sa.Enum("GROUND", "GROUND_RG", name="shipmenttype")
shipment_status = sa.Enum(
    "PENDING", "PACKED", "DISPATCHED", "IN_TRANSIT", "DELIVERED", "FAILED", "RETURNED", name="shipmentstatus"
)
shipment_item_status = sa.Enum(
    "PENDING", "PACKED", "DISPATCHED", "DELIVERED", "RETURNED", name="shipmentitemstatus"
)
credit_memo_type = sa.Enum("VENDOR", "CUSTOMER", name="creditmemotype")
credit_memo_reason = sa.Enum(
    "DAMAGED", "RATE_DIFFERENCE", "RETURN", "SCHEME", "OTHER", name="creditmemoreason"
)
credit_memo_status = sa.Enum("DRAFT", "APPROVED", "CANCELLED", name="creditmemostatus")

# types already created by an earlier table
existing_payment_method = postgresql.ENUM(name="paymentmethod", create_type=False)
existing_order_status = postgresql.ENUM(name="orderstatus", create_type=False)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "vendors",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("supplier_code", sa.String(20), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip", sa.String(20), nullable=True),
        sa.Column("tax_id", sa.String(50), nullable=True),
        sa.Column("payment_terms_days", sa.Integer(), nullable=True),
        sa.Column("credit_limit", sa.Numeric(15, 2), nullable=True),
        sa.Column("status", vendor_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_vendors_supplier_code", "vendors", ["supplier_code"], unique=True)
    op.create_index("ix_vendors_name", "vendors", ["name"])

    op.create_table(
        "products",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sku", sa.String(64), nullable=True),
        sa.Column("barcode", sa.String(64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("cost_price", sa.Numeric(15, 2), nullable=True),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_products_sku", "products", ["sku"], unique=True)
    op.create_index("ix_products_barcode", "products", ["barcode"])

    op.create_table(
        "stock_movements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("movement_type", movement_type, nullable=False),
        sa.Column("quantity_change", sa.Integer(), nullable=False),
        sa.Column("reference_type", sa.String(30), nullable=True),
        sa.Column("reference_id", sa.String(30), nullable=True),
        sa.Column("notes", sa.String(255), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_stock_movements_product_id", "stock_movements", ["product_id"])

    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("po_number", sa.String(30), nullable=False),
        sa.Column("vendor_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("status", po_status, nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("shipping_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("expected_date", sa.Date(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_purchase_orders_po_number", "purchase_orders", ["po_number"], unique=True)
    op.create_index("ix_purchase_orders_vendor_id", "purchase_orders", ["vendor_id"])
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"])
    op.create_index("ix_purchase_orders_created_at", "purchase_orders", ["created_at"])

    op.create_table(
        "purchase_order_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_order_id", sa.String(20),
            sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity_ordered", sa.Integer(), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False),
        sa.Column("unit_cost", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("shipping", sa.Numeric(15, 2), nullable=False),
        sa.Column("cost_excl_tax", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_tax", sa.Numeric(15, 2), nullable=False),
        sa.Column("cost_incl_tax", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index("ix_purchase_order_items_purchase_order_id", "purchase_order_items", ["purchase_order_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("type", payment_type, nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("method", payment_method, nullable=False),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("order_ref", sa.String(50), nullable=True),
        sa.Column("vendor_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=True),
        sa.Column("purchase_order_id", sa.String(20), sa.ForeignKey("purchase_orders.id"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_payments_type", "payments", ["type"])
    op.create_index("ix_payments_vendor_id", "payments", ["vendor_id"])
    op.create_index("ix_payments_purchase_order_id", "payments", ["purchase_order_id"])
    op.create_index("ix_payments_created_at", "payments", ["created_at"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("account_type", account_type, nullable=False),
        sa.Column("party_type", party_type, nullable=True),
        sa.Column("party_id", sa.String(20), nullable=True),
        sa.Column("debit", sa.Numeric(15, 2), nullable=False),
        sa.Column("credit", sa.Numeric(15, 2), nullable=False),
        sa.Column("reference_type", reference_type, nullable=False),
        sa.Column("reference_id", sa.String(30), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_entries_date", "ledger_entries", ["date"])
    op.create_index("ix_ledger_entries_account_type", "ledger_entries", ["account_type"])
    op.create_index("ix_ledger_entries_party_id", "ledger_entries", ["party_id"])
    op.create_index("ix_ledger_entries_reference_id", "ledger_entries", ["reference_id"])

    op.create_table(
        "expense_categories",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("type", category_type, nullable=False),
        sa.Column("color_tag", sa.String(7), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("expense_number", sa.String(20), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "expense_category_id", sa.String(20),
            sa.ForeignKey("expense_categories.id"), nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("payment_mode", expense_mode, nullable=False),
        sa.Column("vendor_name", sa.String(255), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("recurrence_type", recurrence_type, nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_expenses_date", "expenses", ["date"])
    op.create_index("ix_expenses_deleted_at", "expenses", ["deleted_at"])

    op.create_table(
        "customers",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip", sa.String(20), nullable=True),
        sa.Column("tax_exempt", sa.Boolean(), nullable=False),
        sa.Column("credit_limit", sa.Numeric(15, 2), nullable=True),
        sa.Column("loyalty_points", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_customers_name", "customers", ["name"])
    op.create_index("ix_customers_phone", "customers", ["phone"])
    op.create_index("ix_customers_email", "customers", ["email"])

    op.create_table(
        "receipts",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("trx_id", sa.String(20), nullable=False, unique=True),
        sa.Column("trx_date", sa.Date(), nullable=False),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("so_id", sa.String(50), nullable=True),
        sa.Column("invoice_num", sa.String(50), nullable=True),
        sa.Column("so_balance", sa.Numeric(15, 2), nullable=True),
        sa.Column("pmt_mode", sa.String(30), nullable=False),
        sa.Column("amount_received", sa.Numeric(15, 2), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_receipts_trx_date", "receipts", ["trx_date"])
    op.create_index("ix_receipts_customer_id", "receipts", ["customer_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("order_number", sa.String(30), nullable=False),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("status", order_status, nullable=False),
        sa.Column("payment_status", order_payment_status, nullable=False),
        sa.Column("payment_method", existing_payment_method, nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False),
        sa.Column("pickup_location", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_order_number", "orders", ["order_number"], unique=True)
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.String(20), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("unit_cost", sa.Numeric(15, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_status_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.String(20), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", existing_order_status, nullable=False),
        sa.Column("notes", sa.String(255), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_order_status_history_order_id", "order_status_history", ["order_id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("invoice_number", sa.String(30), nullable=False),
        sa.Column("order_id", sa.String(20), sa.ForeignKey("orders.id"), nullable=True, unique=True),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_phone", sa.String(30), nullable=True),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_address", sa.String(500), nullable=True),
        sa.Column("invoice_type", invoice_type, nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("adjustment", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("shipping_type", sa.String(50), nullable=True),
        sa.Column("terms", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("payment_method", sa.String(20), nullable=True),
        sa.Column("payment_status", invoice_payment_status, nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invoices_invoice_number", "invoices", ["invoice_number"], unique=True)
    op.create_index("ix_invoices_customer_id", "invoices", ["customer_id"])
    op.create_index("ix_invoices_invoice_type", "invoices", ["invoice_type"])
    op.create_index("ix_invoices_created_at", "invoices", ["created_at"])

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("invoice_id", sa.String(20), sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("discount", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax", sa.Numeric(15, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    op.create_table(
        "pos_sales",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("sale_number", sa.String(30), nullable=False),
        sa.Column("invoice_id", sa.String(20), sa.ForeignKey("invoices.id"), nullable=False),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(30), nullable=True),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("payment_method", pos_payment_method, nullable=False),
        sa.Column("split_cash", sa.Numeric(15, 2), nullable=True),
        sa.Column("split_card", sa.Numeric(15, 2), nullable=True),
        sa.Column("split_digital", sa.Numeric(15, 2), nullable=True),
        sa.Column("sale_type", sale_type, nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_pos_sales_sale_number", "pos_sales", ["sale_number"], unique=True)
    op.create_index("ix_pos_sales_customer_id", "pos_sales", ["customer_id"])
    op.create_index("ix_pos_sales_sale_type", "pos_sales", ["sale_type"])
    op.create_index("ix_pos_sales_created_at", "pos_sales", ["created_at"])

    op.create_table(
        "pos_sale_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sale_id", sa.String(20), sa.ForeignKey("pos_sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("unit_cost", sa.Numeric(15, 2), nullable=False),
        sa.Column("discount", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax", sa.Numeric(15, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index("ix_pos_sale_items_sale_id", "pos_sale_items", ["sale_id"])

    op.create_table(
        "shipments",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("shipment_number", sa.String(30), nullable=False),
        sa.Column("shipment_type", shipment_type, nullable=False),
        sa.Column("invoice_id", sa.String(20), sa.ForeignKey("invoices.id"), nullable=True),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("transporter_name", sa.String(255), nullable=True),
        sa.Column("vehicle_number", sa.String(50), nullable=True),
        sa.Column("lr_number", sa.String(50), nullable=True),
        sa.Column("dispatch_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("delivered_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("freight_charge", sa.Numeric(15, 2), nullable=False),
        sa.Column("weight_kg", sa.Numeric(10, 3), nullable=True),
        sa.Column("volume_cbm", sa.Numeric(10, 3), nullable=True),
        sa.Column("status", shipment_status, nullable=False),
        sa.Column("proof_of_delivery_url", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_shipments_shipment_number", "shipments", ["shipment_number"], unique=True)
    op.create_index("ix_shipments_shipment_type", "shipments", ["shipment_type"])
    op.create_index("ix_shipments_invoice_id", "shipments", ["invoice_id"])
    op.create_index("ix_shipments_status", "shipments", ["status"])
    op.create_index("ix_shipments_created_at", "shipments", ["created_at"])

    op.create_table(
        "shipment_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "shipment_id", sa.String(20),
            sa.ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", shipment_item_status, nullable=False),
    )
    op.create_index("ix_shipment_items_shipment_id", "shipment_items", ["shipment_id"])

    op.create_table(
        "credit_memos",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("credit_memo_number", sa.String(30), nullable=False),
        sa.Column("type", credit_memo_type, nullable=False),
        sa.Column("reason", credit_memo_reason, nullable=False),
        sa.Column("status", credit_memo_status, nullable=False),
        sa.Column("vendor_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=True),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("invoice_id", sa.String(20), sa.ForeignKey("invoices.id"), nullable=True),
        sa.Column("shipment_id", sa.String(20), sa.ForeignKey("shipments.id"), nullable=True),
        sa.Column("affects_inventory", sa.Boolean(), nullable=False),
        sa.Column("subtotal", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_credit_memos_credit_memo_number", "credit_memos", ["credit_memo_number"], unique=True)
    op.create_index("ix_credit_memos_type", "credit_memos", ["type"])
    op.create_index("ix_credit_memos_status", "credit_memos", ["status"])
    op.create_index("ix_credit_memos_vendor_id", "credit_memos", ["vendor_id"])
    op.create_index("ix_credit_memos_customer_id", "credit_memos", ["customer_id"])
    op.create_index("ix_credit_memos_created_at", "credit_memos", ["created_at"])

    op.create_table(
        "credit_memo_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "credit_memo_id", sa.String(20),
            sa.ForeignKey("credit_memos.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("product_id", sa.String(20), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(15, 2), nullable=False),
        sa.Column("tax_percent", sa.Numeric(5, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("total", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index("ix_credit_memo_items_credit_memo_id", "credit_memo_items", ["credit_memo_id"])


def downgrade() -> None:
    for table in (
        "credit_memo_items",
        "credit_memos",
        "shipment_items",
        "shipments",
        "pos_sale_items",
        "pos_sales",
        "invoice_items",
        "invoices",
        "order_status_history",
        "order_items",
        "orders",
        "receipts",
        "customers",
        "expenses",
        "expense_categories",
        "ledger_entries",
        "payments",
        "purchase_order_items",
        "purchase_orders",
        "stock_movements",
        "products",
        "vendors",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (
        credit_memo_status, credit_memo_reason, credit_memo_type, shipment_item_status, shipment_status,
        shipment_type, sale_type, pos_payment_method, invoice_payment_status, invoice_type,
        order_payment_status, order_status,
        recurrence_type, expense_mode, category_type, party_type, reference_type,
        account_type, payment_method, payment_type, po_status, movement_type, vendor_status,
    ):
        enum_type.drop(bind, checkfirst=True)
