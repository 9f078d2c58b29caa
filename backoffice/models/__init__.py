# backoffice/models/__init__.py
from .user import User
from .vendor import Vendor, VendorStatus
from .product import Product, StockMovement, MovementType
from .purchase_order import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from .payment import Payment, PaymentType, PaymentMethod
from .ledger import LedgerEntry, LedgerAccountType, LedgerReferenceType, PartyType
from .expense import ExpenseCategory, Expense, ExpenseCategoryType, ExpensePaymentMode, RecurrenceType
from .customer import Customer, Receipt
from .order import Order, OrderItem, OrderStatusHistory, OrderStatus, OrderPaymentStatus
from .invoice import Invoice, InvoiceItem, InvoiceType, InvoicePaymentStatus
from .pos import POSSale, POSSaleItem, POSPaymentMethod, SaleType
from .shipment import Shipment, ShipmentItem, ShipmentType, ShipmentStatus, ShipmentItemStatus
from .credit_memo import CreditMemo, CreditMemoItem, CreditMemoType, CreditMemoReason, CreditMemoStatus
