from backoffice.core.database import SessionLocal, Base, engine
from backoffice.models.customer import Customer, Receipt
from backoffice.models.expense import Expense, ExpenseCategory, ExpenseCategoryType, ExpensePaymentMode, RecurrenceType
from backoffice.models.ledger import LedgerEntry
from backoffice.models.payment import Payment, PaymentMethod, PaymentType
from backoffice.models.product import Product, StockMovement
from backoffice.models.purchase_order import PurchaseOrder, PurchaseOrderItem
from backoffice.models.vendor import Vendor
from backoffice.services import (
    customer_service,
    expense_category_service,
    expense_service,
    payment_service,
    product_service,
    receipt_service,
    user_service,
    vendor_service,
)
from backoffice.services.purchase_order_service import PurchaseOrderService

from faker import Faker
from decimal import Decimal
from datetime import date, timedelta
import random

fake = Faker()

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin1234"

CATEGORIES = [
    ("Rent", ExpenseCategoryType.FIXED, "#ef4444"),
    ("Salaries", ExpenseCategoryType.FIXED, "#f59e0b"),
    ("Utilities", ExpenseCategoryType.VARIABLE, "#3b82f6"),
    ("Shipping", ExpenseCategoryType.VARIABLE, "#10b981"),
    ("Marketing", ExpenseCategoryType.VARIABLE, "#8b5cf6"),
]


def money(low, high):
    return Decimal(str(round(random.uniform(low, high), 2)))


def clear(db):
    print("🔄 Clearing existing data...")
    for model in (
        LedgerEntry, Receipt, Customer, Expense, ExpenseCategory, Payment,
        StockMovement, PurchaseOrderItem, PurchaseOrder, Product, Vendor,
    ):
        db.query(model).delete()
    db.commit()
    print("✅ Data cleared.")


def seed(db):
    admin = user_service.get_user_by_email(db, ADMIN_EMAIL)
    if not admin:
        admin = user_service.create_user(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Admin")
        print(f"✅ Admin user created: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")

    print("🔄 Creating vendors and products...")
    vendors = []
    for _ in range(random.randint(8, 12)):
        vendors.append(vendor_service.create_vendor(
            db,
            name=fake.company(),
            contact_name=fake.name(),
            phone=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            email=fake.company_email(),
            address=fake.street_address(),
            city=fake.city(),
            state=fake.state_abbr(),
            zip=fake.postcode(),
            payment_terms_days=random.choice([15, 30, 45]),
            credit_limit=money(5000, 50000),
        ))

    products = []
    for _ in range(random.randint(25, 35)):
        cost = money(2, 150)
        products.append(product_service.create_product(
            db,
            name=fake.catch_phrase(),
            sku=fake.unique.bothify("SKU-####-??").upper(),
            barcode=fake.ean13(),
            price=(cost * Decimal("1.6")).quantize(Decimal("0.01")),
            cost_price=cost,
            stock_quantity=0,
            low_stock_threshold=random.randint(3, 10),
            vendor_id=random.choice(vendors).id,
        ))
    print(f"✅ Seeded {len(vendors)} vendors")
    print(f"✅ Seeded {len(products)} products")

    print("🔄 Creating purchase orders...")
    service = PurchaseOrderService(db)
    po_count = 0
    for _ in range(random.randint(15, 25)):
        vendor = random.choice(vendors)
        chosen = random.sample(products, random.randint(1, 4))
        po = service.create_purchase_order(
            vendor_id=vendor.id,
            items=[
                {
                    "product_id": p.id,
                    "quantity_ordered": random.randint(5, 50),
                    "unit_cost": p.cost_price,
                    "tax_rate": random.choice([0, 5, 8.25, 10]),
                    "shipping": random.choice([0, 0, money(5, 40)]),
                }
                for p in chosen
            ],
            expected_date=date.today() + timedelta(days=random.randint(3, 30)),
            notes=fake.sentence(),
            created_by_id=admin.id,
        )
        po_count += 1

        outcome = random.random()
        if outcome < 0.2:
            continue
        if outcome < 0.3:
            service.cancel_purchase_order(po.id)
            continue

        service.send_purchase_order(po.id)
        if outcome < 0.45:
            continue

        partial = outcome < 0.6
        lines = [
            {
                "item_id": item.id,
                "quantity_received": item.quantity_ordered // 2 if partial else item.quantity_ordered,
            }
            for item in po.items
        ]
        po = service.receive_purchase_order(po.id, lines, created_by_id=admin.id)

        if po.status.value == "received" and random.random() < 0.7:
            amount = po.total_amount if random.random() < 0.5 else (po.total_amount / 2).quantize(Decimal("0.01"))
            service.add_payment(
                po.id, amount, random.choice(list(PaymentMethod)),
                reference=fake.bothify("CHK-#####"), created_by_id=admin.id,
            )
    print(f"✅ Seeded {po_count} purchase orders")

    print("🔄 Creating sales payments...")
    for _ in range(random.randint(30, 50)):
        payment_service.create_payment(
            db,
            random.choice([PaymentType.sale] * 9 + [PaymentType.refund]),
            money(10, 800),
            random.choice([PaymentMethod.cash, PaymentMethod.card, PaymentMethod.digital]),
            order_ref=fake.bothify("ORD-######"),
            created_by_id=admin.id,
        )
    print("✅ Seeded sales payments")

    print("🔄 Creating expense categories and expenses...")
    categories = [
        expense_category_service.create_expense_category(db, name, category_type, color)
        for name, category_type, color in CATEGORIES
    ]
    for category in categories:
        recurring = category.type == ExpenseCategoryType.FIXED
        expense_service.create_expense(
            db,
            amount=money(800, 4000) if recurring else money(20, 600),
            expense_category_id=category.id,
            payment_mode=random.choice(list(ExpensePaymentMode)),
            expense_date=date.today() - timedelta(days=random.randint(28, 40)),
            description=f"{category.name} - {fake.word()}",
            vendor_name=fake.company(),
            is_recurring=recurring,
            recurrence_type=RecurrenceType.MONTHLY if recurring else RecurrenceType.NONE,
            created_by_id=admin.id,
        )
    for _ in range(random.randint(20, 40)):
        category = random.choice(categories)
        expense_service.create_expense(
            db,
            amount=money(15, 900),
            expense_category_id=category.id,
            payment_mode=random.choice(list(ExpensePaymentMode)),
            expense_date=date.today() - timedelta(days=random.randint(0, 300)),
            description=fake.sentence(nb_words=4),
            vendor_name=fake.company(),
            created_by_id=admin.id,
        )
    created = expense_service.process_recurring_expenses(db, created_by_id=admin.id)
    print(f"✅ Seeded expenses ({len(created)} recurring copies for this month)")

    print("🔄 Creating customers and receipts...")
    customers = []
    for _ in range(random.randint(15, 25)):
        customers.append(customer_service.create_customer(
            db,
            name=fake.name(),
            company=fake.company() if random.random() < 0.4 else None,
            phone=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            email=fake.unique.email(),
            address=fake.street_address(),
            city=fake.city(),
            state=fake.state_abbr(),
            zip=fake.postcode(),
        ))
    for _ in range(random.randint(30, 60)):
        customer = random.choice(customers)
        receipt_service.create_receipt(
            db,
            customer_id=customer.id,
            trx_date=date.today() - timedelta(days=random.randint(0, 200)),
            so_id=fake.bothify("SO-#####"),
            invoice_num=fake.bothify("INV-#####"),
            pmt_mode=random.choice(["Credit Card", "Cash", "Check", "ACH"]),
            amount_received=money(25, 1500),
        )
    print(f"✅ Seeded {len(customers)} customers with receipts")


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        clear(db)
        seed(db)
        print("🎉 Seeding complete.")
    except Exception as e:
        db.rollback()
        print(f"❌ Seeding failed: {e}")
        raise
    finally:
        db.close()
