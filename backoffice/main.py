from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backoffice.common.error_handlers import register_error_handlers
from backoffice.core.config import settings
from backoffice.api.v1 import (
    auth,
    credit_memo,
    customer,
    expense,
    expense_category,
    invoice,
    ledger,
    order,
    payment,
    pos,
    product,
    purchase_order,
    receipt,
    report,
    shipment,
    vendor,
)

app = FastAPI(title="Back Office", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(vendor.router, prefix="/api/v1/vendors", tags=["vendors"])
app.include_router(product.router, prefix="/api/v1/products", tags=["products"])
app.include_router(
    purchase_order.router, prefix="/api/v1/purchase-orders", tags=["purchase-orders"])
app.include_router(payment.router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(ledger.router, prefix="/api/v1/ledger", tags=["ledger"])
app.include_router(
    expense_category.router, prefix="/api/v1/expense-categories", tags=["expense-categories"])
app.include_router(expense.router, prefix="/api/v1/expenses", tags=["expenses"])
app.include_router(customer.router, prefix="/api/v1/customers", tags=["customers"])
app.include_router(receipt.router, prefix="/api/v1/receipts", tags=["receipts"])
app.include_router(report.router, prefix="/api/v1/reports", tags=["reports"])
app.include_router(order.router, prefix="/api/v1/orders", tags=["orders"])
app.include_router(invoice.router, prefix="/api/v1/invoices", tags=["invoices"])
app.include_router(pos.router, prefix="/api/v1/pos", tags=["pos"])
app.include_router(shipment.router, prefix="/api/v1/shipments", tags=["shipments"])
app.include_router(credit_memo.router, prefix="/api/v1/credit-memos", tags=["credit-memos"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the Back Office APIs!"}
