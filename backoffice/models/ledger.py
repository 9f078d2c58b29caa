import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from backoffice.core.database import Base


class LedgerAccountType(str, enum.Enum):
    VENDOR = "VENDOR"
    CUSTOMER = "CUSTOMER"
    PURCHASE = "PURCHASE"
    SALES = "SALES"
    CASH = "CASH"
    BANK = "BANK"
    CARD = "CARD"
    UPI = "UPI"
    EXPENSE = "EXPENSE"
    PURCHASE_RETURN = "PURCHASE_RETURN"
    SALES_RETURN = "SALES_RETURN"


class LedgerReferenceType(str, enum.Enum):
    PURCHASE_ORDER = "PURCHASE_ORDER"
    PAYMENT = "PAYMENT"
    RECEIPT = "RECEIPT"
    EXPENSE = "EXPENSE"
    CREDIT_MEMO = "CREDIT_MEMO"


class PartyType(str, enum.Enum):
    VENDOR = "VENDOR"
    CUSTOMER = "CUSTOMER"


class LedgerEntry(Base):
    """
    One side of a double entry. Party balances are sum(debit) - sum(credit)
    over the rows carrying that party; for vendors a positive balance is a payable.
    """
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    account_type = Column(Enum(LedgerAccountType), nullable=False, index=True)
    party_type = Column(Enum(PartyType), nullable=True)
    party_id = Column(String(20), nullable=True, index=True)

    debit = Column(Numeric(15, 2), nullable=False, default=0)
    credit = Column(Numeric(15, 2), nullable=False, default=0)

    reference_type = Column(Enum(LedgerReferenceType), nullable=False)
    reference_id = Column(String(30), nullable=False, index=True)
    description = Column(String(255), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
