from sqlalchemy import (
    Column, String, DateTime, Numeric, ForeignKey, Index, CheckConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from lendflow.utils.database import Base
from lendflow.utils.ids import generate_id, utcnow

PAYMENT_TYPES = ("EMI", "LUMP_SUM")
PAYMENT_METHODS = ("cash", "check", "bank_transfer", "credit_card", "debit_card")

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_COMPLETED, PAYMENT_FAILED)


class LoanPayment(Base):
    __tablename__ = "loan_payments"
    __table_args__ = (
        Index("ix_loan_payments_loan_date", "loan_id", "payment_date"),
        CheckConstraint("amount > 0", name="ck_loan_payments_amount_positive"),
        CheckConstraint(
            "status in (%s)" % ", ".join(f"'{s}'" for s in PAYMENT_STATUSES),
            name="ck_loan_payments_status",
        ),
    )

    payment_id = Column(String(20), primary_key=True, default=lambda: generate_id("PAY"))

    loan_id = Column(String(20), ForeignKey("loans.loan_id", ondelete="RESTRICT"), nullable=False, index=True)

    amount = Column(Numeric(14, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    payment_type = Column(String(20), nullable=False, default="EMI")
    payment_method = Column(String(20), nullable=False, default="bank_transfer")
    status = Column(String(20), nullable=False, default=PAYMENT_COMPLETED)

    reference = Column(String(100), nullable=True)

    created_on = Column(DateTime(timezone=True), server_default=func.now())

    loan = relationship("Loan", back_populates="payments")
