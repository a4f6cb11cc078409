# lendflow/models/loan_model.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Numeric,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from lendflow.utils.database import Base
from lendflow.utils.ids import generate_id, utcnow

LOAN_ACTIVE = "ACTIVE"
LOAN_PAID_OFF = "PAID_OFF"
LOAN_STATUSES = (LOAN_ACTIVE, LOAN_PAID_OFF)


class Loan(Base):
    __tablename__ = "loans"

    __table_args__ = (
        Index("ix_loans_status", "status"),
        Index("ix_loans_customer_status", "customer_id", "status"),
        CheckConstraint("remaining_balance >= 0", name="ck_loans_balance_non_negative"),
        CheckConstraint("remaining_balance <= total_amount", name="ck_loans_balance_within_total"),
        CheckConstraint(
            "status in (%s)" % ", ".join(f"'{s}'" for s in LOAN_STATUSES),
            name="ck_loans_status",
        ),
    )

    loan_id = Column(String(20), primary_key=True, default=lambda: generate_id("LOAN"))

    customer_id = Column(
        String(20),
        ForeignKey("customers.customer_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount = Column(Numeric(14, 2), nullable=False)          # principal financed
    interest_rate = Column(Numeric(7, 4), nullable=False)    # annual, percent
    term = Column(Integer, nullable=False)                   # months

    # fixed at origination, never recomputed
    monthly_payment = Column(Numeric(14, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)

    remaining_balance = Column(Numeric(14, 2), nullable=False)

    # ACTIVE / PAID_OFF
    status = Column(String(20), nullable=False, default=LOAN_ACTIVE)

    start_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # optimistic concurrency: every UPDATE checks and bumps this
    version = Column(Integer, nullable=False)

    created_on = Column(DateTime(timezone=True), server_default=func.now())
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="loans")
    payments = relationship(
        "LoanPayment",
        back_populates="loan",
        order_by="LoanPayment.payment_date.desc()",
        passive_deletes=True,
    )

    __mapper_args__ = {"version_id_col": version}
