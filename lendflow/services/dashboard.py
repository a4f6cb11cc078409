from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from lendflow.models.customer_model import Customer
from lendflow.models.loan_model import Loan, LOAN_ACTIVE, LOAN_PAID_OFF
from lendflow.models.loan_payment_model import LoanPayment, PAYMENT_COMPLETED
from lendflow.utils.loan_calculations import money


def dashboard_stats(db: Session) -> dict:
    """Portfolio totals; nothing is cached, every call hits the database."""
    total_customers = db.query(func.count(Customer.customer_id)).scalar()

    status_counts = dict(
        db.query(Loan.status, func.count(Loan.loan_id)).group_by(Loan.status).all()
    )

    total_loan_amount = db.query(func.coalesce(func.sum(Loan.amount), 0)).scalar()
    total_outstanding = (
        db.query(func.coalesce(func.sum(Loan.remaining_balance), 0))
        .filter(Loan.status == LOAN_ACTIVE)
        .scalar()
    )
    total_collected = (
        db.query(func.coalesce(func.sum(LoanPayment.amount), 0))
        .filter(LoanPayment.status == PAYMENT_COMPLETED)
        .scalar()
    )

    return {
        "total_customers": int(total_customers or 0),
        "total_loans": int(sum(status_counts.values())),
        "active_loans": int(status_counts.get(LOAN_ACTIVE, 0)),
        "paid_off_loans": int(status_counts.get(LOAN_PAID_OFF, 0)),
        "total_loan_amount": money(total_loan_amount),
        "total_collected": money(total_collected),
        "total_outstanding": money(total_outstanding),
    }


def recent_loans(db: Session, limit: int = 5) -> list[Loan]:
    return (
        db.query(Loan)
        .options(joinedload(Loan.customer))
        .order_by(Loan.start_date.desc())
        .limit(limit)
        .all()
    )


def recent_payments(db: Session, limit: int = 5) -> list[LoanPayment]:
    return (
        db.query(LoanPayment)
        .filter(LoanPayment.status == PAYMENT_COMPLETED)
        .order_by(LoanPayment.payment_date.desc())
        .limit(limit)
        .all()
    )
