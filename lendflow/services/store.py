from typing import Optional

from sqlalchemy.orm import Session, joinedload

from lendflow.models.customer_model import Customer
from lendflow.models.loan_model import Loan
from lendflow.models.loan_payment_model import LoanPayment

_PRIMARY_KEYS = {
    Customer: Customer.customer_id,
    Loan: Loan.loan_id,
    LoanPayment: LoanPayment.payment_id,
}


class Store:
    """Persistence operations the ledger needs, over an injected Session."""

    def __init__(self, db: Session):
        self.db = db

    def find(self, model, entity_id: str, for_update: bool = False):
        q = self.db.query(model).filter(_PRIMARY_KEYS[model] == entity_id)
        if for_update:
            # row lock on PostgreSQL; always re-read, never trust the identity map
            q = q.with_for_update().populate_existing()
        return q.first()

    def save(self, entity):
        self.db.add(entity)
        self.db.flush()
        return entity

    def find_customer_by_email(self, email: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.email == email.strip().lower()).first()

    def list_customers(self) -> list[Customer]:
        return self.db.query(Customer).order_by(Customer.created_on.desc()).all()

    def list_loans(self, status: Optional[str] = None, customer_id: Optional[str] = None) -> list[Loan]:
        q = self.db.query(Loan).options(joinedload(Loan.customer))
        if status:
            q = q.filter(Loan.status == status.upper())
        if customer_id:
            q = q.filter(Loan.customer_id == customer_id)
        return q.order_by(Loan.start_date.desc()).all()

    def list_by_status(self, status: str) -> list[Loan]:
        return self.list_loans(status=status)

    def list_by_loan(self, loan_id: str) -> list[LoanPayment]:
        return (
            self.db.query(LoanPayment)
            .filter(LoanPayment.loan_id == loan_id)
            .order_by(LoanPayment.payment_date.desc())
            .all()
        )
