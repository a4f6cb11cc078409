import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from lendflow.core.exceptions import ConflictError
from lendflow.models.customer_model import Customer
from lendflow.models.loan_model import Loan, LOAN_ACTIVE
from lendflow.utils.loan_calculations import money, quote_loan

logger = logging.getLogger(__name__)

SAMPLE_CUSTOMERS = [
    {
        "name": "Raj Patel",
        "email": "raj.patel@example.com",
        "phone": "+91-9876543210",
        "address": "B-204, Sunshine Apartments, Andheri West, Mumbai, Maharashtra - 400058",
        # amount, annual rate %, months
        "loan": (500000, Decimal("8.5"), 60),
    },
    {
        "name": "Priya Sharma",
        "email": "priya.sharma@example.com",
        "phone": "+91-9123456789",
        "address": "A-45, Green Park, New Delhi, Delhi - 110016",
        "loan": (1000000, Decimal("9.0"), 84),
    },
    {
        "name": "Arjun Kumar",
        "email": "arjun.kumar@example.com",
        "phone": "+91-8765432109",
        "address": "C-301, Tech City, Electronic City, Bangalore, Karnataka - 560100",
        "loan": (250000, Decimal("7.5"), 36),
    },
]


def init_seed(db: Session) -> dict:
    """Insert the sample customers with one ACTIVE loan each, in one transaction."""
    emails = [c["email"] for c in SAMPLE_CUSTOMERS]
    existing = db.query(Customer.email).filter(Customer.email.in_(emails)).all()
    if existing:
        raise ConflictError(
            "Sample data already present", {"emails": sorted(e for (e,) in existing)}
        )

    customers, loans = [], []
    for sample in SAMPLE_CUSTOMERS:
        customer = Customer(
            name=sample["name"],
            email=sample["email"],
            phone=sample["phone"],
            address=sample["address"],
        )
        db.add(customer)
        db.flush()
        customers.append(customer)

        amount, rate, term = sample["loan"]
        quote = quote_loan(amount, rate, term)
        loan = Loan(
            customer_id=customer.customer_id,
            amount=money(amount),
            interest_rate=rate,
            term=term,
            monthly_payment=quote.monthly_payment,
            total_amount=quote.total_amount,
            remaining_balance=quote.total_amount,
            status=LOAN_ACTIVE,
        )
        db.add(loan)
        loans.append(loan)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Seeded %d customers and %d loans", len(customers), len(loans))
    return {"customers": len(customers), "loans": len(loans)}
