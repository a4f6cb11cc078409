"""Loan origination and payment application.

A loan starts ACTIVE with ``remaining_balance == total_amount`` and is only
ever changed by :func:`apply_payment`. Every accepted payment inserts exactly
one ``LoanPayment`` and updates exactly one ``Loan`` in the same transaction;
a rejected payment writes nothing. The balance never goes below zero and the
loan becomes PAID_OFF exactly when it reaches zero, after which no further
payment is accepted.

Payments on one loan are serialized through ``loan_locks`` inside the process
and through a row lock plus the loan's version counter across processes.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from lendflow.core.config import LOAN_LOCK_TIMEOUT
from lendflow.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    LendFlowError,
    NotFoundError,
)
from lendflow.models.customer_model import Customer
from lendflow.models.loan_model import Loan, LOAN_ACTIVE, LOAN_PAID_OFF
from lendflow.models.loan_payment_model import (
    LoanPayment,
    PAYMENT_COMPLETED,
    PAYMENT_METHODS,
    PAYMENT_TYPES,
)
from lendflow.services.store import Store
from lendflow.utils.loan_calculations import as_number, as_term_months, money, quote_loan
from lendflow.utils.locks import KeyedLock, loan_locks

logger = logging.getLogger(__name__)

MIN_PRINCIPAL = Decimal("1000")
MAX_PRINCIPAL = Decimal("100000000")
MIN_RATE = Decimal("0.1")
MAX_RATE = Decimal("50")
MIN_TERM = 1
MAX_TERM = 360

REFERENCE_MAX_LENGTH = 100

# scale of loans.interest_rate
RATE_PLACES = Decimal("0.0001")


class PaymentOutcome(NamedTuple):
    payment: LoanPayment
    loan: Loan


def validate_loan_terms(amount, interest_rate, term) -> tuple[Decimal, Decimal, int]:
    """Domain bounds for a new loan.

    Returns the values at the precision they are stored with, so the EMI is
    priced from exactly the terms the schedule is later rebuilt from.
    """
    principal = as_number(amount, "amount")
    rate = as_number(interest_rate, "interest_rate")
    months = as_term_months(term)

    if not MIN_PRINCIPAL <= principal <= MAX_PRINCIPAL:
        raise InvalidArgumentError(
            f"Loan amount must be between {MIN_PRINCIPAL:,} and {MAX_PRINCIPAL:,}",
            {"amount": str(principal)},
        )
    if not MIN_RATE <= rate <= MAX_RATE:
        raise InvalidArgumentError(
            f"Interest rate must be between {MIN_RATE}% and {MAX_RATE}%",
            {"interest_rate": str(rate)},
        )
    if not MIN_TERM <= months <= MAX_TERM:
        raise InvalidArgumentError(
            f"Loan term must be between {MIN_TERM} and {MAX_TERM} months",
            {"term": months},
        )
    return money(principal), rate.quantize(RATE_PLACES, rounding=ROUND_HALF_UP), months


def originate_loan(db: Session, customer_id: str, amount, interest_rate, term) -> Loan:
    principal, rate, months = validate_loan_terms(amount, interest_rate, term)

    store = Store(db)
    if store.find(Customer, customer_id) is None:
        raise NotFoundError("Customer", customer_id)

    quote = quote_loan(principal, rate, months)

    loan = Loan(
        customer_id=customer_id,
        amount=principal,
        interest_rate=rate,
        term=months,
        monthly_payment=quote.monthly_payment,
        total_amount=quote.total_amount,
        remaining_balance=quote.total_amount,
        status=LOAN_ACTIVE,
    )

    try:
        store.save(loan)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to persist loan for customer %s", customer_id)
        raise

    db.refresh(loan)
    logger.info(
        "Loan %s created for %s: principal=%s rate=%s%% term=%s emi=%s total=%s",
        loan.loan_id, customer_id, loan.amount, rate, months, loan.monthly_payment, loan.total_amount,
    )
    return loan


def _normalize_payment(amount, payment_type: str, payment_method: str, reference: Optional[str]):
    pay_amount = money(as_number(amount, "amount"))
    if pay_amount <= 0:
        raise InvalidArgumentError("Payment amount must be greater than 0", {"amount": str(pay_amount)})

    ptype = (payment_type or "").strip().upper()
    if ptype not in PAYMENT_TYPES:
        raise InvalidArgumentError(
            f"Payment type must be one of {', '.join(PAYMENT_TYPES)}", {"payment_type": payment_type}
        )

    method = (payment_method or "").strip().lower()
    if method not in PAYMENT_METHODS:
        raise InvalidArgumentError(
            f"Payment method must be one of {', '.join(PAYMENT_METHODS)}", {"payment_method": payment_method}
        )

    ref = reference.strip() if reference else None
    if ref and len(ref) > REFERENCE_MAX_LENGTH:
        raise InvalidArgumentError(f"Reference cannot exceed {REFERENCE_MAX_LENGTH} characters")

    return pay_amount, ptype, method, ref or None


def apply_payment(
        db: Session,
        loan_id: str,
        amount,
        payment_type: str = "EMI",
        payment_method: str = "bank_transfer",
        reference: Optional[str] = None,
        payment_date: Optional[datetime] = None,
        locks: KeyedLock = loan_locks,
        lock_timeout: float = LOAN_LOCK_TIMEOUT,
) -> PaymentOutcome:
    with locks.hold(loan_id, timeout=lock_timeout):
        store = Store(db)
        try:
            loan = store.find(Loan, loan_id, for_update=True)
            if loan is None:
                raise NotFoundError("Loan", loan_id)

            if loan.status == LOAN_PAID_OFF:
                raise InvalidStateError(
                    "Cannot add payment to a loan that is already paid off",
                    {"loan_id": loan_id},
                )

            pay_amount, ptype, method, ref = _normalize_payment(amount, payment_type, payment_method, reference)

            balance = money(loan.remaining_balance)
            if pay_amount > balance:
                raise InvalidArgumentError(
                    f"Payment amount ({pay_amount}) exceeds remaining balance ({balance})",
                    {"amount": str(pay_amount), "remaining_balance": str(balance)},
                )

            new_balance = money(balance - pay_amount)

            payment = LoanPayment(
                loan_id=loan_id,
                amount=pay_amount,
                payment_type=ptype,
                payment_method=method,
                status=PAYMENT_COMPLETED,
                reference=ref,
            )
            if payment_date is not None:
                payment.payment_date = payment_date
            store.save(payment)

            if new_balance <= 0:
                loan.remaining_balance = money(0)
                loan.status = LOAN_PAID_OFF
            else:
                loan.remaining_balance = new_balance

            # UPDATE ... WHERE version = :seen; a concurrent writer makes this fail
            db.flush()
            db.commit()
            db.refresh(loan)
            db.refresh(payment)

        except StaleDataError as e:
            db.rollback()
            logger.warning("Concurrent update on loan %s, payment discarded", loan_id)
            raise ConflictError(
                "Loan was modified by another request, try again", {"loan_id": loan_id}
            ) from e
        except LendFlowError as e:
            db.rollback()
            logger.warning("Payment on %s rejected: %s", loan_id, e)
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to record payment on loan %s", loan_id)
            raise

    logger.info(
        "Payment %s of %s applied to %s: balance=%s status=%s",
        payment.payment_id, pay_amount, loan_id, loan.remaining_balance, loan.status,
    )
    return PaymentOutcome(payment=payment, loan=loan)


def loan_progress(loan: Loan) -> tuple[Decimal, int]:
    """Amount repaid so far and the repaid share of ``total_amount`` in whole percent."""
    total = money(loan.total_amount)
    if total <= 0:
        return money(0), 0
    paid = money(total - money(loan.remaining_balance))
    percent = (paid / total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return paid, int(percent)
