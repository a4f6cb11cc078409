import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from starlette import status

from lendflow.core.exceptions import LendFlowError
from lendflow.utils.database import get_db
from lendflow.utils.http_errors import http_error
from lendflow.utils.loan_calculations import build_amortization_schedule, quote_loan
from lendflow.models.loan_model import Loan
from lendflow.services.store import Store
from lendflow.services.loan_ledger import apply_payment, loan_progress, originate_loan

from lendflow.schemas.customer_schema import CustomerDetail
from lendflow.schemas.loan_schema import (
    LoanCreate,
    LoanOut,
    LoanListOut,
    LoanDetailOut,
    LoanQuoteIn,
    LoanQuoteOut,
    ScheduleRowOut,
    PaymentCreate,
    PaymentOut,
    PaymentResult,
    LoanBalanceOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/loans", tags=["Loans"])


def get_loan_or_404(db: Session, loan_id: str) -> Loan:
    loan = Store(db).find(Loan, loan_id)
    if not loan:
        raise HTTPException(404, "Loan not found")
    return loan


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("", response_model=list[LoanListOut])
def list_loans(
        status: Optional[str] = Query(None),
        customer_id: Optional[str] = Query(None),
        db: Session = Depends(get_db),
):
    return Store(db).list_loans(status=status, customer_id=customer_id)


@router.post("", response_model=LoanOut, status_code=status.HTTP_201_CREATED)
def create_loan(payload: LoanCreate, db: Session = Depends(get_db)):
    try:
        return originate_loan(
            db,
            customer_id=payload.customer_id,
            amount=payload.amount,
            interest_rate=payload.interest_rate,
            term=payload.term,
        )
    except LendFlowError as e:
        raise http_error(e)


@router.post("/quote", response_model=LoanQuoteOut)
def loan_quote(payload: LoanQuoteIn):
    """EMI preview for the loan form; nothing is stored."""
    try:
        quote = quote_loan(payload.amount, payload.interest_rate, payload.term)
    except LendFlowError as e:
        raise http_error(e)

    return LoanQuoteOut(
        monthly_payment=float(quote.monthly_payment),
        total_amount=float(quote.total_amount),
        total_interest=float(quote.total_interest),
    )


# =================================================
# 🔹 DYNAMIC ROUTES (LAST)
# =================================================
@router.get("/{loan_id}", response_model=LoanDetailOut)
def get_loan(loan_id: str, db: Session = Depends(get_db)):
    loan = get_loan_or_404(db, loan_id)
    total_paid, progress = loan_progress(loan)

    return LoanDetailOut(
        **LoanOut.model_validate(loan).model_dump(),
        customer=CustomerDetail.model_validate(loan.customer) if loan.customer else None,
        total_paid=float(total_paid),
        progress_percent=progress,
    )


@router.get("/{loan_id}/schedule", response_model=list[ScheduleRowOut])
def get_schedule(loan_id: str, db: Session = Depends(get_db)):
    loan = get_loan_or_404(db, loan_id)
    rows = build_amortization_schedule(
        loan.amount, loan.interest_rate, loan.term, monthly_payment=loan.monthly_payment
    )
    return [
        ScheduleRowOut(
            installment_no=r.installment_no,
            payment=float(r.payment),
            principal_component=float(r.principal_component),
            interest_component=float(r.interest_component),
            balance=float(r.balance),
        )
        for r in rows
    ]


# =================================================
# ✅ PAYMENTS
# =================================================
@router.get("/{loan_id}/payments", response_model=list[PaymentOut])
def list_payments(loan_id: str, db: Session = Depends(get_db)):
    get_loan_or_404(db, loan_id)
    return Store(db).list_by_loan(loan_id)


@router.post("/{loan_id}/payments", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
def create_payment(loan_id: str, payload: PaymentCreate, db: Session = Depends(get_db)):
    try:
        outcome = apply_payment(
            db,
            loan_id=loan_id,
            amount=payload.amount,
            payment_type=payload.payment_type,
            payment_method=payload.payment_method,
            reference=payload.reference,
            payment_date=payload.payment_date,
        )
    except LendFlowError as e:
        raise http_error(e)

    return PaymentResult(
        payment=PaymentOut.model_validate(outcome.payment),
        loan=LoanBalanceOut.model_validate(outcome.loan),
    )
