from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lendflow.utils.database import get_db
from lendflow.services.dashboard import dashboard_stats, recent_loans, recent_payments
from lendflow.schemas.dashboard_schema import DashboardOut, DashboardStatsOut
from lendflow.schemas.loan_schema import LoanListOut, PaymentOut

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardOut)
def dashboard(db: Session = Depends(get_db)):
    stats = dashboard_stats(db)
    return DashboardOut(
        stats=DashboardStatsOut(
            total_customers=stats["total_customers"],
            total_loans=stats["total_loans"],
            active_loans=stats["active_loans"],
            paid_off_loans=stats["paid_off_loans"],
            total_loan_amount=float(stats["total_loan_amount"]),
            total_collected=float(stats["total_collected"]),
            total_outstanding=float(stats["total_outstanding"]),
        ),
        recent_loans=[LoanListOut.model_validate(loan) for loan in recent_loans(db, limit=5)],
        recent_payments=[PaymentOut.model_validate(p) for p in recent_payments(db, limit=5)],
    )
