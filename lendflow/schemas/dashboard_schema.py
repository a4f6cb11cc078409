from pydantic import BaseModel

from lendflow.schemas.loan_schema import LoanListOut, PaymentOut


class DashboardStatsOut(BaseModel):
    total_customers: int = 0
    total_loans: int = 0
    active_loans: int = 0
    paid_off_loans: int = 0
    total_loan_amount: float = 0
    total_collected: float = 0
    total_outstanding: float = 0


class DashboardOut(BaseModel):
    stats: DashboardStatsOut
    recent_loans: list[LoanListOut]
    recent_payments: list[PaymentOut]
