from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, Literal

from lendflow.schemas.customer_schema import CustomerSummary, CustomerDetail


class LoanCreate(BaseModel):
    customer_id: str = Field(min_length=1)
    amount: float = Field(ge=1000, le=100000000)
    interest_rate: float = Field(ge=0.1, le=50)
    term: int = Field(ge=1, le=360)


class LoanQuoteIn(BaseModel):
    amount: float = Field(gt=0, le=100000000)
    interest_rate: float = Field(ge=0, le=50)
    term: int = Field(ge=1, le=360)


class LoanQuoteOut(BaseModel):
    monthly_payment: float
    total_amount: float
    total_interest: float


class LoanOut(BaseModel):
    loan_id: str
    customer_id: str

    amount: float
    interest_rate: float
    term: int

    monthly_payment: float
    total_amount: float
    remaining_balance: float

    status: str
    start_date: datetime

    class Config:
        from_attributes = True


class LoanListOut(LoanOut):
    customer: Optional[CustomerSummary] = None


class LoanDetailOut(LoanOut):
    customer: Optional[CustomerDetail] = None
    total_paid: float
    progress_percent: int


class ScheduleRowOut(BaseModel):
    installment_no: int
    payment: float
    principal_component: float
    interest_component: float
    balance: float


class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    payment_type: Literal["EMI", "LUMP_SUM"] = "EMI"
    payment_method: Literal["cash", "check", "bank_transfer", "credit_card", "debit_card"] = "bank_transfer"
    reference: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[datetime] = None

    @field_validator("payment_type", mode="before")
    def upper_type(cls, v):
        return str(v).strip().upper() if v is not None else v

    @field_validator("payment_method", mode="before")
    def lower_method(cls, v):
        return str(v).strip().lower() if v is not None else v

    @field_validator("reference", mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class PaymentOut(BaseModel):
    payment_id: str
    loan_id: str
    amount: float
    payment_date: datetime
    payment_type: str
    payment_method: str
    status: str
    reference: Optional[str] = None

    class Config:
        from_attributes = True


class LoanBalanceOut(BaseModel):
    loan_id: str
    remaining_balance: float
    status: str

    class Config:
        from_attributes = True


class PaymentResult(BaseModel):
    payment: PaymentOut
    loan: LoanBalanceOut
