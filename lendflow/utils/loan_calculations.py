from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import NamedTuple

from lendflow.core.exceptions import InvalidArgumentError

CENT = Decimal("0.01")


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(CENT, rounding=ROUND_HALF_UP)


class LoanQuote(NamedTuple):
    monthly_payment: Decimal
    total_amount: Decimal
    total_interest: Decimal


class ScheduleRow(NamedTuple):
    installment_no: int
    payment: Decimal
    principal_component: Decimal
    interest_component: Decimal
    balance: Decimal


def as_number(value, name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be a number", {name: value})
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidArgumentError(f"{name} must be a number", {name: value})
    if not d.is_finite():
        raise InvalidArgumentError(f"{name} must be a finite number", {name: str(value)})
    return d


def as_term_months(value) -> int:
    n = as_number(value, "term_months")
    if n != n.to_integral_value():
        raise InvalidArgumentError("term_months must be a whole number of months", {"term_months": str(value)})
    if n <= 0:
        raise InvalidArgumentError("term_months must be at least 1", {"term_months": int(n)})
    return int(n)


def monthly_rate(annual_rate_percent) -> Decimal:
    """r% per year -> fraction per month."""
    rate = as_number(annual_rate_percent, "annual_rate_percent")
    with localcontext() as ctx:
        ctx.prec = 34
        return rate / Decimal(100) / Decimal(12)


def calculate_monthly_payment(principal, annual_rate_percent, term_months) -> Decimal:
    """
    Fixed EMI that fully amortizes `principal` over `term_months`:

      m   = rate% / 100 / 12
      EMI = P * m * (1+m)^n / ((1+m)^n - 1)      (m > 0)
      EMI = P / n                                (m == 0)

    Example:
      principal=500000, rate=8.5, term=60 => 10258.27
    """
    p = as_number(principal, "principal")
    rate = as_number(annual_rate_percent, "annual_rate_percent")
    n = as_term_months(term_months)

    if p <= 0:
        raise InvalidArgumentError("principal must be greater than 0", {"principal": str(p)})
    if rate < 0:
        raise InvalidArgumentError("annual_rate_percent cannot be negative", {"annual_rate_percent": str(rate)})

    m = monthly_rate(rate)
    with localcontext() as ctx:
        ctx.prec = 34
        if m == 0:
            payment = p / n
        else:
            growth = (1 + m) ** n
            payment = p * m * growth / (growth - 1)

    emi = money(payment)
    if emi <= 0:
        raise InvalidArgumentError(
            "principal is too small to amortize over this term",
            {"principal": str(p), "term_months": n},
        )
    return emi


def calculate_total_amount(monthly_payment, term_months) -> Decimal:
    return money(money(monthly_payment) * as_term_months(term_months))


def quote_loan(principal, annual_rate_percent, term_months) -> LoanQuote:
    """EMI preview: monthly payment, total repaid and the interest part of it."""
    emi = calculate_monthly_payment(principal, annual_rate_percent, term_months)
    total = calculate_total_amount(emi, term_months)
    return LoanQuote(
        monthly_payment=emi,
        total_amount=total,
        total_interest=money(total - money(principal)),
    )


def build_amortization_schedule(
        principal,
        annual_rate_percent,
        term_months,
        monthly_payment=None,
) -> list[ScheduleRow]:
    """
    Month-by-month split of each EMI into interest and principal.

    interest_n  = balance_(n-1) * m   (rounded to cents)
    principal_n = EMI - interest_n

    The final row pays whatever principal is left, so the closing balance
    is exactly 0.00 and the principal components add up to `principal`.
    """
    balance = money(principal)
    n = as_term_months(term_months)
    emi = money(monthly_payment) if monthly_payment is not None else calculate_monthly_payment(
        principal, annual_rate_percent, n
    )
    m = monthly_rate(annual_rate_percent)

    rows: list[ScheduleRow] = []
    for installment_no in range(1, n + 1):
        interest = money(balance * m)
        principal_part = money(emi - interest)

        if installment_no == n or principal_part >= balance:
            principal_part = balance
            payment = money(principal_part + interest)
        else:
            payment = emi

        balance = money(balance - principal_part)
        rows.append(
            ScheduleRow(
                installment_no=installment_no,
                payment=payment,
                principal_component=principal_part,
                interest_component=interest,
                balance=balance,
            )
        )
        if balance == 0:
            break

    return rows
