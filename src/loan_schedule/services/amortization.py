"""
Amortization calculations for fixed-rate annuity loans.

Everything here is a pure function of its arguments. Money is Decimal and is
rounded to cents with banker's rounding.
"""
import logging
from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Decimal
from typing import List, NamedTuple, Union

from loan_schedule.models.installment import InstallmentRecord, to_decimal
from loan_schedule.models.loan_parameters import LoanParameters
from loan_schedule.utils.temporal_utils import add_months, due_day_in_month, shift_off_weekend

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")

__all__ = [
    'InstallmentBreakdown',
    'round_money',
    'monthly_payment',
    'first_installment_breakdown',
    'daily_interest',
    'previous_due_date',
    'next_due_date',
    'generate_annuity_schedule',
]


class InstallmentBreakdown(NamedTuple):
    """Split of one installment into its interest and principal parts."""
    interest_part: Decimal
    principal_part: Decimal


def round_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def _monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    return annual_rate_percent / 100 / 12


def monthly_payment(principal: Number, annual_rate_percent: Number, term_months: int) -> Decimal:
    """
    Calculate the fixed monthly installment of an annuity loan.

    Args:
        principal: Amount borrowed
        annual_rate_percent: Nominal yearly rate in percent (e.g. 6.28)
        term_months: Number of monthly installments

    Returns:
        The installment rounded to cents; 0 when principal or term is not positive
    """
    principal = to_decimal(principal)
    if principal <= 0 or term_months <= 0:
        return ZERO

    rate = _monthly_rate(to_decimal(annual_rate_percent))
    if rate == 0:
        return round_money(principal / term_months)

    denominator = 1 - (1 + rate) ** -term_months
    if denominator == 0:
        return round_money(principal / term_months)
    return round_money(principal * rate / denominator)


def first_installment_breakdown(principal: Number, annual_rate_percent: Number, term_months: int) -> InstallmentBreakdown:
    """
    Split the first installment into interest and principal.

    Returns:
        InstallmentBreakdown(interest_part, principal_part); both 0 when the
        payment is 0
    """
    payment = monthly_payment(principal, annual_rate_percent, term_months)
    if payment <= 0:
        return InstallmentBreakdown(ZERO, ZERO)

    interest = round_money(to_decimal(principal) * _monthly_rate(to_decimal(annual_rate_percent)))
    principal_part = max(ZERO, round_money(payment - interest))
    return InstallmentBreakdown(interest, principal_part)


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def daily_interest(
    principal: Number,
    annual_rate_percent: Number,
    from_date: Union[date, datetime],
    to_date: Union[date, datetime],
) -> Decimal:
    """
    Interest accrued between two dates on an actual/365 basis.

    Only whole calendar days count, so two moments on the same day accrue
    nothing.
    """
    principal = to_decimal(principal)
    rate = to_decimal(annual_rate_percent)
    if principal <= 0 or rate <= 0:
        return ZERO

    days = (_as_date(to_date) - _as_date(from_date)).days
    if days <= 0:
        return ZERO
    return round_money(principal * rate / 100 / 365 * days)


def previous_due_date(today: date, payment_day: int, start_date: date) -> date:
    """
    Find the most recent due date on or before today.

    Args:
        today: Reference date
        payment_day: Day of month installments fall on, 0 when unknown
        start_date: Loan start; the result never precedes it

    Returns:
        The previous due date
    """
    if payment_day <= 0:
        return max(add_months(today, -1), start_date)

    this_due = due_day_in_month(today.year, today.month, payment_day)
    if today >= this_due:
        return max(this_due, start_date)

    prior_month = add_months(today.replace(day=1), -1)
    prior_due = due_day_in_month(prior_month.year, prior_month.month, payment_day)
    return max(prior_due, start_date)


def next_due_date(previous: date, payment_day: int) -> date:
    """
    Find the due date following a previous one.

    With a known payment day the date lands on that day of the next month
    (clamped to the month length) and is moved off a weekend; the result is
    never a Saturday or Sunday.
    """
    if payment_day <= 0:
        return add_months(previous, 1)

    month = add_months(previous.replace(day=1), 1)
    return shift_off_weekend(due_day_in_month(month.year, month.month, payment_day))


def _nominal_due_date(start_date: date, payment_day: int, number: int) -> date:
    if payment_day <= 0:
        return add_months(start_date, number)
    month = add_months(start_date.replace(day=1), number)
    return due_day_in_month(month.year, month.month, payment_day)


def generate_annuity_schedule(params: LoanParameters) -> List[InstallmentRecord]:
    """
    Project the full installment schedule of an annuity loan.

    Interest is charged monthly on the running balance. The last installment
    takes whatever principal is left so the balance ends at exactly zero.

    Args:
        params: Loan terms

    Returns:
        Numbered installments in due date order; empty when the term is 0
    """
    n = params.term_months
    payment = monthly_payment(params.principal, params.annual_rate_percent, n)
    if payment <= 0:
        return []

    rate = _monthly_rate(params.annual_rate_percent)
    balance = params.principal
    installments: List[InstallmentRecord] = []

    for i in range(1, n + 1):
        if balance <= 0:
            break
        interest = round_money(balance * rate)
        if i == n:
            principal_part = balance
        else:
            principal_part = min(balance, max(ZERO, payment - interest))
        balance = balance - principal_part

        due = _nominal_due_date(params.start_date, params.payment_day, i)
        if params.payment_day > 0:
            due = shift_off_weekend(due)

        installments.append(InstallmentRecord(
            installment_number=i,
            due_date=due,
            total_amount=principal_part + interest,
            principal_amount=principal_part,
            interest_amount=interest,
            remaining_balance=balance,
        ))

    logger.debug(f"Projected {len(installments)} installments of {payment} for principal {params.principal}")
    return installments
