"""
Derive where a loan stands today from its parsed installment schedule.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from loan_schedule.models.installment import InstallmentRecord, to_decimal
from loan_schedule.models.schedule_snapshot import ScheduleSnapshot

logger = logging.getLogger(__name__)

__all__ = ['build_schedule_snapshot']


def _non_negative(values) -> List[Decimal]:
    return [v for v in values if v is not None and v >= 0]


def _remaining_principal(
    upcoming: Sequence[InstallmentRecord],
    fallback_principal: Optional[Decimal],
) -> Optional[Decimal]:
    # Banks write the balance before or after the installment, so the
    # nearest future balance is the best available figure
    balances = _non_negative(r.remaining_balance for r in upcoming)
    if balances:
        return balances[0]

    principal_parts = _non_negative(r.principal_amount for r in upcoming)
    if principal_parts:
        return sum(principal_parts, Decimal(0))

    return fallback_principal


def build_schedule_snapshot(
    installments: Sequence[InstallmentRecord],
    today: Optional[date] = None,
    fallback_principal: Optional[Decimal] = None,
) -> ScheduleSnapshot:
    """
    Summarize a schedule as of a given day.

    Args:
        installments: Parsed installments (any order)
        today: Reference day, defaults to the current date
        fallback_principal: Principal to report when the schedule carries
            neither balances nor principal parts for the remaining installments

    Returns:
        ScheduleSnapshot; an empty schedule gives an empty snapshot
    """
    if not installments:
        return ScheduleSnapshot()

    today = today or date.today()
    ordered = sorted(installments, key=lambda r: r.due_date)
    upcoming = [r for r in ordered if r.due_date >= today]
    next_installment = upcoming[0] if upcoming else None

    all_balances = _non_negative(r.remaining_balance for r in ordered)
    original_principal = max(all_balances) if all_balances else None

    remaining = _remaining_principal(upcoming, to_decimal(fallback_principal))
    if remaining is not None and remaining < 0:
        remaining = Decimal(0)

    snapshot = ScheduleSnapshot(
        next_due_date=next_installment.due_date if next_installment else None,
        next_payment_amount=next_installment.total_amount if next_installment else None,
        next_principal_part=next_installment.principal_amount if next_installment else None,
        next_interest_part=next_installment.interest_amount if next_installment else None,
        remaining_installments=len(upcoming),
        original_principal=original_principal,
        remaining_principal=remaining,
    )
    logger.debug(f"Schedule snapshot as of {today}: {snapshot.to_dict()}")
    return snapshot
