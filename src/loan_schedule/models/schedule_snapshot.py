"""
Snapshot of a loan's position derived from its installment schedule.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict


class ScheduleSnapshot(BaseModel):
    """
    Figures a loan card shows: the upcoming installment, how many remain and
    how much principal is still owed. Every field is optional because a
    schedule export may lack any of them.
    """
    next_due_date: Optional[date] = Field(default=None, alias="nextDueDate")
    next_payment_amount: Optional[Decimal] = Field(default=None, alias="nextPaymentAmount")
    next_principal_part: Optional[Decimal] = Field(default=None, alias="nextPrincipalPart")
    next_interest_part: Optional[Decimal] = Field(default=None, alias="nextInterestPart")
    remaining_installments: int = Field(default=0, alias="remainingInstallments", ge=0)
    original_principal: Optional[Decimal] = Field(default=None, alias="originalPrincipal")
    remaining_principal: Optional[Decimal] = Field(default=None, alias="remainingPrincipal")

    model_config = ConfigDict(
        populate_by_name=True,
        json_encoders={
            Decimal: str
        }
    )

    @property
    def percent_paid(self) -> Optional[Decimal]:
        """Share of the original principal already repaid, 0-100, when both figures are known."""
        if not self.original_principal or self.remaining_principal is None:
            return None
        paid = (self.original_principal - self.remaining_principal) / self.original_principal * 100
        return max(Decimal(0), min(Decimal(100), paid)).quantize(Decimal("0.01"))

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)
