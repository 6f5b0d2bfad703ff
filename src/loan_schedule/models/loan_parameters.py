"""
Loan parameters supplied by the loan-tracking side of the application.
"""
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator, ConfigDict

from .installment import to_decimal


class LoanParameters(BaseModel):
    """
    Contract terms of a loan, used to derive payment figures that a schedule
    export does not carry. Read-only to the engine.
    """
    principal: Decimal = Field(gt=0)
    annual_rate_percent: Decimal = Field(default=Decimal(0), alias="annualRatePercent", ge=0)  # 7.25 means 7.25%
    term_months: int = Field(default=0, alias="termMonths", ge=0)
    start_date: date = Field(default_factory=date.today, alias="startDate")
    payment_day: int = Field(default=0, alias="paymentDay", ge=0, le=31)  # 0 if unknown

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra='forbid'
    )

    @field_validator('principal', 'annual_rate_percent', mode='before')
    @classmethod
    def ensure_decimal(cls, v: Any) -> Any:
        return to_decimal(v)
