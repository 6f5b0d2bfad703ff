"""
Installment model for parsed and projected loan schedules.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict


def to_decimal(v: Any) -> Any:
    """Coerce numeric input to Decimal going through str() so floats keep their printed value."""
    if v is None or isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v))
    except Exception as e:
        raise ValueError(f"Invalid amount value: {v}. Could not convert to Decimal.") from e


class InstallmentRecord(BaseModel):
    """
    A single loan installment, either read from a bank schedule export or
    projected by the amortization calculator.

    The installment number is never known for rows read from a CSV file; it is
    only filled in for projected schedules or by callers that merge parsed rows
    with stored ones.
    """
    installment_number: Optional[int] = Field(default=None, alias="installmentNumber", gt=0)
    due_date: date = Field(alias="dueDate")
    total_amount: Decimal = Field(alias="totalAmount")
    principal_amount: Optional[Decimal] = Field(default=None, alias="principalAmount")
    interest_amount: Optional[Decimal] = Field(default=None, alias="interestAmount")
    remaining_balance: Optional[Decimal] = Field(default=None, alias="remainingBalance")

    model_config = ConfigDict(
        populate_by_name=True,
        json_encoders={
            Decimal: str
        },
        extra='forbid'
    )

    @field_validator('total_amount', 'principal_amount', 'interest_amount', 'remaining_balance', mode='before')
    @classmethod
    def ensure_amount_is_decimal(cls, v: Any) -> Any:
        return to_decimal(v)

    @field_validator('total_amount')
    @classmethod
    def check_total_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Installment total amount must be greater than zero")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the installment to a JSON-friendly dictionary using camelCase keys."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        text = f"{self.due_date:%d.%m.%Y} | total: {self.total_amount:.2f}"
        if self.principal_amount is not None:
            text += f" | principal: {self.principal_amount:.2f}"
        if self.interest_amount is not None:
            text += f" | interest: {self.interest_amount:.2f}"
        return text
