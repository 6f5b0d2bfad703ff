"""
Per-row outcomes and the overall result of parsing a schedule file.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .installment import InstallmentRecord
from .parse_context import ParseContext


class SkipReason(str, Enum):
    """Why a data row did not become an installment."""
    SUMMARY_ROW = "summary_row"
    ROW_TOO_SHORT = "row_too_short"
    INVALID_DATE = "invalid_date"
    INVALID_TOTAL = "invalid_total"
    NON_POSITIVE_TOTAL = "non_positive_total"


@dataclass(frozen=True)
class AcceptedRow:
    """A data row that produced an installment."""
    row_index: int
    record: InstallmentRecord

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class SkippedRow:
    """A data row that was left out, with the reason and its raw cells."""
    row_index: int
    reason: SkipReason
    raw: Tuple[str, ...] = ()

    @property
    def accepted(self) -> bool:
        return False


RowOutcome = Union[AcceptedRow, SkippedRow]


@dataclass
class ScheduleParseResult:
    """
    Result of one parse call.

    installments are sorted ascending by due date; outcomes keep the row
    order of the source file so callers can see exactly which rows were
    dropped and why.
    """
    installments: List[InstallmentRecord]
    outcomes: List[RowOutcome] = field(default_factory=list)
    context: ParseContext = field(default_factory=ParseContext)
    encoding: Optional[str] = None

    @property
    def accepted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.accepted)

    def skipped(self, reason: Optional[SkipReason] = None) -> List[SkippedRow]:
        """Skipped rows, optionally filtered by reason."""
        return [
            o for o in self.outcomes
            if isinstance(o, SkippedRow) and (reason is None or o.reason == reason)
        ]

    def is_empty(self) -> bool:
        return not self.installments
