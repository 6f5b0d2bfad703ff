"""
Models package for the loan schedule engine.
"""

from .installment import (
    InstallmentRecord,
    to_decimal,
)

from .loan_parameters import LoanParameters

from .parse_context import (
    ParseContext,
    SemanticField,
    MappingSource,
    UNMAPPED,
)

from .parse_result import (
    AcceptedRow,
    SkippedRow,
    RowOutcome,
    SkipReason,
    ScheduleParseResult,
)

from .schedule_snapshot import ScheduleSnapshot
