"""
Service that turns a bank-exported loan schedule CSV into installment records.

The pipeline is linear: decode the bytes, split them into records, detect the
delimiter, locate the header and map the columns, then assemble one
installment per usable data row. Rows that cannot be used are skipped and
reported, never raised.
"""
import logging
import logging.config
import os
from decimal import Decimal
from typing import List, Optional, Sequence, Union

from loan_schedule.models.installment import InstallmentRecord
from loan_schedule.models.parse_context import ParseContext, SemanticField
from loan_schedule.models.parse_result import (
    AcceptedRow,
    RowOutcome,
    ScheduleParseResult,
    SkippedRow,
    SkipReason,
)
from loan_schedule.utils.column_mapper import resolve_columns
from loan_schedule.utils.csv_tokenizer import detect_delimiter, iter_records, split_record
from loan_schedule.utils.encoding_resolver import (
    decode_schedule_bytes,
    read_schedule_text,
    register_legacy_codecs,
)
from loan_schedule.utils.field_parsers import normalize_header, parse_date, parse_money
from loan_schedule.utils.parser_config import ScheduleParserConfig

# Configure logging
log_conf = os.environ.get('LOGGING_CONFIG')
if log_conf:
    logging.config.fileConfig(log_conf)
else:
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

logger = logging.getLogger(__name__)

__all__ = [
    'ScheduleParser',
    'assemble_schedule',
    'parse_schedule',
]


def _is_summary_row(cells: Sequence[str], markers: Sequence[str]) -> bool:
    for cell in cells:
        normalized = normalize_header(cell)
        if normalized and any(marker in normalized for marker in markers):
            return True
    return False


def _optional_money(cells: Sequence[str], index: int) -> Optional[Decimal]:
    if index < 0 or index >= len(cells):
        return None
    return parse_money(cells[index])


def _assemble_row(
    row_index: int,
    cells: Sequence[str],
    context: ParseContext,
    config: ScheduleParserConfig,
) -> RowOutcome:
    raw = tuple(cells)

    if _is_summary_row(cells, config.summary_markers):
        return SkippedRow(row_index, SkipReason.SUMMARY_ROW, raw)

    if len(cells) < context.required_width:
        return SkippedRow(row_index, SkipReason.ROW_TOO_SHORT, raw)

    due_date = parse_date(cells[context.column(SemanticField.DATE)])
    if due_date is None:
        return SkippedRow(row_index, SkipReason.INVALID_DATE, raw)

    total = parse_money(cells[context.column(SemanticField.TOTAL)])
    if total is None:
        return SkippedRow(row_index, SkipReason.INVALID_TOTAL, raw)
    if total <= 0:
        return SkippedRow(row_index, SkipReason.NON_POSITIVE_TOTAL, raw)

    record = InstallmentRecord(
        due_date=due_date,
        total_amount=total,
        principal_amount=_optional_money(cells, context.column(SemanticField.PRINCIPAL)),
        interest_amount=_optional_money(cells, context.column(SemanticField.INTEREST)),
        remaining_balance=_optional_money(cells, context.column(SemanticField.BALANCE)),
    )
    return AcceptedRow(row_index, record)


def assemble_schedule(
    rows: Sequence[Sequence[str]],
    context: ParseContext,
    config: Optional[ScheduleParserConfig] = None,
) -> ScheduleParseResult:
    """
    Build installments from split records using a resolved parse context.

    Args:
        rows: All split records of the file, header included
        context: Delimiter, header row and column map for the file
        config: Parser configuration

    Returns:
        ScheduleParseResult with installments sorted by due date and one
        outcome per data row in file order
    """
    config = config or ScheduleParserConfig()
    outcomes: List[RowOutcome] = []

    for row_index in range(context.header_row_index + 1, len(rows)):
        outcome = _assemble_row(row_index, rows[row_index], context, config)
        if isinstance(outcome, SkippedRow):
            logger.debug(f"Skipping row {row_index} ({outcome.reason.value}): {list(outcome.raw)}")
        outcomes.append(outcome)

    # sorted() is stable, rows sharing a due date keep file order
    installments = sorted(
        (o.record for o in outcomes if isinstance(o, AcceptedRow)),
        key=lambda r: r.due_date,
    )
    logger.info(f"Assembled {len(installments)} installments from {len(outcomes)} data rows")
    return ScheduleParseResult(installments=installments, outcomes=outcomes, context=context)


class ScheduleParser:
    """
    Parses loan schedule exports of unknown encoding, delimiter and layout.

    Each call works on its own ParseContext, so one parser can be shared.
    """

    def __init__(self, config: Optional[ScheduleParserConfig] = None):
        self.config = config or ScheduleParserConfig()
        register_legacy_codecs(self.config.fallback_encodings)

    def parse_file(self, path: Union[str, os.PathLike]) -> ScheduleParseResult:
        """
        Parse a schedule file from disk.

        Raises:
            InvalidArgument: If the path is empty
            FileNotFoundError: If the file does not exist
            MissingRequiredColumns: If no date and total columns can be found
        """
        decoded = read_schedule_text(path, self.config)
        result = self.parse_text(decoded.text)
        result.encoding = decoded.encoding
        return result

    def parse_bytes(self, content: bytes) -> ScheduleParseResult:
        decoded = decode_schedule_bytes(content, self.config)
        result = self.parse_text(decoded.text)
        result.encoding = decoded.encoding
        return result

    def parse_text(self, text: str) -> ScheduleParseResult:
        """
        Parse already decoded schedule text.

        Args:
            text: Decoded file content

        Returns:
            ScheduleParseResult; an input without records gives an empty result

        Raises:
            MissingRequiredColumns: If no date and total columns can be found
        """
        records = list(iter_records(text or ''))
        if not records:
            logger.info("Schedule contains no records")
            return ScheduleParseResult(installments=[])

        delimiter = detect_delimiter(records, self.config)
        logger.info(f"Detected delimiter {delimiter!r} over {len(records)} records")

        rows = [split_record(record, delimiter) for record in records]
        context = resolve_columns(rows, delimiter, self.config)
        return assemble_schedule(rows, context, self.config)


def parse_schedule(path: Union[str, os.PathLike], config: Optional[ScheduleParserConfig] = None) -> List[InstallmentRecord]:
    """
    Parse a schedule file into installments sorted by due date.

    Args:
        path: Path to the CSV export
        config: Parser configuration (defaults are used when omitted)

    Returns:
        List of InstallmentRecord, possibly empty
    """
    return ScheduleParser(config).parse_file(path).installments
