"""
Header location and semantic column mapping for schedule exports.

Mapping runs in two independent stages. A declarative synonym table is
matched against the header row first; when the date or total column is still
unknown, sampled data rows are scored by what their cells parse as.
"""
import logging
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from loan_schedule.models.parse_context import MappingSource, ParseContext, SemanticField
from loan_schedule.utils.errors import MissingRequiredColumns
from loan_schedule.utils.field_parsers import (
    has_digits,
    has_letters,
    normalize_header,
    parse_date,
    parse_money,
)
from loan_schedule.utils.parser_config import ScheduleParserConfig

logger = logging.getLogger(__name__)

Row = Sequence[str]

__all__ = [
    'SYNONYMS',
    'matches_synonym',
    'is_header_row',
    'locate_header',
    'map_columns_by_header',
    'map_columns_by_content',
    'resolve_columns',
]

_RAW_SYNONYMS: Dict[SemanticField, List[str]] = {
    SemanticField.DATE: [
        "data", "data splaty", "data platnosci", "termin", "termin platnosci", "data raty",
        "due date", "payment date", "date",
    ],
    SemanticField.TOTAL: [
        "rata", "kwota raty", "laczna rata", "rata laczna", "rata calkowita", "do zaplaty", "kwota",
        "amount", "payment", "installment", "total",
    ],
    SemanticField.PRINCIPAL: [
        "kapital", "czesc kapitalowa", "rata kapitalowa", "splata kapitalu", "principal", "capital",
    ],
    SemanticField.INTEREST: [
        "odsetki", "czesc odsetkowa", "rata odsetkowa", "interest",
    ],
    SemanticField.BALANCE: [
        "saldo", "saldo zadluzenia", "pozostalo do splaty", "kapital pozostaly", "pozostaly kapital",
        "zadluzenie", "remaining", "balance", "outstanding",
    ],
}

SYNONYMS: Dict[SemanticField, Tuple[str, ...]] = {
    f: tuple(normalize_header(s) for s in names) for f, names in _RAW_SYNONYMS.items()
}

# Substring matching visits the more specific fields first so that
# "Rata kapitałowa" is principal and "Kapitał pozostały" is balance
SUBSTRING_ORDER = (
    SemanticField.BALANCE,
    SemanticField.PRINCIPAL,
    SemanticField.INTEREST,
    SemanticField.DATE,
    SemanticField.TOTAL,
)


def matches_synonym(normalized: str, semantic_field: SemanticField, exact_only: bool = False) -> bool:
    """Check a normalized header cell against the synonyms of a field."""
    if not normalized:
        return False
    synonyms = SYNONYMS[semantic_field]
    if normalized in synonyms:
        return True
    return not exact_only and any(s in normalized for s in synonyms)


def is_header_row(cells: Row) -> bool:
    """A header row names both a date column and an installment amount column."""
    normalized = [normalize_header(c) for c in cells]
    has_date = any(matches_synonym(n, SemanticField.DATE) for n in normalized)
    has_total = any(matches_synonym(n, SemanticField.TOTAL) for n in normalized)
    return has_date and has_total


def _looks_like_data(cells: Row) -> bool:
    return any(parse_date(c) is not None or parse_money(c) is not None for c in cells)


def _is_data_record(cells: Row) -> bool:
    has_date = any(parse_date(c) is not None for c in cells)
    has_money = any(parse_date(c) is None and parse_money(c) is not None for c in cells)
    return has_date and has_money


def _looks_like_label_row(cells: Row) -> bool:
    if len(cells) < 3:
        return False
    letter_cells = sum(1 for c in cells if has_letters(c))
    digit_cells = sum(1 for c in cells if has_digits(c))
    return letter_cells >= 2 and digit_cells == 0


def locate_header(rows: Sequence[Row], config: Optional[ScheduleParserConfig] = None) -> int:
    """
    Find the header row among the first records.

    Args:
        rows: Split records of the file
        config: Parser configuration

    Returns:
        Index of the header row, or -1 when the file starts straight with data
    """
    config = config or ScheduleParserConfig()
    limit = min(len(rows), config.header_scan_limit)

    for i in range(limit):
        if is_header_row(rows[i]):
            logger.info(f"Header row found by synonyms at index {i}")
            return i

    for i in range(limit):
        if i + 1 < len(rows) and _looks_like_label_row(rows[i]) and _looks_like_data(rows[i + 1]):
            logger.info(f"Header row guessed from row shape at index {i}")
            return i

    if rows and _is_data_record(rows[0]):
        logger.info("No header row, the first record already holds data")
        return -1

    logger.info("No header row recognised, using the first record")
    return 0


def map_columns_by_header(header: Row, context: ParseContext) -> ParseContext:
    """
    Map semantic fields to columns by header names.

    Exact synonym matches are taken for every field first, then substring
    matches for the fields still unmapped. A column serves at most one field.
    """
    normalized = [normalize_header(c) for c in header]

    for semantic_field in SemanticField:
        for idx, name in enumerate(normalized):
            if idx in context.claimed_columns():
                continue
            if matches_synonym(name, semantic_field, exact_only=True):
                context.assign(semantic_field, idx, MappingSource.HEADER)
                break

    for semantic_field in SUBSTRING_ORDER:
        if context.is_mapped(semantic_field):
            continue
        for idx, name in enumerate(normalized):
            if idx in context.claimed_columns():
                continue
            if matches_synonym(name, semantic_field):
                context.assign(semantic_field, idx, MappingSource.HEADER)
                break

    logger.debug(f"Header mapping {normalized} -> {context.column_map}")
    return context


# =============================================================================
# CONTENT HEURISTICS
# =============================================================================

def _column_cells(sample: Sequence[Row], col: int) -> List[str]:
    return [r[col] for r in sample if col < len(r)]


def _ratio(cells: List[str], predicate) -> float:
    if not cells:
        return 0.0
    return sum(1 for c in cells if predicate(c)) / len(cells)


def _is_positive_money(cell: str) -> bool:
    value = parse_money(cell)
    return value is not None and value > 0


def _is_non_negative_money(cell: str) -> bool:
    value = parse_money(cell)
    return value is not None and value >= 0


def _has_decimal_separator(cell: str) -> bool:
    return ',' in cell or '.' in cell


def _pick_date_column(sample: Sequence[Row], free: List[int], config: ScheduleParserConfig) -> Optional[int]:
    best: Optional[int] = None
    best_ratio = 0.0
    for col in free:
        cells = _column_cells(sample, col)
        if len(cells) < config.heuristic_min_cells:
            continue
        ratio = _ratio(cells, lambda c: parse_date(c) is not None)
        if ratio >= config.date_column_ratio and ratio > best_ratio:
            best, best_ratio = col, ratio
    return best


def _total_candidates(sample: Sequence[Row], free: List[int], config: ScheduleParserConfig) -> List[int]:
    scored = []
    for col in free:
        cells = _column_cells(sample, col)
        if len(cells) < config.heuristic_min_cells:
            continue
        ratio = _ratio(cells, _is_positive_money)
        if ratio < config.total_column_ratio:
            continue
        # Amount columns carry decimals, installment numbers do not
        scored.append(((ratio, _ratio(cells, _has_decimal_separator)), col))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [col for _, col in scored]


def _pick_total_column(sample: Sequence[Row], free: List[int], config: ScheduleParserConfig) -> Optional[int]:
    candidates = _total_candidates(sample, free, config)
    return candidates[0] if candidates else None


def _money_columns(sample: Sequence[Row], free: List[int], config: ScheduleParserConfig) -> List[int]:
    """Money-like columns, those written with decimals first."""
    result = []
    for col in free:
        cells = _column_cells(sample, col)
        if len(cells) < config.heuristic_min_cells:
            continue
        if _ratio(cells, _is_non_negative_money) >= config.money_column_ratio:
            result.append((_ratio(cells, _has_decimal_separator), col))
    result.sort(key=lambda item: item[0], reverse=True)
    return [col for _, col in result]


def _breakdown_consistent(
    sample: Sequence[Row],
    total_col: int,
    principal_col: int,
    interest_col: int,
    config: ScheduleParserConfig,
) -> bool:
    """Check that principal + interest adds up to the total on most comparable rows."""
    comparable = 0
    matching = 0
    for r in sample:
        if max(total_col, principal_col, interest_col) >= len(r):
            continue
        total = parse_money(r[total_col])
        principal = parse_money(r[principal_col])
        interest = parse_money(r[interest_col])
        if total is None or principal is None or interest is None:
            continue
        comparable += 1
        if abs(principal + interest - total) <= config.breakdown_tolerance:
            matching += 1
    return comparable > 0 and matching / comparable >= config.breakdown_match_ratio


def _assign_breakdown(context: ParseContext, first: int, second: int) -> None:
    context.assign(SemanticField.PRINCIPAL, min(first, second), MappingSource.CONTENT)
    context.assign(SemanticField.INTEREST, max(first, second), MappingSource.CONTENT)


def _map_total_with_breakdown(
    sample: Sequence[Row],
    context: ParseContext,
    free: List[int],
    config: ScheduleParserConfig,
) -> bool:
    """Map total, principal and interest together from the first three columns that add up."""
    money = _money_columns(sample, free, config)
    for total_col in _total_candidates(sample, free, config):
        rest = [c for c in money if c != total_col]
        for first, second in combinations(rest, 2):
            if _breakdown_consistent(sample, total_col, first, second, config):
                context.assign(SemanticField.TOTAL, total_col, MappingSource.CONTENT)
                _assign_breakdown(context, first, second)
                return True
    return False


def map_columns_by_content(
    data_rows: Sequence[Row],
    context: ParseContext,
    config: Optional[ScheduleParserConfig] = None,
) -> ParseContext:
    """
    Fill in unmapped columns by looking at what sampled cells parse as.

    Only runs when the date or total column is still unmapped. Principal and
    interest are picked from the remaining money-like columns, preferring the
    first pair that adds up to the total. When none of the three is known the
    total is the column that the other two add up to, if any.
    """
    config = config or ScheduleParserConfig()
    if context.is_mapped(SemanticField.DATE) and context.is_mapped(SemanticField.TOTAL):
        return context

    sample = list(data_rows[:config.heuristic_sample_size])
    width = max((len(r) for r in sample), default=0)

    def free_columns() -> List[int]:
        claimed = context.claimed_columns()
        return [c for c in range(width) if c not in claimed]

    if not context.is_mapped(SemanticField.DATE):
        col = _pick_date_column(sample, free_columns(), config)
        if col is not None:
            context.assign(SemanticField.DATE, col, MappingSource.CONTENT)

    breakdown_open = not (context.is_mapped(SemanticField.PRINCIPAL) or context.is_mapped(SemanticField.INTEREST))
    if not context.is_mapped(SemanticField.TOTAL) and breakdown_open:
        if _map_total_with_breakdown(sample, context, free_columns(), config):
            return context

    if not context.is_mapped(SemanticField.TOTAL):
        col = _pick_total_column(sample, free_columns(), config)
        if col is not None:
            context.assign(SemanticField.TOTAL, col, MappingSource.CONTENT)

    if not context.is_mapped(SemanticField.TOTAL):
        return context

    open_slots = [f for f in (SemanticField.PRINCIPAL, SemanticField.INTEREST) if not context.is_mapped(f)]
    if not open_slots:
        return context

    candidates = _money_columns(sample, free_columns(), config)
    total_col = context.column(SemanticField.TOTAL)

    if len(open_slots) == 2:
        for principal_col, interest_col in combinations(candidates, 2):
            if _breakdown_consistent(sample, total_col, principal_col, interest_col, config):
                _assign_breakdown(context, principal_col, interest_col)
                return context
        logger.debug("No money column pair adds up to the total, assigning decimal columns first")

    for semantic_field, col in zip(open_slots, candidates):
        context.assign(semantic_field, col, MappingSource.CONTENT)
    return context


def resolve_columns(
    rows: Sequence[Row],
    delimiter: str,
    config: Optional[ScheduleParserConfig] = None,
) -> ParseContext:
    """
    Build the parse context for split records: header row and column map.

    Raises:
        MissingRequiredColumns: If no date and total columns can be found
    """
    config = config or ScheduleParserConfig()
    context = ParseContext(delimiter=delimiter)

    context.header_row_index = locate_header(rows, config)
    if context.header_row_index >= 0:
        map_columns_by_header(rows[context.header_row_index], context)

    data_rows = rows[context.header_row_index + 1:]
    map_columns_by_content(data_rows, context, config)

    if not context.is_mapped(SemanticField.DATE) or not context.is_mapped(SemanticField.TOTAL):
        logger.error(f"Could not resolve required columns: {context.describe()}")
        raise MissingRequiredColumns(
            delimiter,
            context.column(SemanticField.DATE),
            context.column(SemanticField.TOTAL),
        )

    logger.info(f"Resolved schedule layout: {context.describe()}")
    return context
