"""
Schedule parser configuration settings.

This module contains the thresholds and sampling windows used by the
schedule heuristics. They can be tuned through environment variables without
code changes.
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Tuple


@dataclass(frozen=True)
class ScheduleParserConfig:
    """Configuration class for schedule ingestion thresholds and settings."""

    # Encoding resolution
    mojibake_threshold: int = 5  # Replacement characters that mark a wrong decode
    fallback_encodings: Tuple[str, ...] = ('cp1250', 'iso8859_2')

    # Delimiter detection
    delimiter_candidates: Tuple[str, ...] = (';', ',', '\t', '|')
    default_delimiter: str = ';'
    delimiter_sample_size: int = 20
    delimiter_min_rows: int = 3

    # Header location
    header_scan_limit: int = 25

    # Content heuristics for column mapping
    heuristic_sample_size: int = 60
    heuristic_min_cells: int = 6
    date_column_ratio: float = 0.3
    total_column_ratio: float = 0.3
    money_column_ratio: float = 0.6
    breakdown_match_ratio: float = 0.6  # Rows where principal + interest must equal the total
    breakdown_tolerance: Decimal = field(default_factory=lambda: Decimal("0.02"))

    # Row filtering
    summary_markers: Tuple[str, ...] = ('suma', 'razem', 'podsum')

    @classmethod
    def from_environment(cls) -> 'ScheduleParserConfig':
        """
        Create configuration from environment variables with fallback to defaults.

        Environment variables:
        - SCHEDULE_MOJIBAKE_THRESHOLD
        - SCHEDULE_FALLBACK_ENCODINGS (comma separated codec names)
        - SCHEDULE_DEFAULT_DELIMITER
        - SCHEDULE_DELIMITER_SAMPLE_SIZE
        - SCHEDULE_HEADER_SCAN_LIMIT
        - SCHEDULE_HEURISTIC_SAMPLE_SIZE
        - SCHEDULE_HEURISTIC_MIN_CELLS
        - SCHEDULE_DATE_COLUMN_RATIO
        - SCHEDULE_TOTAL_COLUMN_RATIO
        - SCHEDULE_MONEY_COLUMN_RATIO
        - SCHEDULE_BREAKDOWN_MATCH_RATIO
        """
        defaults = cls()
        encodings = os.getenv('SCHEDULE_FALLBACK_ENCODINGS')
        return cls(
            mojibake_threshold=int(os.getenv('SCHEDULE_MOJIBAKE_THRESHOLD', defaults.mojibake_threshold)),
            fallback_encodings=(
                tuple(e.strip() for e in encodings.split(',') if e.strip())
                if encodings else defaults.fallback_encodings
            ),
            default_delimiter=os.getenv('SCHEDULE_DEFAULT_DELIMITER', defaults.default_delimiter),
            delimiter_sample_size=int(os.getenv('SCHEDULE_DELIMITER_SAMPLE_SIZE', defaults.delimiter_sample_size)),
            header_scan_limit=int(os.getenv('SCHEDULE_HEADER_SCAN_LIMIT', defaults.header_scan_limit)),
            heuristic_sample_size=int(os.getenv('SCHEDULE_HEURISTIC_SAMPLE_SIZE', defaults.heuristic_sample_size)),
            heuristic_min_cells=int(os.getenv('SCHEDULE_HEURISTIC_MIN_CELLS', defaults.heuristic_min_cells)),
            date_column_ratio=float(os.getenv('SCHEDULE_DATE_COLUMN_RATIO', defaults.date_column_ratio)),
            total_column_ratio=float(os.getenv('SCHEDULE_TOTAL_COLUMN_RATIO', defaults.total_column_ratio)),
            money_column_ratio=float(os.getenv('SCHEDULE_MONEY_COLUMN_RATIO', defaults.money_column_ratio)),
            breakdown_match_ratio=float(os.getenv('SCHEDULE_BREAKDOWN_MATCH_RATIO', defaults.breakdown_match_ratio)),
        )
