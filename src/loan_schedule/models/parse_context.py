"""
Transient state describing how one schedule file was interpreted.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

UNMAPPED = -1


class SemanticField(str, Enum):
    """Logical columns of a loan schedule."""
    DATE = "date"
    TOTAL = "total"
    PRINCIPAL = "principal"
    INTEREST = "interest"
    BALANCE = "balance"


class MappingSource(str, Enum):
    """Which stage of column mapping resolved a field."""
    HEADER = "header"
    CONTENT = "content"
    UNMAPPED = "unmapped"


def _empty_column_map() -> Dict[SemanticField, int]:
    return {f: UNMAPPED for f in SemanticField}


def _empty_sources() -> Dict[SemanticField, MappingSource]:
    return {f: MappingSource.UNMAPPED for f in SemanticField}


@dataclass
class ParseContext:
    """
    Context built fresh for every parse call and discarded afterwards.

    header_row_index is -1 when the file has no header row and every record
    is treated as data.
    """
    delimiter: str = ';'
    header_row_index: int = 0
    column_map: Dict[SemanticField, int] = field(default_factory=_empty_column_map)
    mapping_source: Dict[SemanticField, MappingSource] = field(default_factory=_empty_sources)

    def column(self, semantic_field: SemanticField) -> int:
        return self.column_map.get(semantic_field, UNMAPPED)

    def is_mapped(self, semantic_field: SemanticField) -> bool:
        return self.column(semantic_field) != UNMAPPED

    def assign(self, semantic_field: SemanticField, index: int, source: MappingSource) -> None:
        self.column_map[semantic_field] = index
        self.mapping_source[semantic_field] = source

    def claimed_columns(self) -> List[int]:
        """Column indices already taken by some field."""
        return [idx for idx in self.column_map.values() if idx != UNMAPPED]

    @property
    def required_width(self) -> int:
        """Minimum number of cells a row needs to cover the date and total columns."""
        return max(self.column(SemanticField.DATE), self.column(SemanticField.TOTAL)) + 1

    def describe(self) -> str:
        mapped = ", ".join(f"{f.value}={idx}" for f, idx in self.column_map.items())
        return f"delimiter={self.delimiter!r} header_row={self.header_row_index} columns=[{mapped}]"
