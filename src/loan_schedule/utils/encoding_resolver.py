"""
Encoding resolution for bank schedule exports.

Many Polish banks export CSV files in unlabeled legacy code pages. Text is
decoded as UTF-8 first (honouring a byte-order mark) and re-decoded with the
legacy code pages when the UTF-8 result is full of replacement characters.
"""
import codecs
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from loan_schedule.utils.errors import InvalidArgument
from loan_schedule.utils.parser_config import ScheduleParserConfig

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = '\ufffd'

# Longer marks first: the UTF-32 LE mark starts with the UTF-16 LE one
_BOMS: List[Tuple[bytes, str]] = [
    (codecs.BOM_UTF32_LE, 'utf-32-le'),
    (codecs.BOM_UTF32_BE, 'utf-32-be'),
    (codecs.BOM_UTF8, 'utf-8'),
    (codecs.BOM_UTF16_LE, 'utf-16-le'),
    (codecs.BOM_UTF16_BE, 'utf-16-be'),
]

__all__ = [
    'DecodedContent',
    'register_legacy_codecs',
    'count_replacement_chars',
    'looks_like_mojibake',
    'detect_bom',
    'decode_schedule_bytes',
    'read_schedule_text',
]


@dataclass(frozen=True)
class DecodedContent:
    """Decoded text together with the codec that produced it."""
    text: str
    encoding: str
    replacement_count: int


def register_legacy_codecs(encodings: Tuple[str, ...] = ('cp1250', 'iso8859_2')) -> Tuple[str, ...]:
    """
    Resolve the legacy code pages used as decode fallbacks.

    Meant to be called once by whoever bootstraps the engine, before the first
    parse. Calling it again is harmless.

    Args:
        encodings: Codec names to resolve

    Returns:
        Canonical codec names, in the given order

    Raises:
        LookupError: If the interpreter does not provide one of the codecs
    """
    resolved = tuple(codecs.lookup(name).name for name in encodings)
    logger.debug(f"Legacy codecs available: {resolved}")
    return resolved


def count_replacement_chars(text: str) -> int:
    return text.count(REPLACEMENT_CHAR)


def looks_like_mojibake(text: str, threshold: int = 5) -> bool:
    """Text decoded with the wrong codec shows up as a run of U+FFFD characters."""
    return count_replacement_chars(text) >= threshold


def detect_bom(content: bytes) -> Tuple[Optional[str], int]:
    """
    Detect a Unicode byte-order mark.

    Returns:
        Tuple of (codec name or None, length of the mark in bytes)
    """
    for bom, encoding in _BOMS:
        if content.startswith(bom):
            return encoding, len(bom)
    return None, 0


def _decode(content: bytes, encoding: str) -> DecodedContent:
    text = content.decode(encoding, errors='replace')
    return DecodedContent(text=text, encoding=encoding, replacement_count=count_replacement_chars(text))


def decode_schedule_bytes(content: bytes, config: Optional[ScheduleParserConfig] = None) -> DecodedContent:
    """
    Decode raw file bytes, correcting a wrong guess of the character encoding.

    The first attempt is UTF-8, or the encoding named by a byte-order mark. If
    that leaves at least ``mojibake_threshold`` replacement characters the
    fallback encodings are tried in order; the first one below the threshold
    wins, otherwise the last attempt is returned.

    Args:
        content: The raw file content
        config: Parser configuration (defaults are used when omitted)

    Returns:
        DecodedContent with the text and the codec used
    """
    config = config or ScheduleParserConfig()

    bom_encoding, bom_length = detect_bom(content)
    decoded = _decode(content[bom_length:], bom_encoding or 'utf-8')
    if not looks_like_mojibake(decoded.text, config.mojibake_threshold):
        return decoded

    logger.info(
        f"UTF-8 decode produced {decoded.replacement_count} replacement characters, "
        f"trying {list(config.fallback_encodings)}"
    )
    for encoding in config.fallback_encodings:
        decoded = _decode(content, encoding)
        if not looks_like_mojibake(decoded.text, config.mojibake_threshold):
            logger.info(f"Decoded schedule using {encoding}")
            return decoded

    logger.warning(
        f"No encoding decoded the schedule cleanly, keeping {decoded.encoding} "
        f"with {decoded.replacement_count} replacement characters"
    )
    return decoded


def read_schedule_text(path: Union[str, os.PathLike], config: Optional[ScheduleParserConfig] = None) -> DecodedContent:
    """
    Read a schedule file from disk and decode it.

    Raises:
        InvalidArgument: If the path is empty
        FileNotFoundError: If the file does not exist
    """
    if path is None or not str(path).strip():
        raise InvalidArgument("Schedule file path must not be empty")
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Schedule file not found: {path}")

    with open(path, 'rb') as f:
        content = f.read()
    logger.info(f"Read {len(content)} bytes from {path}")
    return decode_schedule_bytes(content, config)
