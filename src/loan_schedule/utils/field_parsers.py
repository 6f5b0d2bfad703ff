"""
Locale-tolerant parsing of schedule cells: dates, money amounts and header names.

None of these functions raise on bad cell text; they return None so that the
caller can decide whether a row is usable.
"""
import logging
import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

__all__ = [
    'parse_date',
    'parse_money',
    'normalize_header',
    'has_letters',
    'has_digits',
    'PolishParserInfo',
]

# strptime accepts one or two digits for %d and %m, so each pattern also
# covers its single-digit variant (d.M.yyyy, d-M-yyyy, d/M/yyyy)
DATE_FORMATS = [
    "%d.%m.%Y",     # 15.03.2024, 5.3.2024
    "%d-%m-%Y",     # 15-03-2024
    "%Y-%m-%d",     # 2024-03-15
    "%Y.%m.%d",     # 2024.03.15
    "%d/%m/%Y",     # 15/03/2024
]

_ODD_SPACES = re.compile(r'[\u00a0\u2007\u2009\u202f]')
_YEAR_SUFFIX = re.compile(r'(?<=\d)\s*r\.?$', re.IGNORECASE)
_DATE_SHAPE = re.compile(r'^\d{1,4}[./\- ]\d{1,2}[./\- ]\d{1,4}')
_WORDS = re.compile(r'[^\W\d_]+')

_CURRENCY_MARKERS = re.compile(r'pln|zł|zl', re.IGNORECASE)
_ALL_SPACES = re.compile(r'[\s\u00a0\u2007\u2009\u202f]+')
_PLAIN_DECIMAL = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)$')

_POLISH_LETTERS = str.maketrans('ąćęłńóśźż', 'acelnoszz')
_NON_WORD = re.compile(r'[\W_]+')


class PolishParserInfo(date_parser.parserinfo):
    """dateutil parser info that also understands Polish month names."""

    MONTHS = [
        ("Jan", "January", "sty", "styczen", "styczeń", "stycznia"),
        ("Feb", "February", "lut", "luty", "lutego"),
        ("Mar", "March", "marzec", "marca"),
        ("Apr", "April", "kwi", "kwiecien", "kwiecień", "kwietnia"),
        ("May", "maj", "maja"),
        ("Jun", "June", "cze", "czerwiec", "czerwca"),
        ("Jul", "July", "lip", "lipiec", "lipca"),
        ("Aug", "August", "sie", "sierpien", "sierpień", "sierpnia"),
        ("Sep", "Sept", "September", "wrz", "wrzesien", "wrzesień", "wrzesnia", "września"),
        ("Oct", "October", "paz", "paź", "pazdziernik", "październik", "pazdziernika", "października"),
        ("Nov", "November", "lis", "listopad", "listopada"),
        ("Dec", "December", "gru", "grudzien", "grudzień", "grudnia"),
    ]


_PARSER_INFO = PolishParserInfo(dayfirst=True)
_MONTH_NAMES = {name.lower() for names in PolishParserInfo.MONTHS for name in names}
_DEFAULT_DATE = datetime(2000, 1, 1)


def _looks_like_date(text: str) -> bool:
    if _DATE_SHAPE.match(text):
        return True
    return any(word in _MONTH_NAMES for word in _WORDS.findall(text.lower()))


def parse_date(raw: Optional[str]) -> Optional[date]:
    """
    Parse a schedule date.

    Handles Polish exports such as "15.03.2024 r." and timestamps such as
    "2024-03-15 00:00:00". Fixed formats are tried first, then a free-form
    day-first parse for text that is shaped like a date or names a month.

    Args:
        raw: Cell text

    Returns:
        The date, or None if the text is not a date
    """
    if raw is None:
        return None
    text = _ODD_SPACES.sub(' ', raw).strip()
    if not text:
        return None

    text = _YEAR_SUFFIX.sub('', text).strip()

    # Drop a time-of-day suffix
    if ' ' in text:
        head = text.split(' ', 1)[0]
        if any(sep in head for sep in '.-/'):
            text = head

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    if not _looks_like_date(text):
        return None
    try:
        return date_parser.parse(text, parserinfo=_PARSER_INFO, default=_DEFAULT_DATE).date()
    except (ValueError, OverflowError) as e:
        logger.debug(f"Free-form date parse failed for {text!r}: {e}")
        return None


def parse_money(raw: Optional[str]) -> Optional[Decimal]:
    """
    Parse an amount written the way Polish and international banks write them.

    "1 234,56 zł", "1.234,56", "1,234.56", "PLN 99" and "(500,00)" are all
    understood. When both ',' and '.' appear the later one is the decimal
    separator; a lone ',' is always a decimal separator.

    Args:
        raw: Cell text

    Returns:
        The amount as Decimal, or None if the text is not a number
    """
    if raw is None:
        return None
    text = _CURRENCY_MARKERS.sub('', raw)
    text = _ALL_SPACES.sub('', text)
    if not text:
        return None

    if text.startswith('(') and text.endswith(')'):
        text = '-' + text[1:-1]

    if text.endswith('-') and text[:1] not in '+-':
        text = '-' + text[:-1]

    comma = text.rfind(',')
    dot = text.rfind('.')
    if comma >= 0 and dot >= 0:
        if dot < comma:
            text = text.replace('.', '').replace(',', '.')
        else:
            text = text.replace(',', '')
    elif comma >= 0:
        text = text.replace(',', '.')

    if not _PLAIN_DECIMAL.match(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def normalize_header(raw: Optional[str]) -> str:
    """
    Normalize a header cell for synonym matching.

    Lowercases, folds Polish diacritics (and any other combining marks) to
    plain latin letters and removes spaces and punctuation, so that
    "Data spłaty:" becomes "datasplaty".
    """
    if not raw:
        return ''
    text = raw.strip().lower().translate(_POLISH_LETTERS)
    text = unicodedata.normalize('NFKD', text)
    text = ''.join(ch for ch in text if not unicodedata.combining(ch))
    return _NON_WORD.sub('', text)


def has_letters(text: str) -> bool:
    return any(ch.isalpha() for ch in text)


def has_digits(text: str) -> bool:
    return any(ch.isdigit() for ch in text)
