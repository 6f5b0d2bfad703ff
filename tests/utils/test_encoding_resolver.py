"""
Unit tests for encoding resolution of schedule exports.
"""
import codecs

import pytest

from loan_schedule.utils.encoding_resolver import (
    REPLACEMENT_CHAR,
    count_replacement_chars,
    decode_schedule_bytes,
    detect_bom,
    looks_like_mojibake,
    read_schedule_text,
    register_legacy_codecs,
)
from loan_schedule.utils.errors import InvalidArgument
from loan_schedule.utils.parser_config import ScheduleParserConfig

POLISH_SCHEDULE = (
    "Harmonogram spłat kredytu: Łódź Kraków Gdańsk\n"
    "Data spłaty;Rata łączna;Kapitał;Odsetki;Saldo zadłużenia\n"
    "15.01.2024;1000,00;800,00;200,00;11200,00\n"
)


class TestDecodeScheduleBytes:
    """Test suite for decode_schedule_bytes."""

    def test_utf8_passes_through(self):
        decoded = decode_schedule_bytes(POLISH_SCHEDULE.encode('utf-8'))
        assert decoded.text == POLISH_SCHEDULE
        assert decoded.encoding == 'utf-8'
        assert decoded.replacement_count == 0

    def test_cp1250_is_recovered(self):
        """A cp1250 file read as UTF-8 is full of replacement characters and gets re-decoded."""
        content = POLISH_SCHEDULE.encode('cp1250')
        naive = content.decode('utf-8', errors='replace')
        assert count_replacement_chars(naive) >= 5

        decoded = decode_schedule_bytes(content)
        assert decoded.encoding == 'cp1250'
        assert decoded.replacement_count == 0
        assert decoded.text == POLISH_SCHEDULE

    def test_bom_is_honoured_and_stripped(self):
        for encoding, bom in (('utf-8', codecs.BOM_UTF8), ('utf-16-le', codecs.BOM_UTF16_LE)):
            decoded = decode_schedule_bytes(bom + POLISH_SCHEDULE.encode(encoding))
            assert decoded.encoding == encoding
            assert decoded.text == POLISH_SCHEDULE

    def test_few_replacements_are_tolerated(self):
        content = b"Data;Rata\n15.01.2024;1000,00 \xff\n"
        decoded = decode_schedule_bytes(content)
        assert decoded.encoding == 'utf-8'
        assert decoded.replacement_count == 1

    def test_threshold_comes_from_config(self):
        content = "zażółć".encode('cp1250')
        assert decode_schedule_bytes(content).encoding == 'utf-8'
        assert decode_schedule_bytes(content, ScheduleParserConfig(mojibake_threshold=1)).encoding == 'cp1250'

    def test_last_attempt_kept_when_nothing_is_clean(self):
        config = ScheduleParserConfig(mojibake_threshold=1, fallback_encodings=('ascii',))
        decoded = decode_schedule_bytes("zażółć".encode('cp1250'), config)
        assert decoded.encoding == 'ascii'
        assert decoded.replacement_count > 0

    def test_iso8859_2_when_cp1250_leaves_gaps(self):
        # 0x81 0x83 0x88 0x90 0x98 are unassigned in cp1250
        content = b"Data;Rata\x81\x83\x88\x90\x98 \xb1\xe6\n"
        assert count_replacement_chars(content.decode('cp1250', errors='replace')) >= 5

        decoded = decode_schedule_bytes(content)
        assert decoded.encoding == 'iso8859_2'
        assert decoded.replacement_count == 0
        assert decoded.text.endswith("ąć\n")


class TestHelpers:
    def test_detect_bom(self):
        assert detect_bom(codecs.BOM_UTF8 + b'x') == ('utf-8', 3)
        assert detect_bom(codecs.BOM_UTF32_LE + b'x') == ('utf-32-le', 4)
        assert detect_bom(b'Data') == (None, 0)

    def test_looks_like_mojibake(self):
        assert not looks_like_mojibake("abc")
        assert not looks_like_mojibake(REPLACEMENT_CHAR * 4)
        assert looks_like_mojibake(REPLACEMENT_CHAR * 5)
        assert looks_like_mojibake(REPLACEMENT_CHAR * 2, threshold=2)

    def test_register_legacy_codecs(self):
        resolved = register_legacy_codecs()
        assert resolved[0] == 'cp1250'
        assert len(resolved) == 2

    def test_register_unknown_codec_fails(self):
        with pytest.raises(LookupError):
            register_legacy_codecs(('no-such-codec',))


class TestReadScheduleText:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "schedule.csv"
        path.write_bytes(POLISH_SCHEDULE.encode('cp1250'))

        decoded = read_schedule_text(path)
        assert decoded.text == POLISH_SCHEDULE
        assert decoded.encoding == 'cp1250'

    def test_empty_path(self):
        for path in ("", "   ", None):
            with pytest.raises(InvalidArgument):
                read_schedule_text(path)

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            read_schedule_text("")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_schedule_text(tmp_path / "missing.csv")
