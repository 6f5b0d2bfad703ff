"""
Tests for the schedule parser service.
"""
import random
import unittest
from datetime import date, timedelta
from decimal import Decimal

import pytest

from loan_schedule.models.parse_context import SemanticField
from loan_schedule.models.parse_result import SkipReason
from loan_schedule.services.schedule_parser import ScheduleParser, parse_schedule
from loan_schedule.utils.errors import InvalidArgument, MissingRequiredColumns

SUMA_SCHEDULE = "\n".join([
    "Data;Rata;Kapitał;Odsetki",
    "01.03.2024;1000,00;800,00;200,00",
    "Suma;1000,00;800,00;200,00",
])


class TestScheduleParser(unittest.TestCase):
    def setUp(self):
        """Set up test fixtures."""
        self.parser = ScheduleParser()

    def test_summary_row_is_excluded(self):
        """Test that a "Suma" row is dropped and the one real row is kept."""
        result = self.parser.parse_text(SUMA_SCHEDULE)

        self.assertEqual(len(result.installments), 1)
        record = result.installments[0]
        self.assertEqual(record.due_date, date(2024, 3, 1))
        self.assertEqual(record.total_amount, Decimal("1000.00"))
        self.assertEqual(record.principal_amount, Decimal("800.00"))
        self.assertEqual(record.interest_amount, Decimal("200.00"))
        self.assertIsNone(record.remaining_balance)
        self.assertIsNone(record.installment_number)

        self.assertEqual(result.context.delimiter, ";")
        self.assertEqual(result.context.header_row_index, 0)
        self.assertEqual([s.reason for s in result.skipped()], [SkipReason.SUMMARY_ROW])

    def test_skip_reasons(self):
        """Test that each unusable row is reported with its reason and position."""
        text = "\n".join([
            "Data;Rata;Kapitał;Odsetki",
            "01.03.2024;1000,00;800,00;200,00",
            "xx.03.2024;1000,00;800,00;200,00",
            "01.04.2024;abc;800,00;200,00",
            "01.05.2024;0,00;0,00;0,00",
            "01.06.2024",
            "Razem;3000,00;;",
            "Podsumowanie;1;2;3",
        ])
        result = self.parser.parse_text(text)

        self.assertEqual(result.accepted_count, 1)
        expected = [
            (2, SkipReason.INVALID_DATE),
            (3, SkipReason.INVALID_TOTAL),
            (4, SkipReason.NON_POSITIVE_TOTAL),
            (5, SkipReason.ROW_TOO_SHORT),
            (6, SkipReason.SUMMARY_ROW),
            (7, SkipReason.SUMMARY_ROW),
        ]
        self.assertEqual([(s.row_index, s.reason) for s in result.skipped()], expected)
        self.assertEqual(result.skipped(SkipReason.INVALID_TOTAL)[0].raw, ("01.04.2024", "abc", "800,00", "200,00"))
        self.assertEqual(len(result.outcomes), 7)

    def test_unparseable_optional_amounts_are_left_unset(self):
        text = "\n".join([
            "Data;Rata;Kapitał;Odsetki",
            "01.03.2024;1000,00;n/a;200,00",
            "01.04.2024;1000,00;810,00",
        ])
        result = self.parser.parse_text(text)

        self.assertEqual(len(result.installments), 2)
        self.assertIsNone(result.installments[0].principal_amount)
        self.assertEqual(result.installments[0].interest_amount, Decimal("200.00"))
        self.assertEqual(result.installments[1].principal_amount, Decimal("810.00"))
        self.assertIsNone(result.installments[1].interest_amount)

    def test_sorted_by_due_date_and_stable(self):
        text = "\n".join([
            "Data;Rata",
            "01.05.2024;300,00",
            "01.03.2024;100,00",
            "01.04.2024;201,00",
            "01.04.2024;202,00",
        ])
        result = self.parser.parse_text(text)

        self.assertEqual(
            [r.total_amount for r in result.installments],
            [Decimal("100.00"), Decimal("201.00"), Decimal("202.00"), Decimal("300.00")],
        )

    def test_delimiter_invariance(self):
        rows = [
            ["Termin", "Kwota raty", "Kapitał", "Odsetki"],
            ["15.01.2024", "1000,00", "800,00", "200,00"],
            ["15.02.2024", "1000,00", "810,00", "190,00"],
            ["15.03.2024", "1000,00", "820,00", "180,00"],
        ]
        for delimiter in (";", ",", "\t", "|"):
            with self.subTest(delimiter=delimiter):
                text = "\n".join(delimiter.join(f'"{c}"' for c in row) for row in rows)
                result = self.parser.parse_text(text)
                self.assertEqual(result.context.delimiter, delimiter)
                self.assertEqual(len(result.installments), 3)
                self.assertEqual(result.installments[2].principal_amount, Decimal("820.00"))

    def test_preamble_and_quoted_multiline_cells(self):
        text = (
            "Bank Przykładowy S.A.\r\n"
            "Harmonogram spłat kredytu\r\n"
            "\r\n"
            "Lp.;Data płatności;Rata łączna;Opis\r\n"
            '1;15.01.2024;"1 000,00 zł";"rata\r\nkapitałowo-odsetkowa"\r\n'
            '2;15.02.2024;"1 000,00 zł";"rata"\r\n'
        )
        result = self.parser.parse_text(text)

        self.assertEqual(result.context.header_row_index, 2)
        self.assertEqual(result.context.column(SemanticField.DATE), 1)
        self.assertEqual(result.context.column(SemanticField.TOTAL), 2)
        self.assertEqual([r.due_date for r in result.installments], [date(2024, 1, 15), date(2024, 2, 15)])

    def test_headerless_file(self):
        lines = []
        for i in range(1, 13):
            interest = 200 - 10 * i
            lines.append(f"{i};15.{i:02d}.2024;1000,00;{1000 - interest},00;{interest},00")
        result = self.parser.parse_text("\n".join(lines))

        self.assertEqual(result.context.header_row_index, -1)
        self.assertEqual(len(result.installments), 12)
        first = result.installments[0]
        self.assertEqual(first.due_date, date(2024, 1, 15))
        self.assertEqual(first.principal_amount + first.interest_amount, first.total_amount)

    def test_headerless_file_with_total_after_breakdown(self):
        lines = []
        for i in range(1, 13):
            interest = 200 - 10 * i
            lines.append(f"{i};15.{i:02d}.2024;{1000 - interest},00;{interest},00;1000,00;{12000 - 1000 * i},00")
        result = self.parser.parse_text("\n".join(lines))

        first = result.installments[0]
        self.assertEqual(first.total_amount, Decimal("1000.00"))
        self.assertEqual(first.principal_amount, Decimal("810.00"))
        self.assertEqual(first.interest_amount, Decimal("190.00"))

    def test_empty_inputs_give_empty_result(self):
        for text in ("", "\n\r\n", "Data;Rata"):
            with self.subTest(text=text):
                result = self.parser.parse_text(text)
                self.assertEqual(result.installments, [])
                self.assertTrue(result.is_empty())

    def test_missing_required_columns(self):
        text = "foo;bar\nabc;def\nghi;jkl\n"
        with self.assertRaises(MissingRequiredColumns):
            self.parser.parse_text(text)

    def test_idempotent(self):
        first = self.parser.parse_text(SUMA_SCHEDULE)
        second = self.parser.parse_text(SUMA_SCHEDULE)
        self.assertEqual(first.installments, second.installments)


class TestWellFormedRows:
    """N well-formed rows always give N records sorted by due date."""

    @pytest.mark.parametrize("count", [1, 5, 37, 120])
    def test_row_count_and_order(self, count):
        rng = random.Random(count)
        start = date(2020, 1, 1)
        dates = [start + timedelta(days=rng.randint(0, 3000)) for _ in range(count)]
        lines = ["Data spłaty;Rata"] + [
            f"{d:%d.%m.%Y};{rng.randint(1, 999999)},{rng.randint(0, 99):02d}" for d in dates
        ]

        result = ScheduleParser().parse_text("\n".join(lines))

        assert len(result.installments) == count
        due_dates = [r.due_date for r in result.installments]
        assert due_dates == sorted(dates)


class TestParseFile:
    @pytest.mark.integration
    def test_cp1250_file(self, tmp_path):
        text = (
            "Harmonogram spłat kredytu hipotecznego: Łódź\n"
            "Data spłaty;Rata łączna;Kapitał;Odsetki;Saldo zadłużenia\n"
            "15.01.2024;1000,00;800,00;200,00;11200,00\n"
            "15.02.2024;1000,00;810,00;190,00;10390,00\n"
            "15.03.2024;1000,00;820,00;180,00;9570,00\n"
        )
        path = tmp_path / "harmonogram.csv"
        path.write_bytes(text.encode('cp1250'))

        result = ScheduleParser().parse_file(path)

        assert result.encoding == 'cp1250'
        assert result.context.header_row_index == 1
        assert result.context.column(SemanticField.BALANCE) == 4
        assert [r.remaining_balance for r in result.installments] == [
            Decimal("11200.00"), Decimal("10390.00"), Decimal("9570.00"),
        ]

    def test_parse_bytes_reports_encoding(self):
        result = ScheduleParser().parse_bytes(SUMA_SCHEDULE.encode('utf-8'))
        assert result.encoding == 'utf-8'
        assert len(result.installments) == 1

    def test_parse_schedule(self, tmp_path):
        path = tmp_path / "schedule.csv"
        path.write_text(SUMA_SCHEDULE, encoding='utf-8')

        installments = parse_schedule(path)

        assert len(installments) == 1
        assert installments[0].total_amount == Decimal("1000.00")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_schedule(tmp_path / "nope.csv")

    def test_empty_path(self):
        with pytest.raises(InvalidArgument):
            ScheduleParser().parse_file("")


if __name__ == '__main__':
    unittest.main()
