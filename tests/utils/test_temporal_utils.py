"""
Unit tests for temporal utility functions.
"""
import unittest
from datetime import date

from loan_schedule.utils.temporal_utils import (
    add_months,
    days_in_month,
    due_day_in_month,
    is_working_day,
    shift_off_weekend,
)


class TestTemporalUtils(unittest.TestCase):
    def test_days_in_month(self):
        self.assertEqual(days_in_month(2024, 2), 29)
        self.assertEqual(days_in_month(2023, 2), 28)
        self.assertEqual(days_in_month(2024, 4), 30)
        self.assertEqual(days_in_month(2024, 12), 31)

    def test_due_day_is_clamped(self):
        self.assertEqual(due_day_in_month(2024, 2, 31), date(2024, 2, 29))
        self.assertEqual(due_day_in_month(2024, 4, 31), date(2024, 4, 30))
        self.assertEqual(due_day_in_month(2024, 5, 10), date(2024, 5, 10))

    def test_add_months(self):
        self.assertEqual(add_months(date(2024, 1, 31), 1), date(2024, 2, 29))
        self.assertEqual(add_months(date(2024, 3, 31), -1), date(2024, 2, 29))
        self.assertEqual(add_months(date(2024, 12, 15), 1), date(2025, 1, 15))

    def test_shift_off_weekend(self):
        """Test Saturday and Sunday move to Monday, weekdays stay."""
        test_cases = [
            (date(2024, 6, 15), date(2024, 6, 17)),  # Saturday
            (date(2024, 6, 16), date(2024, 6, 17)),  # Sunday
            (date(2024, 6, 14), date(2024, 6, 14)),  # Friday
            (date(2024, 6, 17), date(2024, 6, 17)),  # Monday
        ]
        for given, expected in test_cases:
            with self.subTest(given=given):
                self.assertEqual(shift_off_weekend(given), expected)
                self.assertTrue(is_working_day(shift_off_weekend(given)))

    def test_is_working_day(self):
        self.assertTrue(is_working_day(date(2024, 6, 14)))
        self.assertFalse(is_working_day(date(2024, 6, 15)))


if __name__ == '__main__':
    unittest.main()
