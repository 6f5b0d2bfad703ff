"""
Loan schedule ingestion and amortization engine.
"""

__version__ = "0.1.0"

from loan_schedule.services.schedule_parser import ScheduleParser, parse_schedule  # noqa: E402
