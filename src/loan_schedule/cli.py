#!/usr/bin/env python3
"""
Command line entry point for the loan schedule engine.

Usage:
    loan-schedule parse FILE [--json] [--show-skipped]
    loan-schedule payment --principal P --rate R --term N [--start DATE] [--payment-day D] [--schedule] [--json]

Exit codes:
    0    Success
    1    Schedule file not found
    2    Invalid argument, or the date and amount columns could not be found
"""

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from loan_schedule.models.loan_parameters import LoanParameters
from loan_schedule.models.parse_result import ScheduleParseResult
from loan_schedule.services.amortization import (
    first_installment_breakdown,
    generate_annuity_schedule,
    monthly_payment,
)
from loan_schedule.services.schedule_parser import ScheduleParser
from loan_schedule.utils.errors import MissingRequiredColumns
from loan_schedule.utils.field_parsers import parse_date
from loan_schedule.utils.parser_config import ScheduleParserConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2


def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value.replace(',', '.'))
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")


def _date_arg(value: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"not a date: {value!r}")
    return parsed


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='loan-schedule',
        description='Read bank loan schedule exports and compute annuity figures',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    parse_cmd = subparsers.add_parser('parse', help='Parse a schedule CSV export')
    parse_cmd.add_argument('file', help='Path to the CSV file')
    parse_cmd.add_argument('--json', action='store_true', help='Print the result as JSON')
    parse_cmd.add_argument('--show-skipped', action='store_true',
                           help='Also list the rows that were skipped and why')

    payment_cmd = subparsers.add_parser('payment', help='Compute the monthly installment of an annuity loan')
    payment_cmd.add_argument('--principal', type=_decimal_arg, required=True, help='Amount borrowed')
    payment_cmd.add_argument('--rate', type=_decimal_arg, required=True, help='Yearly rate in percent, e.g. 7.25')
    payment_cmd.add_argument('--term', type=int, required=True, help='Number of monthly installments')
    payment_cmd.add_argument('--start', type=_date_arg, default=None, help='Loan start date (default: today)')
    payment_cmd.add_argument('--payment-day', type=int, default=0, help='Day of month installments are due')
    payment_cmd.add_argument('--schedule', action='store_true', help='Print the full projected schedule')
    payment_cmd.add_argument('--json', action='store_true', help='Print the result as JSON')

    return parser


def _parse_result_to_dict(result: ScheduleParseResult, show_skipped: bool) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        'encoding': result.encoding,
        'delimiter': result.context.delimiter,
        'headerRowIndex': result.context.header_row_index,
        'columns': {f.value: idx for f, idx in result.context.column_map.items()},
        'installments': [r.to_dict() for r in result.installments],
    }
    if show_skipped:
        data['skipped'] = [
            {'row': s.row_index, 'reason': s.reason.value, 'cells': list(s.raw)}
            for s in result.skipped()
        ]
    return data


def run_parse(args: argparse.Namespace) -> int:
    parser = ScheduleParser(ScheduleParserConfig.from_environment())
    result = parser.parse_file(args.file)

    if args.json:
        print(json.dumps(_parse_result_to_dict(result, args.show_skipped), indent=2, ensure_ascii=False))
        return EXIT_OK

    print(f"Encoding: {result.encoding} | {result.context.describe()}")
    for record in result.installments:
        print(record)
    print(f"{len(result.installments)} installments")

    if args.show_skipped:
        for skipped in result.skipped():
            print(f"skipped row {skipped.row_index} ({skipped.reason.value}): {' | '.join(skipped.raw)}")
    return EXIT_OK


def run_payment(args: argparse.Namespace) -> int:
    params = LoanParameters(
        principal=args.principal,
        annual_rate_percent=args.rate,
        term_months=args.term,
        start_date=args.start or date.today(),
        payment_day=args.payment_day,
    )
    payment = monthly_payment(params.principal, params.annual_rate_percent, params.term_months)
    breakdown = first_installment_breakdown(params.principal, params.annual_rate_percent, params.term_months)
    schedule = generate_annuity_schedule(params) if args.schedule else []

    if args.json:
        data: Dict[str, Any] = {
            'monthlyPayment': str(payment),
            'firstInterestPart': str(breakdown.interest_part),
            'firstPrincipalPart': str(breakdown.principal_part),
        }
        if args.schedule:
            data['schedule'] = [r.to_dict() for r in schedule]
        print(json.dumps(data, indent=2))
        return EXIT_OK

    print(f"Monthly payment: {payment}")
    print(f"First installment: interest {breakdown.interest_part}, principal {breakdown.principal_part}")
    for record in schedule:
        print(f"{record.installment_number:>4} | {record} | balance: {record.remaining_balance:.2f}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface and return the process exit code."""
    args = build_arg_parser().parse_args(argv)

    try:
        if args.command == 'parse':
            return run_parse(args)
        return run_payment(args)
    except FileNotFoundError as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except MissingRequiredColumns as e:
        logger.error(f"Schedule structure not recognised: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except ValueError as e:
        # Covers InvalidArgument and pydantic validation of loan parameters
        logger.error(f"Invalid argument: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == '__main__':
    sys.exit(main())
