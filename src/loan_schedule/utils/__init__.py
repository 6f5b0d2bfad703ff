"""
Utils package.

Parsing Conventions:
- Cell parsers never raise on bad text; they return None and the caller decides.
- All money values are Decimal, all dates are datetime.date.
- Thresholds and sample sizes come from ScheduleParserConfig, never from literals.
- Only utils.errors exceptions (and FileNotFoundError) leave the pipeline.
"""
