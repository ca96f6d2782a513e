"""Attendance engine CLI: run a report against the configured database.

Usage:
    python -m attendance_engine day   --company <uuid> --date 2024-03-04
    python -m attendance_engine day   --company <uuid> --date 2024-03-04 --employee <uuid>
    python -m attendance_engine month --company <uuid> --month 2024-02
    python -m attendance_engine month --company <uuid> --month 2024-02 --employee <uuid>

Reads DATABASE_URL and the policy settings from the environment / .env.
Prints the report as JSON.

Exit codes:
    0 = report produced
    1 = the engine rejected the request (not found, validation, timeout)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from attendance_engine.attendance.policy import AttendancePolicy
from attendance_engine.attendance.service import AttendanceService
from attendance_engine.common.constants import HolidayPrecedence
from attendance_engine.common.exceptions import AppException
from attendance_engine.common.log import configure_logging

logger = logging.getLogger("attendance_engine.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attendance_engine",
        description="Workify attendance engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", type=str, default=None,
                        help="Override LOG_LEVEL (debug, info, warning, ...)")
    parser.add_argument("--holiday-precedence", type=HolidayPrecedence, default=None,
                        choices=list(HolidayPrecedence),
                        help="Override HOLIDAY_PRECEDENCE for this run")

    sub = parser.add_subparsers(dest="command", required=True)

    day = sub.add_parser("day", help="Company day report, or one employee's day")
    day.add_argument("--company", type=uuid.UUID, required=True, help="Company UUID")
    day.add_argument("--date", type=str, required=True, help="YYYY-MM-DD")
    day.add_argument("--employee", type=uuid.UUID, default=None,
                     help="Classify a single employee instead of the whole company")

    month = sub.add_parser("month", help="Company month rollup, or one employee's month")
    month.add_argument("--company", type=uuid.UUID, required=True, help="Company UUID")
    month.add_argument("--month", type=str, required=True, help="YYYY-MM")
    month.add_argument("--employee", type=uuid.UUID, default=None,
                       help="Aggregate a single employee instead of the whole company")

    return parser


def _policy(args: argparse.Namespace) -> AttendancePolicy:
    policy = AttendancePolicy.from_settings()
    if args.holiday_precedence is not None:
        policy = policy.with_overrides(holiday_precedence=args.holiday_precedence)
    return policy


async def _report(db: AsyncSession, args: argparse.Namespace):
    policy = _policy(args)
    if args.command == "day":
        if args.employee is not None:
            return await AttendanceService.classify_day(
                db, args.employee, args.company, args.date, policy=policy,
            )
        return await AttendanceService.aggregate_company_day(
            db, args.company, args.date, policy=policy,
        )
    if args.employee is not None:
        return await AttendanceService.aggregate_month(
            db, args.employee, args.company, args.month, policy=policy,
        )
    return await AttendanceService.aggregate_company_month(
        db, args.company, args.month, policy=policy,
    )


async def run(
    args: argparse.Namespace,
    session_factory: Optional[async_sessionmaker] = None,
) -> int:
    """Produce the report for *args* and print it. Returns the exit code."""
    if session_factory is None:
        from attendance_engine.database import async_session_factory as session_factory

    async with session_factory() as db:
        try:
            report = await _report(db, args)
        except AppException as exc:
            logger.error("%s: %s", exc.title, exc.detail)
            print(json.dumps(exc.to_problem_detail(), indent=2))
            return 1

    print(report.model_dump_json(indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
