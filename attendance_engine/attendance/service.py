"""Attendance service layer: the engine's public operations.

Business logic:
  - Expected shift for an employee/date (special day → holiday → weekly → calendar)
  - Per-day classification against recorded time entries
  - Monthly KPIs for one employee or a whole company
  - Company-day head counts with partial-failure reporting

All methods are static async and take the session first, following the
project convention. Data is batch-fetched once per call; the per-date work
is pure.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.attendance.aggregation import MonthlyAggregator
from attendance_engine.attendance.policy import AttendancePolicy
from attendance_engine.attendance.repository import AttendanceRepository, CompanySnapshot
from attendance_engine.attendance.schemas import (
    AggregationFailure,
    CompanyDayReport,
    CompanyMonthReport,
    DailySummary,
    DayResult,
    EmployeeBrief,
    EmployeeMonthlyReport,
    EmployeeMonthSummary,
    MonthlyKPIs,
)
from attendance_engine.common.constants import DayStatus, EmployeeStatus
from attendance_engine.common.dates import month_bounds, parse_date, parse_year_month
from attendance_engine.common.exceptions import AppException, ValidationException
from attendance_engine.common.keys import TenantKey
from attendance_engine.core_hr.models import Employee
from attendance_engine.scheduling.schemas import ExpectedShift

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# AttendanceService
# ═════════════════════════════════════════════════════════════════════


class AttendanceService:
    """Async entry points for collaborators (API handlers, dashboards, reports)."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _policy(policy: Optional[AttendancePolicy]) -> AttendancePolicy:
        return policy or AttendancePolicy.from_settings()

    @staticmethod
    def _require_active(employee: Employee) -> None:
        if employee.status != EmployeeStatus.active:
            raise ValidationException(
                {"employee_id": [f"Employee is {employee.status.value}; only ACTIVE employees are resolved."]}
            )

    @staticmethod
    async def _load_employee_snapshot(
        db: AsyncSession,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        start: date,
        end: date,
    ) -> tuple[Employee, CompanySnapshot]:
        employee = await AttendanceRepository.get_employee(db, TenantKey(company_id, employee_id))
        AttendanceService._require_active(employee)
        snapshot = await AttendanceRepository.load_snapshot(
            db, company_id, start, end, employee_ids=[employee.id],
        )
        return employee, snapshot

    @staticmethod
    def _failure(subject_id: uuid.UUID, exc: Exception) -> AggregationFailure:
        if isinstance(exc, AppException):
            return AggregationFailure(
                subject_id=subject_id,
                error_type=exc.error_type,
                detail=exc.detail,
                retryable=exc.retryable,
            )
        return AggregationFailure(
            subject_id=subject_id,
            error_type=type(exc).__name__,
            detail=str(exc),
        )

    # ── Expected shift ──────────────────────────────────────────────

    @staticmethod
    async def resolve_expected_shift(
        db: AsyncSession,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        on: date | str,
        *,
        policy: Optional[AttendancePolicy] = None,
    ) -> ExpectedShift:
        """Whether *on* is a work day for the employee, and on which shift."""

        on = parse_date(on)
        policy = AttendanceService._policy(policy)
        employee, snapshot = await AttendanceService._load_employee_snapshot(
            db, employee_id, company_id, on, on,
        )
        return snapshot.schedule_resolver(policy).resolve_expected_shift(employee.id, company_id, on)

    # ── Single day ──────────────────────────────────────────────────

    @staticmethod
    async def classify_day(
        db: AsyncSession,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        on: date | str,
        *,
        policy: Optional[AttendancePolicy] = None,
    ) -> DayResult:
        """Resolve the expectation and classify the recorded time entries for one day."""

        on = parse_date(on)
        policy = AttendanceService._policy(policy)
        employee, snapshot = await AttendanceService._load_employee_snapshot(
            db, employee_id, company_id, on, on,
        )
        expected = snapshot.schedule_resolver(policy).resolve_expected_shift(employee.id, company_id, on)
        return snapshot.classifier(policy).classify_day(
            employee.id, on, expected, snapshot.entries_for(employee.id, on),
        )

    # ── Employee month ──────────────────────────────────────────────

    @staticmethod
    async def aggregate_month(
        db: AsyncSession,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        year_month: str,
        *,
        policy: Optional[AttendancePolicy] = None,
    ) -> EmployeeMonthlyReport:
        """Every day of ``YYYY-MM`` for one employee, reduced into KPIs."""

        year, month = parse_year_month(year_month)
        start, end = month_bounds(year, month)
        policy = AttendanceService._policy(policy)
        employee, snapshot = await AttendanceService._load_employee_snapshot(
            db, employee_id, company_id, start, end,
        )

        aggregator = MonthlyAggregator(snapshot.schedule_resolver(policy), snapshot.classifier(policy))
        days, kpis = aggregator.aggregate_month(
            employee.id, company_id, year_month, snapshot.entries_for,
        )
        logger.info(
            "Aggregated %s for employee=%s: work_days=%d present=%d late=%d absent=%d incidents=%d",
            year_month, employee.id, kpis.work_days, kpis.present_days,
            kpis.late_days, kpis.absent_days, kpis.incidents,
        )
        return EmployeeMonthlyReport(
            employee=EmployeeBrief.model_validate(employee),
            month=year_month,
            days=days,
            kpis=kpis,
        )

    # ── Company day ─────────────────────────────────────────────────

    @staticmethod
    async def aggregate_company_day(
        db: AsyncSession,
        company_id: uuid.UUID,
        on: date | str,
        *,
        policy: Optional[AttendancePolicy] = None,
    ) -> CompanyDayReport:
        """Classify every active employee of the company for one date.

        One employee's failure is reported in ``failures`` and does not stop
        the others.
        """

        on = parse_date(on)
        policy = AttendanceService._policy(policy)
        snapshot = await AttendanceRepository.load_snapshot(db, company_id, on, on)
        resolver = snapshot.schedule_resolver(policy)
        classifier = snapshot.classifier(policy)

        employees = snapshot.active_employees()
        per_employee: list[DayResult] = []
        failures: list[AggregationFailure] = []
        summary = DailySummary()

        for employee in employees:
            try:
                expected = resolver.resolve_expected_shift(employee.id, company_id, on)
                result = classifier.classify_day(
                    employee.id, on, expected, snapshot.entries_for(employee.id, on),
                )
            except Exception as exc:
                logger.exception("Classification failed for employee=%s date=%s", employee.id, on)
                failures.append(AttendanceService._failure(employee.id, exc))
                continue

            per_employee.append(result)
            if result.status == DayStatus.present:
                summary.present += 1
                summary.working += 1
            elif result.status == DayStatus.late:
                summary.late += 1
                summary.working += 1
            elif result.status == DayStatus.absent:
                summary.absent += 1
            else:
                summary.not_scheduled += 1
            if result.has_incident:
                summary.incidents += 1

        is_work_day, reason = resolver.company_work_day(on)
        return CompanyDayReport(
            company_id=company_id,
            date=on,
            is_work_day=is_work_day,
            work_day_reason=reason,
            active=len(employees),
            scheduled=sum(1 for r in per_employee if r.is_work_day),
            summary=summary,
            per_employee=per_employee,
            failures=failures,
        )

    # ── Company month ───────────────────────────────────────────────

    @staticmethod
    async def aggregate_company_month(
        db: AsyncSession,
        company_id: uuid.UUID,
        year_month: str,
        *,
        policy: Optional[AttendancePolicy] = None,
    ) -> CompanyMonthReport:
        """Monthly KPIs for every active employee plus company totals.

        Yields to the event loop between employees so a cancelled caller
        stops the rollup promptly; nothing shared is mutated, so a cancelled
        rollup leaves no partial state behind.
        """

        year, month = parse_year_month(year_month)
        start, end = month_bounds(year, month)
        policy = AttendanceService._policy(policy)
        snapshot = await AttendanceRepository.load_snapshot(db, company_id, start, end)
        aggregator = MonthlyAggregator(snapshot.schedule_resolver(policy), snapshot.classifier(policy))

        summaries: list[EmployeeMonthSummary] = []
        failures: list[AggregationFailure] = []
        for employee in snapshot.active_employees():
            await asyncio.sleep(0)
            try:
                _, kpis = aggregator.aggregate_month(
                    employee.id, company_id, year_month, snapshot.entries_for,
                )
            except Exception as exc:
                logger.exception("Monthly aggregation failed for employee=%s month=%s", employee.id, year_month)
                failures.append(AttendanceService._failure(employee.id, exc))
                continue
            summaries.append(
                EmployeeMonthSummary(employee=EmployeeBrief.model_validate(employee), kpis=kpis)
            )

        totals: MonthlyKPIs = MonthlyAggregator.combine(s.kpis for s in summaries)
        logger.info(
            "Aggregated %s for company=%s: employees=%d failures=%d",
            year_month, company_id, len(summaries), len(failures),
        )
        return CompanyMonthReport(
            company_id=company_id,
            month=year_month,
            employees=summaries,
            totals=totals,
            failures=failures,
        )
