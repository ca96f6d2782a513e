"""Core HR module: Company and Employee models."""

from attendance_engine.core_hr.models import Company, Employee

__all__ = ["Company", "Employee"]
