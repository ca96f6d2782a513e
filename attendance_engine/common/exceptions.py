"""Custom exceptions shaped as RFC 7807 Problem Details.

The engine has no HTTP layer; callers that expose it over HTTP can render
``AppException.to_problem_detail()`` directly.
"""

from __future__ import annotations

from typing import Any, Optional

BASE_ERROR_URI = "https://workify.app/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all engine exceptions → RFC 7807 JSON."""

    retryable: bool = False

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)

    def to_problem_detail(self, instance: Optional[str] = None) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": f"{BASE_ERROR_URI}/{self.error_type}",
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
        }
        if instance:
            body["instance"] = instance
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundException(AppException):
    """404: entity not found within the tenant."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationException(AppException):
    """422: malformed input (dates, months, references)."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


class DataSourceTimeoutError(AppException):
    """503: a record fetch exceeded its deadline. Safe to retry."""

    retryable = True

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        super().__init__(
            status_code=503,
            error_type="data-source-timeout",
            title="Data Source Timeout",
            detail=f"'{operation}' did not complete within {timeout_seconds:g}s.",
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class TenantIsolationError(AppException):
    """403: a row from one company was offered to another company's lookup."""

    def __init__(self, entity_type: str, expected_company: Any, actual_company: Any) -> None:
        super().__init__(
            status_code=403,
            error_type="tenant-isolation",
            title="Cross-Tenant Access",
            detail=(
                f"{entity_type} belongs to company '{actual_company}', "
                f"not '{expected_company}'."
            ),
        )
