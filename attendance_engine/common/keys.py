"""Composite lookup keys that bind every entity id to its tenant."""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class TenantKey:
    """``(company_id, entity_id)``, the only way to address a tenant-owned row."""

    company_id: uuid.UUID
    entity_id: uuid.UUID

    def __str__(self) -> str:
        return f"{self.company_id}/{self.entity_id}"

    def owns(self, company_id: uuid.UUID) -> bool:
        return self.company_id == company_id
