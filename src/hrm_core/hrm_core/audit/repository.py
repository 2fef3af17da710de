from __future__ import annotations

from typing import Protocol

from .model import AuditEntry


class AuditRepository(Protocol):
    def create(self, entry: AuditEntry) -> int:
        raise NotImplementedError
