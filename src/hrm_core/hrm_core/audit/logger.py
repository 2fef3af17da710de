from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.enums import Role
from .model import AuditEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditLogger:
    """Best-effort audit trail: a failed write is logged, never raised to the caller."""

    def __init__(self, repo: AuditRepository, *, module: str):
        self._repo = repo
        self._module = module

    def record(
        self,
        *,
        actor_id: str,
        actor_role: Optional[Role],
        action: str,
        target_type: Optional[str] = None,
        target_id: Any = None,
        metadata: Optional[dict] = None,
    ) -> None:
        entry = AuditEntry(
            module=self._module,
            action=action,
            actor_id=str(actor_id),
            actor_role=actor_role.value if actor_role else None,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else None,
            metadata=metadata or {},
        )
        try:
            self._repo.create(entry)
        except Exception:
            logger.warning("audit log create failed (%s.%s target=%s)", self._module, action, target_id, exc_info=True)
