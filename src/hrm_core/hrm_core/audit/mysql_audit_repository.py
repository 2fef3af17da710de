from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(module, action, actor_id, actor_role, target_type, target_id, metadata)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.module,
                    entry.action,
                    entry.actor_id,
                    entry.actor_role,
                    entry.target_type,
                    entry.target_id,
                    dump_json(entry.metadata),
                ),
            )
            return int(cur.lastrowid)
