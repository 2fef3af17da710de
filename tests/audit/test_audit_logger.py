import logging

from src.hrm_core.hrm_core.audit.logger import AuditLogger
from src.hrm_core.hrm_core.core.enums import Role


def test_record_writes_entry(audit_repo):
    AuditLogger(audit_repo, module="salary").record(
        actor_id="u1",
        actor_role=Role.HR,
        action="update",
        target_type="salary",
        target_id=7,
        metadata={"status": "paid"},
    )

    entry = audit_repo.entries[0]
    assert (entry.module, entry.action, entry.actor_role, entry.target_id) == ("salary", "update", "hr", "7")
    assert entry.metadata == {"status": "paid"}


def test_failed_write_is_logged_not_raised(broken_audit_repo, caplog):
    with caplog.at_level(logging.WARNING):
        AuditLogger(broken_audit_repo, module="leave").record(actor_id="u1", actor_role=None, action="approve", target_id=3)

    assert "audit log create failed" in caplog.text
