"""Mapper-level write guards using SQLAlchemy events.

Festivals lock their descriptive fields once announced and audit rows are
append-only. The services check the same rules before mutating; these
listeners refuse any flush that slips past them.
"""

import logging

from sqlalchemy import event, inspect

from festivalhub.core.exceptions import LockedError

logger = logging.getLogger(__name__)

_registered = False


class ImmutabilityViolationError(LockedError):
    """A flush tried to change a frozen row."""

    def __init__(self, table: str, record_id, reason: str):
        self.table = table
        self.record_id = str(record_id)
        super().__init__(f"{table} {self.record_id} is read-only: {reason}")


def _refuse(table: str, operation: str, record_id, reason: str) -> None:
    logger.error("Refused %s on read-only %s %s", operation, table, record_id)
    raise ImmutabilityViolationError(table, record_id, reason)


def _committed_value(target, attribute: str):
    """Value of ``attribute`` as last loaded from the database."""
    history = inspect(target).attrs[attribute].history
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return getattr(target, attribute)


def register_immutability_enforcement() -> None:
    """Attach the guards to the Festival and AuditLog mappers; idempotent."""
    global _registered
    if _registered:
        return

    from festivalhub.domain.festival_state import FestivalState
    from festivalhub.models.audit import AuditLog
    from festivalhub.models.festival import Festival

    @event.listens_for(Festival, "before_update")
    def prevent_announced_festival_update(mapper, connection, target):
        if _committed_value(target, "state") != FestivalState.ANNOUNCED.value:
            return
        state = inspect(target)
        changed = [
            name for name in Festival.DESCRIPTIVE_FIELDS if state.attrs[name].history.has_changes()
        ]
        if changed:
            _refuse("festival", "update", target.id, f"announced, cannot change {', '.join(changed)}")

    # Audit rows are append-only
    @event.listens_for(AuditLog, "before_update")
    def prevent_audit_update(mapper, connection, target):
        _refuse("audit_log", "update", target.id, "audit entries are append-only")

    @event.listens_for(AuditLog, "before_delete")
    def prevent_audit_delete(mapper, connection, target):
        _refuse("audit_log", "delete", target.id, "audit entries are append-only")

    _registered = True
    logger.debug("Write guards attached to festivals and audit_logs")
