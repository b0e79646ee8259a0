"""Workflow audit trail service."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festivalhub.models.audit import AuditLog


class AuditService:
    """Writes and reads the append-only workflow trail."""

    async def log_action(
        self,
        db: AsyncSession,
        actor_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Stage an entry in the caller's transaction.

        ``actor_id`` is the user whose request caused the entry. Cascade effects
        such as auto-rejection carry the id of the organizer who started the
        decision phase. The column is nulled only when that user is deleted.
        """
        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
        )
        db.add(entry)
        return entry

    async def log_transition(
        self,
        db: AsyncSession,
        actor_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_state: str | None,
        new_state: str | None,
        **extra: Any,
    ) -> AuditLog:
        """Log a state change."""
        new_values: dict[str, Any] = {"state": new_state}
        new_values.update(extra)
        return await self.log_action(
            db=db,
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values={"state": old_state} if old_state else None,
            new_values=new_values,
        )

    async def list_for_resource(self, db: AsyncSession, resource_id: UUID) -> list[AuditLog]:
        """Audit entries for one resource, oldest first."""
        result = await db.execute(
            select(AuditLog)
            .where(AuditLog.resource_id == resource_id)
            .order_by(AuditLog.created_at, AuditLog.id)
        )
        return list(result.scalars().all())


audit_service = AuditService()
