"""Transaction handling shared by the workflow services."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from festivalhub.core.exceptions import AuthorizationError, ConflictError, PreconditionFailedError
from festivalhub.core.locking import FestivalLockRegistry, festival_locks
from festivalhub.core.permissions import Action, Actor, Subject, authorize
from festivalhub.database import AsyncSessionLocal
from festivalhub.models.festival import Festival

logger = logging.getLogger(__name__)


class TransactionalService:
    """Base class for services that own their unit of work.

    Each public operation runs in exactly one transaction. Any exception
    rolls it back, so callers never observe a partial update.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        locks: FestivalLockRegistry | None = None,
    ) -> None:
        self.session_factory = session_factory or AsyncSessionLocal
        self.locks = locks or festival_locks

    @asynccontextmanager
    async def transaction(self, festival_id: UUID | None = None) -> AsyncIterator[AsyncSession]:
        """Open a session and transaction, serialized per festival when given.

        Raises:
            PreconditionFailedError: If a row was modified concurrently
            ConflictError: If a uniqueness constraint is violated
        """
        lock = self.locks.get(festival_id) if festival_id is not None else nullcontext()
        async with lock:
            async with self.session_factory() as db:
                try:
                    async with db.begin():
                        yield db
                except StaleDataError as e:
                    logger.warning(f"Optimistic version check failed: {e}")
                    raise PreconditionFailedError(
                        "The resource was modified concurrently. Reload and retry."
                    ) from e
                except IntegrityError as e:
                    logger.warning(f"Integrity error: {e.orig}")
                    raise ConflictError("Resource conflicts with an existing record") from e


def festival_query(festival_id: UUID, *, for_update: bool = False) -> Select:
    """Select one festival, optionally taking its row lock.

    Every write to a festival or to one of its performances reads the festival
    with ``for_update=True``, so writers in different worker processes queue on
    the same row. The asyncio lock only covers one process.
    """
    stmt = select(Festival).where(Festival.id == festival_id)
    if for_update:
        # Refresh attributes already in the identity map from the locked row
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return stmt

def check_authorized(actor: Actor, action: Action, subject: Subject | None = None) -> None:
    """Consult the policy, logging denials before raising."""
    decision = authorize(actor, action, subject)
    if not decision:
        logger.warning(
            f"DENIED {action.value} for user={actor.id} role={actor.role.value}: {decision.reason}"
        )
        raise AuthorizationError(decision.reason)
