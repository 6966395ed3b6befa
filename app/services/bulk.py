from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from sqlalchemy import delete, select, update

from app.core.errors import BulkTooLargeError, EmptyIdSetError, ValidationError
from app.db.base import utcnow
from app.models.abstract import Abstract
from app.models.review import Review
from app.services.base import SessionService, bounded
from app.services.submission_store import SubmissionStore, ensure_canonical_status

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    count: int
    ids: list[int] = field(default_factory=list)
    requested: int = 0

    @property
    def partial(self) -> bool:
        return self.count < self.requested


class BulkOperationExecutor(SessionService):
    """
    Admin bulk actions over abstracts.

    Per-item accounting: ids that do not exist are left out of the result
    instead of failing the batch. Each statement is atomic; the batch as a
    whole is not re-run or compensated after a crash.
    """

    def __init__(self, store: SubmissionStore, max_ids: int = 100):
        super().__init__(store.session_factory, store.timeout_seconds)
        self._store = store
        self.max_ids = max_ids

    def _check_ids(self, ids: Iterable[Any] | None) -> list[int]:
        if ids is None:
            raise EmptyIdSetError()
        unique: list[int] = []
        for raw in ids:
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise ValidationError("IDs must be integers", {"id": raw})
            if raw not in unique:
                unique.append(raw)
        if not unique:
            raise EmptyIdSetError()
        if len(unique) > self.max_ids:
            raise BulkTooLargeError(len(unique), self.max_ids)
        return unique

    @bounded
    async def bulk_set_status(
        self,
        ids: Iterable[Any],
        status: Any,
        admin_notes: str | None = None,
        review_comments: str | None = None,
    ) -> BulkResult:
        wanted = self._check_ids(ids)
        status = ensure_canonical_status(status)

        values: dict[str, Any] = {"status": status, "updated_at": utcnow()}
        if admin_notes is not None:
            values["admin_notes"] = admin_notes
        if review_comments is not None:
            values["reviewer_comments"] = review_comments

        async with self._transaction() as session:
            found = list(await session.scalars(
                select(Abstract.id).where(Abstract.id.in_(wanted)).order_by(Abstract.id)
            ))
            if found:
                await session.execute(
                    update(Abstract)
                    .where(Abstract.id.in_(found))
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )

        await self._store.mirror_form_status(found, status, admin_notes, review_comments)
        logger.info("Bulk status %s applied to %d of %d abstracts", status, len(found), len(wanted))
        return BulkResult(count=len(found), ids=found, requested=len(wanted))

    @bounded
    async def bulk_delete(self, ids: Iterable[Any]) -> BulkResult:
        wanted = self._check_ids(ids)

        async with self._transaction() as session:
            found = list(await session.scalars(
                select(Abstract.id).where(Abstract.id.in_(wanted)).order_by(Abstract.id)
            ))
            if found:
                await session.execute(delete(Review).where(Review.abstract_id.in_(found)))
                await session.execute(delete(Abstract).where(Abstract.id.in_(found)))

        logger.info("Bulk delete removed %d of %d abstracts", len(found), len(wanted))
        return BulkResult(count=len(found), ids=found, requested=len(wanted))
