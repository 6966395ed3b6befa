from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import AbstractNotFoundError, InvalidStatusError
from app.db.base import utcnow
from app.models.abstract import CANONICAL_STATUSES, PENDING_STATUSES, Abstract, AbstractStatus, SubmissionType
from app.models.form_submission import FormSubmission
from app.models.review import Review
from app.services.abstract_validation import ValidatedSubmission
from app.services.base import SessionService, bounded

logger = logging.getLogger(__name__)

FORM_TYPE_ABSTRACT = "abstract"

SORTABLE_FIELDS = {
    "created_at": Abstract.created_at,
    "updated_at": Abstract.updated_at,
    "title": Abstract.title,
    "status": Abstract.status,
    "track": Abstract.track,
}
DEFAULT_SORT = "created_at"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass
class AbstractFilters:
    status: str | None = None
    track: str | None = None
    search: str | None = None


@dataclass
class Page:
    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict[str, int]:
        return {"total": self.total, "page": self.page, "limit": self.limit, "pages": self.pages}


@dataclass
class StatsOverview:
    total: int
    by_status: dict[str, int]
    by_submission_type: dict[str, int]
    by_track: list[tuple[str, int]] = field(default_factory=list)


def ensure_canonical_status(status: Any) -> str:
    if not isinstance(status, str) or status not in CANONICAL_STATUSES:
        raise InvalidStatusError(status)
    return status


def normalize_paging(page: Any, limit: Any) -> tuple[int, int]:
    try:
        page = max(1, int(page))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(MAX_LIMIT, max(1, int(limit)))
    except (TypeError, ValueError):
        limit = DEFAULT_LIMIT
    return page, limit


def substring_pattern(term: str) -> str:
    # LIKE wildcards in user input match literally
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def normalize_sort(sort_by: Any, sort_order: Any):
    column = SORTABLE_FIELDS.get(sort_by) if isinstance(sort_by, str) else None
    if column is None:
        column = SORTABLE_FIELDS[DEFAULT_SORT]
    order = sort_order.upper() if isinstance(sort_order, str) else "DESC"
    if order not in ("ASC", "DESC"):
        order = "DESC"
    if order == "ASC":
        return column.asc(), Abstract.id.asc()
    return column.desc(), Abstract.id.desc()


async def advance_to_under_review(session: AsyncSession, abstract_id: int) -> bool:
    """
    Move an abstract from `submitted` to `under_review`.

    Conditional update: of several concurrent callers at most one sees a row change.
    """
    result = await session.execute(
        update(Abstract)
        .where(Abstract.id == abstract_id, Abstract.status == AbstractStatus.SUBMITTED.value)
        .values(status=AbstractStatus.UNDER_REVIEW.value, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _content_fields(submission: ValidatedSubmission) -> dict[str, Any]:
    return {
        "title": submission.title,
        "abstract": submission.abstract,
        "keywords": list(submission.keywords),
        "authors": [a.to_dict() for a in submission.authors],
        "corresponding_author_email": submission.corresponding_author_email,
        "submission_type": submission.submission_type,
        "track": submission.track,
        "subcategory": submission.subcategory,
        "cross_cutting_themes": list(submission.cross_cutting_themes),
        "format": submission.format,
        "file_url": submission.file_url,
        "submitted_by": submission.submitted_by,
    }


class SubmissionStore(SessionService):
    """Persistence of abstracts, their status machine and the form-submission shadow rows."""

    @bounded
    async def create(self, submission: ValidatedSubmission, raw_payload: Mapping[str, Any] | None = None) -> Abstract:
        now = utcnow()
        async with self._transaction() as session:
            abstract = Abstract(
                **_content_fields(submission),
                status=AbstractStatus.SUBMITTED.value,
                created_at=now,
                updated_at=now,
                reviews=[],
            )
            session.add(abstract)
            await session.flush()

            session.add(FormSubmission(
                form_type=FORM_TYPE_ABSTRACT,
                entity_id=abstract.id,
                submitted_by=submission.corresponding_author_email,
                submission_data=dict(raw_payload or {}),
                status=AbstractStatus.SUBMITTED.value,
                created_at=now,
                updated_at=now,
            ))

        logger.info("Abstract %s submitted to track %s", abstract.id, abstract.track)
        return abstract

    @bounded
    async def get(self, abstract_id: int) -> Abstract:
        async with self._read() as session:
            abstract = await session.scalar(
                select(Abstract).options(selectinload(Abstract.reviews)).where(Abstract.id == abstract_id)
            )
        if abstract is None:
            raise AbstractNotFoundError(abstract_id)
        return abstract

    @bounded
    async def update(self, abstract_id: int, submission: ValidatedSubmission, status: str | None = None) -> Abstract:
        """Full replace of the content fields; callers resend unchanged values."""
        values = _content_fields(submission)
        if status is not None:
            values["status"] = ensure_canonical_status(status)
        values["updated_at"] = utcnow()

        async with self._transaction() as session:
            result = await session.execute(
                update(Abstract)
                .where(Abstract.id == abstract_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise AbstractNotFoundError(abstract_id)

        if status is not None:
            await self.mirror_form_status([abstract_id], status)
        return await self.get(abstract_id)

    @bounded
    async def set_status(
        self,
        abstract_id: int,
        status: str,
        admin_notes: str | None = None,
        reviewer_comments: str | None = None,
    ) -> Abstract:
        status = ensure_canonical_status(status)
        values: dict[str, Any] = {"status": status, "updated_at": utcnow()}
        if admin_notes is not None:
            values["admin_notes"] = admin_notes
        if reviewer_comments is not None:
            values["reviewer_comments"] = reviewer_comments

        async with self._transaction() as session:
            result = await session.execute(
                update(Abstract)
                .where(Abstract.id == abstract_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise AbstractNotFoundError(abstract_id)

        logger.info("Abstract %s moved to %s", abstract_id, status)
        await self.mirror_form_status([abstract_id], status, admin_notes, reviewer_comments)
        return await self.get(abstract_id)

    async def mirror_form_status(
        self,
        abstract_ids: Iterable[int],
        status: str,
        admin_notes: str | None = None,
        review_comments: str | None = None,
    ) -> bool:
        """Best-effort update of the shadow rows; a failure never undoes the primary change."""
        ids = list(abstract_ids)
        if not ids:
            return True
        now = utcnow()
        values: dict[str, Any] = {"status": status, "reviewed_at": now, "updated_at": now}
        if admin_notes is not None:
            values["admin_notes"] = admin_notes
        if review_comments is not None:
            values["review_comments"] = review_comments
        try:
            async with self._transaction() as session:
                await session.execute(
                    update(FormSubmission)
                    .where(FormSubmission.form_type == FORM_TYPE_ABSTRACT, FormSubmission.entity_id.in_(ids))
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
        except SQLAlchemyError:
            logger.warning("Form submission sync failed for abstracts %s", ids, exc_info=True)
            return False
        return True

    @bounded
    async def delete(self, abstract_id: int) -> None:
        async with self._transaction() as session:
            await session.execute(delete(Review).where(Review.abstract_id == abstract_id))
            result = await session.execute(delete(Abstract).where(Abstract.id == abstract_id))
            if result.rowcount == 0:
                raise AbstractNotFoundError(abstract_id)
        logger.info("Abstract %s deleted", abstract_id)

    @bounded
    async def list_abstracts(
        self,
        filters: AbstractFilters | None = None,
        page: Any = 1,
        limit: Any = DEFAULT_LIMIT,
        sort_by: Any = DEFAULT_SORT,
        sort_order: Any = "DESC",
    ) -> Page:
        filters = filters or AbstractFilters()
        page, limit = normalize_paging(page, limit)

        conditions = []
        if filters.status and filters.status != "all":
            conditions.append(Abstract.status == filters.status)
        if filters.track and filters.track != "all":
            conditions.append(Abstract.track == filters.track)
        if filters.search:
            term = substring_pattern(filters.search)
            conditions.append(or_(
                Abstract.title.ilike(term, escape="\\"),
                Abstract.abstract.ilike(term, escape="\\"),
                Abstract.corresponding_author_email.ilike(term, escape="\\"),
            ))

        async with self._read() as session:
            total = await session.scalar(select(func.count(Abstract.id)).where(*conditions))
            rows = await session.scalars(
                select(Abstract)
                .where(*conditions)
                .order_by(*normalize_sort(sort_by, sort_order))
                .limit(limit)
                .offset((page - 1) * limit)
            )
            items = list(rows)

        return Page(items=items, total=total or 0, page=page, limit=limit)

    @bounded
    async def list_by_track(self, track: str, status: str = AbstractStatus.ACCEPTED.value) -> list[Abstract]:
        async with self._read() as session:
            rows = await session.scalars(
                select(Abstract)
                .where(Abstract.track == track, Abstract.status == status)
                .order_by(Abstract.title.asc(), Abstract.id.asc())
            )
            return list(rows)

    @bounded
    async def list_pending(self, limit: int = 10) -> list[Abstract]:
        async with self._read() as session:
            rows = await session.scalars(
                select(Abstract)
                .where(Abstract.status.in_(PENDING_STATUSES))
                .order_by(Abstract.created_at.desc(), Abstract.id.desc())
                .limit(limit)
            )
            return list(rows)

    @bounded
    async def stats_overview(self) -> StatsOverview:
        async with self._read() as session:
            status_rows = (await session.execute(
                select(Abstract.status, func.count(Abstract.id)).group_by(Abstract.status)
            )).all()
            type_rows = (await session.execute(
                select(Abstract.submission_type, func.count(Abstract.id)).group_by(Abstract.submission_type)
            )).all()
            count_col = func.count(Abstract.id).label("count")
            track_rows = (await session.execute(
                select(Abstract.track, count_col)
                .where(Abstract.track.is_not(None))
                .group_by(Abstract.track)
                .order_by(count_col.desc(), Abstract.track.asc())
            )).all()

        by_status = {s.value: 0 for s in AbstractStatus}
        by_status.update({status: count for status, count in status_rows})
        by_type = {t.value: 0 for t in SubmissionType}
        by_type.update({kind: count for kind, count in type_rows})

        return StatsOverview(
            total=sum(count for _, count in status_rows),
            by_status=by_status,
            by_submission_type=by_type,
            by_track=[(track, count) for track, count in track_rows],
        )

    @bounded
    async def list_form_submissions(
        self,
        form_type: str | None = None,
        status: str | None = None,
        page: Any = 1,
        limit: Any = DEFAULT_LIMIT,
    ) -> tuple[Page, dict[str, list[dict[str, Any]]]]:
        page, limit = normalize_paging(page, limit)

        conditions = []
        if form_type and form_type != "all":
            conditions.append(FormSubmission.form_type == form_type)
        if status and status != "all":
            conditions.append(FormSubmission.status == status)

        async with self._read() as session:
            total = await session.scalar(select(func.count(FormSubmission.id)).where(*conditions))
            rows = await session.scalars(
                select(FormSubmission)
                .where(*conditions)
                .order_by(FormSubmission.created_at.desc(), FormSubmission.id.desc())
                .limit(limit)
                .offset((page - 1) * limit)
            )
            items = list(rows)

            status_count = func.count(FormSubmission.id).label("count")
            by_status = (await session.execute(
                select(FormSubmission.status, status_count)
                .group_by(FormSubmission.status)
                .order_by(status_count.desc())
            )).all()
            type_count = func.count(FormSubmission.id).label("count")
            by_type = (await session.execute(
                select(FormSubmission.form_type, type_count)
                .group_by(FormSubmission.form_type)
                .order_by(type_count.desc())
            )).all()

        statistics = {
            "byStatus": [{"status": s, "count": c} for s, c in by_status],
            "byType": [{"form_type": t, "count": c} for t, c in by_type],
        }
        return Page(items=items, total=total or 0, page=page, limit=limit), statistics
