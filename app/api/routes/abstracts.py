import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_bulk, get_store, get_taxonomy
from app.core.errors import AbstractValidationError
from app.models.abstract import AbstractStatus
from app.schemas.abstract import (
    AbstractDetail,
    AbstractRead,
    AbstractSubmission,
    AbstractUpdate,
    BulkDelete,
    BulkStatusUpdate,
    StatusUpdate,
)
from app.services.abstract_validation import validate_abstract
from app.services.bulk import BulkOperationExecutor
from app.services.submission_store import AbstractFilters, SubmissionStore
from app.services.taxonomy import TaxonomyRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/abstracts", tags=["abstracts"])


def _detail(abstract) -> dict:
    return AbstractDetail.model_validate(abstract).model_dump(mode="json")


def _summary(abstract) -> dict:
    return AbstractRead.model_validate(abstract).model_dump(mode="json")


def _validated(payload: dict, taxonomy: TaxonomyRegistry):
    report = validate_abstract(payload, taxonomy)
    if not report.ok:
        logger.info("Abstract rejected: %s", report.errors[0].code.value)
        raise AbstractValidationError(report)
    return report.submission


# Static paths first: `/{abstract_id}` would otherwise shadow them.


@router.get("/tracks")
async def list_tracks(taxonomy: TaxonomyRegistry = Depends(get_taxonomy)):
    return taxonomy.to_dict()


@router.get("/stats/overview")
async def stats_overview(store: SubmissionStore = Depends(get_store)):
    stats = await store.stats_overview()
    by_type = stats.by_submission_type
    return {
        "overview": {
            "total_submissions": stats.total,
            **stats.by_status,
            "abstracts": by_type.get("abstract", 0),
            "full_papers": by_type.get("full_paper", 0),
            "posters": by_type.get("poster", 0),
            "demos": by_type.get("demo", 0),
        },
        "by_track": [{"track": track, "count": count} for track, count in stats.by_track],
    }


@router.get("/track/{track}")
async def list_by_track(
    track: str,
    status: str = AbstractStatus.ACCEPTED.value,
    store: SubmissionStore = Depends(get_store),
    taxonomy: TaxonomyRegistry = Depends(get_taxonomy),
):
    resolved = taxonomy.resolve_track(track)
    abstracts = await store.list_by_track(resolved.value if resolved else track, status)
    return {"track": track, "count": len(abstracts), "abstracts": [_summary(a) for a in abstracts]}


@router.patch("/bulk/status")
async def bulk_update_status(body: BulkStatusUpdate, bulk: BulkOperationExecutor = Depends(get_bulk)):
    result = await bulk.bulk_set_status(body.ids, body.status, body.admin_notes, body.comments())
    return {
        "message": f"{result.count} abstracts updated successfully",
        "updated": result.count,
        "ids": result.ids,
    }


@router.delete("/bulk")
async def bulk_delete(body: BulkDelete, bulk: BulkOperationExecutor = Depends(get_bulk)):
    result = await bulk.bulk_delete(body.ids)
    return {
        "message": f"{result.count} abstracts deleted successfully",
        "deleted": result.count,
        "ids": result.ids,
    }


@router.post("", status_code=201)
async def create_abstract(
    body: AbstractSubmission,
    store: SubmissionStore = Depends(get_store),
    taxonomy: TaxonomyRegistry = Depends(get_taxonomy),
):
    payload = body.model_dump(mode="json")
    submission = _validated(payload, taxonomy)
    abstract = await store.create(submission, payload)
    return {
        "message": "Abstract submitted successfully and is under review",
        "abstract": _detail(abstract),
        "status": abstract.status,
    }


@router.get("")
async def list_abstracts(
    status: str | None = None,
    track: str | None = None,
    search: str | None = None,
    page: str = "1",
    limit: str = "20",
    sortBy: str = "created_at",
    sortOrder: str = "DESC",
    store: SubmissionStore = Depends(get_store),
):
    result = await store.list_abstracts(
        AbstractFilters(status=status, track=track, search=search),
        page=page,
        limit=limit,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    return {"abstracts": [_summary(a) for a in result.items], "pagination": result.pagination()}


@router.get("/{abstract_id}")
async def get_abstract(abstract_id: int, store: SubmissionStore = Depends(get_store)):
    return _detail(await store.get(abstract_id))


@router.put("/{abstract_id}")
async def update_abstract(
    abstract_id: int,
    body: AbstractUpdate,
    store: SubmissionStore = Depends(get_store),
    taxonomy: TaxonomyRegistry = Depends(get_taxonomy),
):
    submission = _validated(body.model_dump(mode="json", exclude={"status"}), taxonomy)
    abstract = await store.update(abstract_id, submission, status=body.status)
    return {"message": "Abstract updated successfully", "abstract": _detail(abstract)}


@router.patch("/{abstract_id}/status")
async def update_status(abstract_id: int, body: StatusUpdate, store: SubmissionStore = Depends(get_store)):
    abstract = await store.set_status(abstract_id, body.status, body.admin_notes, body.comments())
    return {"message": f"Abstract status updated to {abstract.status}", "abstract": _detail(abstract)}


@router.delete("/{abstract_id}")
async def delete_abstract(abstract_id: int, store: SubmissionStore = Depends(get_store)):
    await store.delete(abstract_id)
    return {"message": "Abstract deleted successfully", "deleted": {"id": abstract_id}}
