from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.schemas.abstract import AbstractRead, FormSubmissionRead
from app.services.submission_store import DEFAULT_LIMIT, SubmissionStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/pending")
async def pending_abstracts(limit: int = 10, store: SubmissionStore = Depends(get_store)):
    """Most recent abstracts still waiting on a decision."""
    rows = await store.list_pending(max(1, min(limit, 100)))
    return {
        "count": len(rows),
        "abstracts": [AbstractRead.model_validate(a).model_dump(mode="json") for a in rows],
    }


@router.get("/submissions")
async def form_submissions(
    form_type: str | None = None,
    status: str | None = None,
    page: str = "1",
    limit: str = str(DEFAULT_LIMIT),
    store: SubmissionStore = Depends(get_store),
):
    result, statistics = await store.list_form_submissions(form_type, status, page, limit)
    return {
        "submissions": [FormSubmissionRead.model_validate(s).model_dump(mode="json") for s in result.items],
        "pagination": result.pagination(),
        "statistics": statistics,
    }
