import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_reviews
from app.core.errors import ValidationError
from app.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate, ReviewWithAbstract
from app.services.review_aggregator import ReviewAggregator, summarize_reviews

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _read(review) -> dict:
    return ReviewRead.model_validate(review).model_dump(mode="json")


def _with_abstract(review) -> dict:
    return ReviewWithAbstract.from_review(review).model_dump(mode="json")


@router.post("", status_code=201)
async def submit_review(body: ReviewCreate, reviews: ReviewAggregator = Depends(get_reviews)):
    if body.abstract_id is None:
        raise ValidationError(
            "Abstract ID, reviewer name, email, score, and recommendation are required",
            {"missing": ["abstract_id"]},
        )
    review = await reviews.submit_review(body.abstract_id, body.model_dump(exclude={"abstract_id"}))
    return {"message": "Review submitted successfully", "review": _read(review)}


@router.get("")
async def list_reviews(
    abstract_id: int | None = None,
    reviewer_email: str | None = None,
    recommendation: str | None = None,
    reviews: ReviewAggregator = Depends(get_reviews),
):
    rows = await reviews.list_reviews(abstract_id, reviewer_email, recommendation)
    return [_with_abstract(r) for r in rows]


@router.get("/stats/overview")
async def review_stats(reviews: ReviewAggregator = Depends(get_reviews)):
    return await reviews.stats_overview()


@router.get("/abstract/{abstract_id}")
async def reviews_for_abstract(abstract_id: int, reviews: ReviewAggregator = Depends(get_reviews)):
    rows = await reviews.reviews_for_abstract(abstract_id)
    return {"reviews": [_read(r) for r in rows], "summary": summarize_reviews(rows).to_dict()}


@router.get("/reviewer/{email}")
async def reviews_by_reviewer(email: str, reviews: ReviewAggregator = Depends(get_reviews)):
    rows = await reviews.reviews_by_reviewer(email)
    return [_with_abstract(r) for r in rows]


@router.get("/{review_id}")
async def get_review(review_id: int, reviews: ReviewAggregator = Depends(get_reviews)):
    return _with_abstract(await reviews.get_review(review_id))


@router.put("/{review_id}")
async def update_review(review_id: int, body: ReviewUpdate, reviews: ReviewAggregator = Depends(get_reviews)):
    review = await reviews.update_review(review_id, body.model_dump(exclude_unset=True))
    return {"message": "Review updated successfully", "review": _read(review)}


@router.delete("/{review_id}")
async def delete_review(review_id: int, reviews: ReviewAggregator = Depends(get_reviews)):
    await reviews.delete_review(review_id)
    return {"message": "Review deleted successfully", "deleted": {"id": review_id}}
