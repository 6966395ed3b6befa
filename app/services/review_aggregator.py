from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from app.core.errors import (
    AbstractNotFoundError,
    ConferenceError,
    DuplicateReviewError,
    InvalidScoreError,
    ReviewNotFoundError,
    ValidationError,
)
from app.db.base import utcnow
from app.models.abstract import Abstract
from app.models.review import Recommendation, Review
from app.services.abstract_validation import is_valid_email
from app.services.base import SessionService, bounded
from app.services.submission_store import advance_to_under_review

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10
MAX_COMMENT_CHARS = 5000
LEADERBOARD_SIZE = 10
REVIEWER_CONSTRAINT = "reviews_abstract_reviewer_uc"


@dataclass
class ReviewSummary:
    count: int
    average_score: float | None
    recommendations: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_reviews": self.count,
            "average_score": self.average_score,
            "recommendations": dict(self.recommendations),
        }


def summarize_reviews(reviews: list[Review]) -> ReviewSummary:
    if not reviews:
        return ReviewSummary(count=0, average_score=None, recommendations={})
    recommendations: dict[str, int] = {}
    for review in reviews:
        recommendations[review.recommendation] = recommendations.get(review.recommendation, 0) + 1
    average = sum(r.score for r in reviews) / len(reviews)
    return ReviewSummary(count=len(reviews), average_score=round(average, 2), recommendations=recommendations)


def integrity_error_as_service_error(
    error: IntegrityError, abstract_id: Any, reviewer_email: str
) -> ConferenceError | None:
    """Map a constraint violation on review insert; None when it is neither known case."""
    message = str(error.orig).lower()
    if REVIEWER_CONSTRAINT in message or ("unique" in message and "reviewer_email" in message):
        return DuplicateReviewError(abstract_id, reviewer_email)
    if "foreign key" in message:
        return AbstractNotFoundError(abstract_id)
    return None


def _check_score(score: Any) -> int:
    # bool is an int subclass; True is not a score
    if isinstance(score, bool) or not isinstance(score, int) or not (MIN_SCORE <= score <= MAX_SCORE):
        raise InvalidScoreError(score)
    return score


def _check_recommendation(recommendation: Any) -> str:
    if recommendation not in {r.value for r in Recommendation}:
        raise ValidationError("Invalid recommendation", {"recommendation": recommendation})
    return recommendation


def _check_comments(comments: Any) -> str | None:
    if comments is None:
        return None
    if not isinstance(comments, str) or len(comments) > MAX_COMMENT_CHARS:
        raise ValidationError(f"Comments must be less than {MAX_COMMENT_CHARS} characters")
    return comments


def _check_feedback(feedback: Any) -> dict[str, Any]:
    if feedback is None:
        return {}
    if not isinstance(feedback, Mapping):
        raise ValidationError("Detailed feedback must be an object")
    return dict(feedback)


def validate_review(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Check a new review payload; returns the normalized column values."""
    missing = [
        key for key in ("reviewer_name", "reviewer_email", "score", "recommendation")
        if payload.get(key) is None or (isinstance(payload.get(key), str) and not payload[key].strip())
    ]
    if missing:
        raise ValidationError(
            "Abstract ID, reviewer name, email, score, and recommendation are required",
            {"missing": missing},
        )
    if not is_valid_email(payload["reviewer_email"]):
        raise ValidationError("Valid reviewer email is required", {"reviewer_email": payload["reviewer_email"]})

    return {
        "reviewer_name": payload["reviewer_name"].strip(),
        "reviewer_email": payload["reviewer_email"].strip().lower(),
        "score": _check_score(payload["score"]),
        "recommendation": _check_recommendation(payload["recommendation"]),
        "comments": _check_comments(payload.get("comments")),
        "detailed_feedback": _check_feedback(payload.get("detailed_feedback")),
    }


class ReviewAggregator(SessionService):
    """Review intake, the first-review status transition, and review statistics."""

    @bounded
    async def submit_review(self, abstract_id: int, payload: Mapping[str, Any]) -> Review:
        values = validate_review(payload)
        now = utcnow()
        try:
            async with self._transaction() as session:
                exists = await session.scalar(select(Abstract.id).where(Abstract.id == abstract_id))
                if exists is None:
                    raise AbstractNotFoundError(abstract_id)

                duplicate = await session.scalar(
                    select(Review.id).where(
                        Review.abstract_id == abstract_id,
                        Review.reviewer_email == values["reviewer_email"],
                    )
                )
                if duplicate is not None:
                    raise DuplicateReviewError(abstract_id, values["reviewer_email"])

                review = Review(abstract_id=abstract_id, created_at=now, updated_at=now, **values)
                session.add(review)
                await session.flush()

                advanced = await advance_to_under_review(session, abstract_id)
        except IntegrityError as e:
            # lost a race: same reviewer concurrently, or the abstract was deleted meanwhile
            mapped = integrity_error_as_service_error(e, abstract_id, values["reviewer_email"])
            if mapped is None:
                raise
            raise mapped from e

        if advanced:
            logger.info("Abstract %s moved to under_review after first review", abstract_id)
        return review

    @bounded
    async def summarize(self, abstract_id: int) -> ReviewSummary:
        reviews = await self.reviews_for_abstract(abstract_id)
        return summarize_reviews(reviews)

    @bounded
    async def reviews_for_abstract(self, abstract_id: int) -> list[Review]:
        async with self._read() as session:
            rows = await session.scalars(
                select(Review)
                .where(Review.abstract_id == abstract_id)
                .order_by(Review.created_at.desc(), Review.id.desc())
            )
            return list(rows)

    @bounded
    async def list_reviews(
        self,
        abstract_id: int | None = None,
        reviewer_email: str | None = None,
        recommendation: str | None = None,
    ) -> list[Review]:
        stmt = select(Review).options(joinedload(Review.abstract))
        if abstract_id is not None:
            stmt = stmt.where(Review.abstract_id == abstract_id)
        if reviewer_email:
            stmt = stmt.where(Review.reviewer_email == reviewer_email.strip().lower())
        if recommendation:
            stmt = stmt.where(Review.recommendation == recommendation)

        async with self._read() as session:
            rows = await session.scalars(stmt.order_by(Review.created_at.desc(), Review.id.desc()))
            return list(rows)

    @bounded
    async def reviews_by_reviewer(self, email: str) -> list[Review]:
        return await self.list_reviews(reviewer_email=email)

    @bounded
    async def get_review(self, review_id: int) -> Review:
        async with self._read() as session:
            review = await session.scalar(
                select(Review).options(joinedload(Review.abstract)).where(Review.id == review_id)
            )
        if review is None:
            raise ReviewNotFoundError(review_id)
        return review

    @bounded
    async def update_review(self, review_id: int, changes: Mapping[str, Any]) -> Review:
        """Partial update: only the provided fields change."""
        async with self._transaction() as session:
            review = await session.get(Review, review_id)
            if review is None:
                raise ReviewNotFoundError(review_id)
            if changes.get("score") is not None:
                review.score = _check_score(changes["score"])
            if changes.get("recommendation") is not None:
                review.recommendation = _check_recommendation(changes["recommendation"])
            if changes.get("comments") is not None:
                review.comments = _check_comments(changes["comments"])
            if changes.get("detailed_feedback") is not None:
                review.detailed_feedback = _check_feedback(changes["detailed_feedback"])
            review.updated_at = utcnow()
        return review

    @bounded
    async def delete_review(self, review_id: int) -> Review:
        async with self._transaction() as session:
            review = await session.get(Review, review_id)
            if review is None:
                raise ReviewNotFoundError(review_id)
            await session.delete(review)
        return review

    @bounded
    async def stats_overview(self) -> dict[str, Any]:
        async with self._read() as session:
            totals = (await session.execute(
                select(
                    func.count(Review.id),
                    func.count(func.distinct(Review.reviewer_email)),
                    func.count(func.distinct(Review.abstract_id)),
                    func.avg(Review.score),
                )
            )).one()
            by_recommendation = dict((await session.execute(
                select(Review.recommendation, func.count(Review.id)).group_by(Review.recommendation)
            )).all())

            review_count = func.count(Review.id).label("review_count")
            leaderboard = (await session.execute(
                select(
                    Review.reviewer_email,
                    func.max(Review.reviewer_name),
                    review_count,
                    func.avg(Review.score),
                )
                .group_by(Review.reviewer_email)
                .order_by(review_count.desc(), Review.reviewer_email.asc())
                .limit(LEADERBOARD_SIZE)
            )).all()

        total, reviewers, abstracts, average = totals
        overview: dict[str, Any] = {
            "total_reviews": total,
            "unique_reviewers": reviewers,
            "reviewed_abstracts": abstracts,
            "average_score": round(float(average), 2) if average is not None else None,
        }
        for rec in Recommendation:
            overview[f"{rec.value}_count"] = by_recommendation.get(rec.value, 0)

        return {
            "overview": overview,
            "top_reviewers": [
                {
                    "reviewer_email": email,
                    "reviewer_name": name,
                    "review_count": count,
                    "avg_score_given": round(float(avg), 2) if avg is not None else None,
                }
                for email, name, count, avg in leaderboard
            ],
        }
