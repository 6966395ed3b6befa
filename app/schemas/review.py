from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ReviewCreate(BaseModel):
    abstract_id: int | None = None
    reviewer_name: str | None = None
    reviewer_email: str | None = None
    score: int | None = None
    recommendation: str | None = None
    comments: str | None = None
    detailed_feedback: dict[str, Any] | None = None


class ReviewUpdate(BaseModel):
    score: int | None = None
    recommendation: str | None = None
    comments: str | None = None
    detailed_feedback: dict[str, Any] | None = None


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    abstract_id: int
    reviewer_name: str
    reviewer_email: str
    score: int
    recommendation: str
    comments: str | None = None
    detailed_feedback: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class ReviewWithAbstract(ReviewRead):
    abstract_title: str | None = None
    abstract_authors: list[dict[str, Any]] | None = None
    track: str | None = None
    submission_type: str | None = None

    @classmethod
    def from_review(cls, review) -> "ReviewWithAbstract":
        data = ReviewRead.model_validate(review).model_dump()
        abstract = review.abstract
        return cls(
            **data,
            abstract_title=abstract.title,
            abstract_authors=abstract.authors,
            track=abstract.track,
            submission_type=abstract.submission_type,
        )
