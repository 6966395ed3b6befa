from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.review import ReviewRead


class AbstractSubmission(BaseModel):
    """
    Incoming abstract payload.

    Fields are loosely typed on purpose: presence, lengths, taxonomy and structure
    are checked by the abstract validator, which reports its own error codes.
    """

    title: str | None = None
    abstract: str | None = None
    keywords: list[str] | None = None
    authors: list[dict[str, Any]] | None = None
    corresponding_author_email: str | None = None
    submission_type: str | None = None
    track: str | None = None
    subcategory: str | None = None
    cross_cutting_themes: list[str] | None = None
    file_url: str | None = None
    submitted_by: str | None = None
    format: str | None = None


class AbstractUpdate(AbstractSubmission):
    status: str | None = None


class StatusUpdate(BaseModel):
    status: str | None = None
    admin_notes: str | None = Field(default=None, max_length=5000)
    review_comments: str | None = Field(default=None, max_length=2000)
    reviewer_comments: str | None = Field(default=None, max_length=2000)

    def comments(self) -> str | None:
        # older clients send `reviewer_comments`
        return self.review_comments if self.review_comments is not None else self.reviewer_comments


class BulkStatusUpdate(StatusUpdate):
    ids: list[Any] | None = None


class BulkDelete(BaseModel):
    ids: list[Any] | None = None


class AbstractRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    abstract: str
    keywords: list[str] = []
    authors: list[dict[str, Any]]
    corresponding_author_email: str
    submission_type: str
    track: str
    subcategory: str
    cross_cutting_themes: list[str] = []
    format: str
    file_url: str | None = None
    submitted_by: str | None = None
    status: str
    admin_notes: str | None = None
    reviewer_comments: str | None = None
    created_at: datetime
    updated_at: datetime


class AbstractDetail(AbstractRead):
    reviews: list[ReviewRead] = []


class FormSubmissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    form_type: str
    entity_id: int
    submitted_by: str | None = None
    submission_data: dict[str, Any] = {}
    status: str
    admin_notes: str | None = None
    review_comments: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
