import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from app.models.review import Review


class AbstractStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    REVISION_REQUIRED = "revision_required"
    APPROVED = "approved"


class SubmissionType(str, enum.Enum):
    ABSTRACT = "abstract"
    FULL_PAPER = "full_paper"
    POSTER = "poster"
    DEMO = "demo"


class PresentationFormat(str, enum.Enum):
    ORAL = "oral"
    POSTER = "poster"


CANONICAL_STATUSES = frozenset(s.value for s in AbstractStatus)
PENDING_STATUSES = (
    AbstractStatus.SUBMITTED.value,
    AbstractStatus.UNDER_REVIEW.value,
    AbstractStatus.REVISION_REQUIRED.value,
)


class Abstract(Base):
    __tablename__ = "abstracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    abstract: Mapped[str] = mapped_column(Text, nullable=False)
    keywords: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    authors: Mapped[list] = mapped_column(JSON, nullable=False)
    corresponding_author_email: Mapped[str] = mapped_column(String(255), nullable=False)

    submission_type: Mapped[str] = mapped_column(String(30), nullable=False, default=SubmissionType.ABSTRACT.value)
    track: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    subcategory: Mapped[str] = mapped_column(String(500), nullable=False)
    cross_cutting_themes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    format: Mapped[str] = mapped_column(String(20), nullable=False)

    file_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    submitted_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(30), nullable=False, default=AbstractStatus.SUBMITTED.value, index=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewer_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    reviews: Mapped[list["Review"]] = relationship(
        back_populates="abstract",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Review.created_at.desc(), Review.id.desc()]",
    )
