import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from app.models.abstract import Abstract


class Recommendation(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    MINOR_REVISION = "minor_revision"
    MAJOR_REVISION = "major_revision"


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("abstract_id", "reviewer_email", name="reviews_abstract_reviewer_uc"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    abstract_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("abstracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    reviewer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    reviewer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    recommendation: Mapped[str] = mapped_column(String(30), nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    detailed_feedback: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    abstract: Mapped["Abstract"] = relationship(back_populates="reviews")
