from datetime import datetime

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, UTCDateTime, utcnow


class FormSubmission(Base):
    """Audit row mirroring a submission event; kept in sync best-effort only."""

    __tablename__ = "form_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    form_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    # no foreign key: the row outlives the entity it mirrors
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    submitted_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    submission_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[str] = mapped_column(String(30), nullable=False, default="submitted")
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
