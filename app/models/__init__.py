from app.models.abstract import Abstract, AbstractStatus, PresentationFormat, SubmissionType
from app.models.form_submission import FormSubmission
from app.models.review import Recommendation, Review

__all__ = [
    "Abstract",
    "AbstractStatus",
    "FormSubmission",
    "PresentationFormat",
    "Recommendation",
    "Review",
    "SubmissionType",
]
