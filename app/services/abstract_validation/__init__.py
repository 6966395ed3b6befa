from .models import Author, IssueCode, Severity, ValidatedSubmission, ValidationIssue, ValidationReport
from .validator import AbstractRules, is_valid_email, validate_abstract

__all__ = [
    "AbstractRules",
    "Author",
    "IssueCode",
    "Severity",
    "ValidatedSubmission",
    "ValidationIssue",
    "ValidationReport",
    "is_valid_email",
    "validate_abstract",
]
