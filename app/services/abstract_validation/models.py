from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_TRACK = "INVALID_TRACK"
    INVALID_SUBCATEGORY = "INVALID_SUBCATEGORY"
    MISSING_STRUCTURE = "MISSING_STRUCTURE"
    TOO_LONG = "TOO_LONG"
    INVALID_AUTHOR = "INVALID_AUTHOR"
    INVALID_EMAIL = "INVALID_EMAIL"
    CORRESPONDING_NOT_AUTHOR = "CORRESPONDING_NOT_AUTHOR"


@dataclass
class ValidationIssue:
    code: IssueCode
    severity: Severity
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["code"] = self.code.value
        d["severity"] = self.severity.value
        return d


@dataclass(frozen=True)
class Author:
    name: str
    email: str
    affiliation: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ValidatedSubmission:
    """Normalized abstract payload, ready to persist."""

    title: str
    abstract: str
    authors: tuple[Author, ...]
    corresponding_author_email: str
    track: str
    subcategory: str
    format: str
    submission_type: str = "abstract"
    keywords: tuple[str, ...] = ()
    cross_cutting_themes: tuple[str, ...] = ()
    file_url: str | None = None
    submitted_by: str | None = None


@dataclass
class ValidationReport:
    ok: bool
    issues: list[ValidationIssue]
    submission: ValidatedSubmission | None = field(default=None)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "issues": [i.to_dict() for i in self.issues],
        }
