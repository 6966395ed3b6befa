from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from app.models.abstract import PresentationFormat, SubmissionType
from app.services.taxonomy import TaxonomyRegistry, Track

from .models import Author, IssueCode, Severity, ValidatedSubmission, ValidationIssue, ValidationReport

MAX_WORDS = 300
TITLE_LENGTH = (5, 500)
BODY_LENGTH = (100, 5000)
STRUCTURE_MARKERS = ("Background", "Methods", "Findings", "Conclusion")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

REQUIRED_FIELDS = (
    ("title", "Title"),
    ("abstract", "Abstract"),
    ("authors", "Authors"),
    ("corresponding_author_email", "Corresponding author email"),
    ("track", "Track"),
    ("subcategory", "Subcategory"),
    ("format", "Format"),
)


@dataclass(frozen=True)
class AbstractRules:
    max_words: int = MAX_WORDS
    title_length: tuple[int, int] = TITLE_LENGTH
    body_length: tuple[int, int] = BODY_LENGTH
    markers: tuple[str, ...] = STRUCTURE_MARKERS

    def structure_pattern(self) -> re.Pattern[str]:
        # presence and relative order only, not section boundaries
        return re.compile(".*?".join(re.escape(m) for m in self.markers), re.IGNORECASE | re.DOTALL)


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value.strip()))


def validate_abstract(
    payload: Mapping[str, Any],
    taxonomy: TaxonomyRegistry,
    rules: AbstractRules | None = None,
) -> ValidationReport:
    """
    Run every abstract check over a raw payload and collect the issues in check order.

    Pure function: no database or network access. `report.submission` is set only
    when no ERROR issue was raised.
    """
    rules = rules or AbstractRules()
    issues: list[ValidationIssue] = []

    # 1) Required fields and field shapes
    issues += _check_required(payload)
    issues += _check_field_shapes(payload, taxonomy, rules)

    # 2-3) Track and subcategory against the taxonomy
    track_issues, track = _check_track(payload, taxonomy)
    issues += track_issues

    # 4-5) Structured body and word ceiling
    issues += _check_body(payload.get("abstract"), rules)

    # 6) Authors
    issues += _check_authors(payload.get("authors"))

    # 7) Corresponding author e-mail
    issues += _check_corresponding_email(payload)

    ok = not any(i.severity == Severity.ERROR for i in issues)
    submission = _normalize(payload, track) if ok else None
    return ValidationReport(ok=ok, issues=issues, submission=submission)


# ---------------- internal checks ----------------

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _check_required(payload: Mapping[str, Any]) -> list[ValidationIssue]:
    missing = [label for key, label in REQUIRED_FIELDS if _is_blank(payload.get(key))]
    if not missing:
        return []
    return [ValidationIssue(
        code=IssueCode.MISSING_FIELD,
        severity=Severity.ERROR,
        message="Title, abstract, authors, corresponding author email, track, subcategory, and format are required",
        details={"missing": missing},
    )]


def _check_field_shapes(payload: Mapping[str, Any], taxonomy: TaxonomyRegistry, rules: AbstractRules) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    title = payload.get("title")
    if not _is_blank(title):
        lo, hi = rules.title_length
        if not isinstance(title, str) or not (lo <= len(title.strip()) <= hi):
            issues.append(ValidationIssue(
                code=IssueCode.INVALID_FIELD,
                severity=Severity.ERROR,
                message=f"Title must be between {lo} and {hi} characters",
                details={"field": "title"},
            ))

    body = payload.get("abstract")
    if not _is_blank(body):
        lo, hi = rules.body_length
        if not isinstance(body, str) or not (lo <= len(body.strip()) <= hi):
            issues.append(ValidationIssue(
                code=IssueCode.INVALID_FIELD,
                severity=Severity.ERROR,
                message=f"Abstract must be between {lo} and {hi} characters",
                details={"field": "abstract"},
            ))

    authors = payload.get("authors")
    if authors is not None and not isinstance(authors, list):
        issues.append(ValidationIssue(
            code=IssueCode.INVALID_FIELD,
            severity=Severity.ERROR,
            message="Authors must be a list",
            details={"field": "authors"},
        ))

    submission_type = payload.get("submission_type")
    if submission_type is not None and (
        not isinstance(submission_type, str) or submission_type not in {s.value for s in SubmissionType}
    ):
        issues.append(ValidationIssue(
            code=IssueCode.INVALID_FIELD,
            severity=Severity.ERROR,
            message="Invalid submission type",
            details={"field": "submission_type", "value": submission_type},
        ))

    fmt = payload.get("format")
    if not _is_blank(fmt) and (not isinstance(fmt, str) or fmt not in {f.value for f in PresentationFormat}):
        issues.append(ValidationIssue(
            code=IssueCode.INVALID_FIELD,
            severity=Severity.ERROR,
            message="Format must be oral or poster",
            details={"field": "format", "value": fmt},
        ))

    keywords = payload.get("keywords")
    if keywords is not None and (
        not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords)
    ):
        issues.append(ValidationIssue(
            code=IssueCode.INVALID_FIELD,
            severity=Severity.ERROR,
            message="Keywords must be an array of strings",
            details={"field": "keywords"},
        ))

    themes = payload.get("cross_cutting_themes")
    if themes is not None:
        if not isinstance(themes, list):
            unknown = [themes]
        else:
            unknown = [t for t in themes if not isinstance(t, str) or not taxonomy.is_valid_theme(t)]
        if unknown:
            issues.append(ValidationIssue(
                code=IssueCode.INVALID_FIELD,
                severity=Severity.ERROR,
                message="Invalid cross-cutting theme",
                details={"field": "cross_cutting_themes", "unknown": unknown},
            ))

    return issues


def _check_track(payload: Mapping[str, Any], taxonomy: TaxonomyRegistry) -> tuple[list[ValidationIssue], Track | None]:
    identifier = payload.get("track")
    if _is_blank(identifier):
        return [], None

    track = taxonomy.resolve_track(identifier) if isinstance(identifier, str) else None
    if track is None:
        return [ValidationIssue(
            code=IssueCode.INVALID_TRACK,
            severity=Severity.ERROR,
            message="Invalid track",
            details={"track": identifier},
        )], None

    subcategory = payload.get("subcategory")
    if _is_blank(subcategory):
        return [], track

    if not taxonomy.is_valid_subcategory(track, subcategory):
        return [ValidationIssue(
            code=IssueCode.INVALID_SUBCATEGORY,
            severity=Severity.ERROR,
            message="Invalid subcategory for selected track",
            details={"track": track.value, "subcategory": subcategory},
        )], track

    return [], track


def _check_body(body: Any, rules: AbstractRules) -> list[ValidationIssue]:
    if _is_blank(body) or not isinstance(body, str):
        return []

    issues: list[ValidationIssue] = []
    if not rules.structure_pattern().search(body):
        issues.append(ValidationIssue(
            code=IssueCode.MISSING_STRUCTURE,
            severity=Severity.ERROR,
            message="Abstract must include " + ", ".join(rules.markers[:-1]) + f", and {rules.markers[-1]} sections.",
            details={"markers": list(rules.markers)},
        ))

    words = len(body.split())
    if words > rules.max_words:
        issues.append(ValidationIssue(
            code=IssueCode.TOO_LONG,
            severity=Severity.ERROR,
            message=f"Abstract must not exceed {rules.max_words} words.",
            details={"words": words, "max_words": rules.max_words},
        ))
    return issues


def _check_authors(authors: Any) -> list[ValidationIssue]:
    if not isinstance(authors, list) or not authors:
        return []

    for idx, author in enumerate(authors):
        if not isinstance(author, Mapping):
            return [ValidationIssue(
                code=IssueCode.INVALID_AUTHOR,
                severity=Severity.ERROR,
                message="Each author must have name, email, and affiliation",
                details={"index": idx},
            )]
        missing = [
            k for k in ("name", "email", "affiliation")
            if not isinstance(author.get(k), str) or _is_blank(author.get(k))
        ]
        if missing:
            return [ValidationIssue(
                code=IssueCode.INVALID_AUTHOR,
                severity=Severity.ERROR,
                message="Each author must have name, email, and affiliation",
                details={"index": idx, "missing": missing},
            )]
        if not is_valid_email(author.get("email")):
            return [ValidationIssue(
                code=IssueCode.INVALID_AUTHOR,
                severity=Severity.ERROR,
                message="Author emails must be valid",
                details={"index": idx, "email": author.get("email")},
            )]
    return []


def _check_corresponding_email(payload: Mapping[str, Any]) -> list[ValidationIssue]:
    email = payload.get("corresponding_author_email")
    if _is_blank(email):
        return []
    if not is_valid_email(email):
        return [ValidationIssue(
            code=IssueCode.INVALID_EMAIL,
            severity=Severity.ERROR,
            message="Valid corresponding author email is required",
            details={"email": email},
        )]

    authors = payload.get("authors")
    if isinstance(authors, list):
        author_emails = {
            a.get("email", "").strip().lower()
            for a in authors
            if isinstance(a, Mapping) and isinstance(a.get("email"), str)
        }
        if author_emails and email.strip().lower() not in author_emails:
            return [ValidationIssue(
                code=IssueCode.CORRESPONDING_NOT_AUTHOR,
                severity=Severity.WARNING,
                message="Corresponding author email does not match any listed author.",
                details={"email": email},
            )]
    return []


def _normalize(payload: Mapping[str, Any], track: Track | None) -> ValidatedSubmission:
    authors = tuple(
        Author(
            name=a["name"].strip(),
            email=a["email"].strip().lower(),
            affiliation=a["affiliation"].strip(),
        )
        for a in payload["authors"]
    )
    return ValidatedSubmission(
        title=payload["title"].strip(),
        abstract=payload["abstract"].strip(),
        authors=authors,
        corresponding_author_email=payload["corresponding_author_email"].strip().lower(),
        track=track.value if track else payload["track"],
        subcategory=payload["subcategory"],
        format=payload["format"],
        submission_type=payload.get("submission_type") or SubmissionType.ABSTRACT.value,
        keywords=tuple(payload.get("keywords") or ()),
        cross_cutting_themes=tuple(payload.get("cross_cutting_themes") or ()),
        file_url=payload.get("file_url"),
        submitted_by=payload.get("submitted_by"),
    )
