"""Payload builders for abstracts and reviews."""

VALID_BODY = (
    "Background: Fragmented laboratory networks delay diagnosis of TB and HIV in district hospitals. "
    "Methods: We integrated sample referral for three disease programmes across twelve facilities "
    "and tracked turnaround times over eighteen months. "
    "Findings: Median turnaround fell from nine days to four and rejected samples halved. "
    "Conclusion: Integrated referral shortens time to results and should be scaled nationally."
)


def make_body(words: int) -> str:
    """A structured body with exactly `words` whitespace-separated words."""
    head = ["Background:", "context", "Methods:", "design", "Findings:", "results", "Conclusion:"]
    filler = ["word"] * (words - len(head))
    return " ".join(head + filler)


def abstract_payload(**overrides) -> dict:
    payload = {
        "title": "Integrated sample referral for multi-disease diagnostics",
        "abstract": VALID_BODY,
        "keywords": ["diagnostics", "referral"],
        "authors": [
            {"name": "Amina Njeri", "email": "amina@example.org", "affiliation": "Ministry of Health"},
            {"name": "Peter Otieno", "email": "peter@example.org", "affiliation": "KEMRI"},
        ],
        "corresponding_author_email": "amina@example.org",
        "submission_type": "abstract",
        "track": "track_1",
        "subcategory": "Optimizing Laboratory Diagnostics in Integrated Health Systems",
        "cross_cutting_themes": ["Evidence translation from research to policy implementation"],
        "format": "oral",
    }
    payload.update(overrides)
    return payload


def review_payload(**overrides) -> dict:
    payload = {
        "reviewer_name": "Grace Wanjiru",
        "reviewer_email": "grace@example.org",
        "score": 8,
        "recommendation": "accept",
        "comments": "Clear methods and relevant findings.",
        "detailed_feedback": {"originality": 4},
    }
    payload.update(overrides)
    return payload


