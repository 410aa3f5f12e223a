"""Ordered regex tables for insurance card fields.

Each table is a tuple of ``(label, compiled pattern)`` pairs. The parser
tries them strictly in order and the first acceptable match wins, so the
order here is part of the extraction behavior. Every pattern captures the
field value in group 1.
"""

import re

_I = re.IGNORECASE

# Label, optional "ID"/"#"/"number" qualifier, then separator characters.
_QUALIFIER = r"[ \t]*(?:id\b|#|number\b|no\b\.?)?[ \t:#.]*"
_ID_TOKEN = r"([A-Z0-9][A-Z0-9\-]{5,})"

MEMBER_ID_LABELED: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("member", re.compile(r"\bmember" + _QUALIFIER + _ID_TOKEN, _I)),
    ("subscriber", re.compile(r"\bsubscriber" + _QUALIFIER + _ID_TOKEN, _I)),
    (
        "id",
        re.compile(
            r"(?<!group )(?<!grp )(?<!payer )(?<!rx )\bid\b"
            r"[ \t]*(?:#|number\b|no\b\.?)?[ \t:#.]*" + _ID_TOKEN,
            _I,
        ),
    ),
    (
        "identification",
        re.compile(
            r"\bidentification[ \t]*(?:#|number\b|no\b\.?)?[ \t:#.]*" + _ID_TOKEN,
            _I,
        ),
    ),
    (
        "policy",
        re.compile(
            r"\bpolicy[ \t]*(?:#|number\b|no\b\.?)?[ \t:#.]*" + _ID_TOKEN, _I
        ),
    ),
)

MEMBER_ID_STANDALONE: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("letter_prefixed", re.compile(r"\b([A-Z]{3,4}\d{9,12})\b", _I)),
    ("single_letter", re.compile(r"\b([A-Z]\d{8,11})\b", _I)),
    (
        "dashed_groups",
        re.compile(r"\b((?=[A-Z0-9\-]*[A-Z])[A-Z0-9]{2,6}(?:-[A-Z0-9]{2,6}){1,3})\b", _I),
    ),
)

# A leading "rx" marks the pharmacy group, which has its own field.
_NOT_RX = r"(?<!rx )(?<!rx)"

GROUP_NUMBER: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "group_number",
        re.compile(
            _NOT_RX + r"\bgroup[ \t]*(?:no\b\.?|number\b|#)[ \t:#.]*"
            r"([A-Z0-9][A-Z0-9\-]{3,})",
            _I,
        ),
    ),
    (
        "group",
        re.compile(
            _NOT_RX + r"\b(?:employer[ \t]+group|group|grp)\b[ \t]*(?:id\b|#)?"
            r"[ \t:#.]*(?!(?:name|number|plan)\b)([A-Z0-9][A-Z0-9\-]{3,})",
            _I,
        ),
    ),
    ("group_digits", re.compile(_NOT_RX + r"\bgroup[ \t]*:[ \t]*(\d{4,})", _I)),
)

_PLAN_TEXT = r"([A-Z0-9][A-Z0-9 &+/.\-]*)"

PLAN_NAME: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("network", re.compile(r"\b(PPO|HMO|EPO|POS|HDHP)\b", _I)),
    (
        "metal_tier",
        re.compile(r"\b((?:gold|silver|bronze|platinum)(?:[ \t]*\d+)?)\b", _I),
    ),
    (
        "plan",
        re.compile(
            r"\bplan\b(?![ \t]*(?:(?:code|id|number|no)\b|#))"
            r"[ \t]*(?:name\b)?[ \t:\-]*" + _PLAN_TEXT,
            _I,
        ),
    ),
    ("coverage", re.compile(r"\bcoverage[ \t]*:[ \t]*" + _PLAN_TEXT, _I)),
)

PLAN_STOPWORDS = frozenset({"the", "and", "for", "plan", "code"})

# Labels are case-insensitive; the name itself must be Title Case or caps.
# "Member ID", "Subscriber No." and the like label identifiers, not names.
_NAME_LABEL = (
    r"(?<![Pp]lan )(?<!PLAN )(?<![Gg]roup )(?<!GROUP )"
    r"\b(?i:subscriber|member|patient|name)(?:[ \t]+(?i:name))?"
    r"(?:[ \t]*[:\-][ \t]*|[ \t]+)"
    r"(?!(?i:id|number|no)\b|#)"
)

SUBSCRIBER_NAME: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "labeled_title_case",
        re.compile(
            _NAME_LABEL
            + r"([A-Z][a-z'\-]+(?:[ \t]+(?:[A-Z]\.|[A-Z][a-z'\-]+)){1,2})"
        ),
    ),
    (
        "labeled_upper_case",
        re.compile(
            _NAME_LABEL
            + r"([A-Z][A-Z'\-]+(?:[ \t]+[A-Z][A-Z'\-.]*)+)(?![A-Za-z0-9])"
        ),
    ),
    ("initialed", re.compile(r"\b([A-Z][a-z]+[ \t]+[A-Z]\.[ \t]+[A-Z][a-z]+)\b")),
)

NAME_REJECT_PREFIXES = ("blue cross", "member id", "group", "subscriber", "insurance")

PHONE_NUMBER = re.compile(
    r"(?<!\w)(?:\+?1[ .\-]?)?\(?(\d{3})\)?[ .\-]?(\d{3})[ .\-]?(\d{4})(?!\d)"
)

RX_BIN = re.compile(r"\b(?:rx[ \t]?)?bin\b[ \t:#.]*(\d{6})(?!\d)", _I)
RX_PCN = re.compile(r"\b(?:rx[ \t]?)?pcn\b[ \t:#.]*([A-Z0-9]{2,})\b", _I)
RX_GROUP = re.compile(r"\brx[ \t]?(?:grp|group)\b[ \t:#.]*([A-Z0-9]{3,})\b", _I)
