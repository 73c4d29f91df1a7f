"""Conventional Commits classification of a single commit message.

The checks form an ordered decision list and the first match wins:

1. breaking change (``type!:`` / ``type(scope)!:`` header, or a
   ``BREAKING CHANGE:`` / ``BREAKING-CHANGE:`` token anywhere in the message)
2. ``feat`` / ``feat(scope)`` -> minor
3. ``fix`` / ``fix(scope)`` -> patch
4. anything else -> none

Reordering these checks changes results: ``fix!: ...`` must stay MAJOR.
"""
import enum
import re


class BumpClassification(str, enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


# scope, when present, must be non-empty: "feat():" is not a feature.
# "!:" only counts right after the type/scope prefix, not a later "call(x)!:"
_BANG_HEADER = re.compile(r"^\w+(\([^()]+\))?!:")
_BREAKING_TOKEN = re.compile(r"BREAKING[ -]CHANGE:")
_FEAT_HEADER = re.compile(r"^feat(\(.+\))?:")
_FIX_HEADER = re.compile(r"^fix(\(.+\))?:")

# highest first
SEVERITY = (
    BumpClassification.MAJOR,
    BumpClassification.MINOR,
    BumpClassification.PATCH,
    BumpClassification.NONE,
)


def is_breaking(subject: str, body: str = "") -> bool:
    if _BANG_HEADER.match(subject):
        return True
    return _BREAKING_TOKEN.search(subject + "\n" + (body or "")) is not None


def classify(subject: str, body: str = "") -> BumpClassification:
    if is_breaking(subject, body):
        return BumpClassification.MAJOR
    if _FEAT_HEADER.match(subject):
        return BumpClassification.MINOR
    if _FIX_HEADER.match(subject):
        return BumpClassification.PATCH
    return BumpClassification.NONE


def highest(kinds) -> BumpClassification:
    seen = set(kinds)
    for kind in SEVERITY:
        if kind in seen:
            return kind
    return BumpClassification.NONE
