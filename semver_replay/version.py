import re

from pydantic import BaseModel, ConfigDict, Field

from semver_replay.classify import BumpClassification

_SEGMENT = re.compile(r"[0-9]+")


class InvalidVersionFormat(ValueError):
    def __init__(self, value: str):
        super().__init__(f"invalid version format: {value!r} (expected MAJOR.MINOR.PATCH)")
        self.value = value


class Version(BaseModel):
    model_config = ConfigDict(frozen=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return format_version(self)


def parse_version(text: str) -> Version:
    # strict: exactly three decimal segments, no sign, no whitespace, no 'v' prefix
    if not isinstance(text, str):
        raise InvalidVersionFormat(repr(text))
    parts = text.split(".")
    if len(parts) != 3 or not all(_SEGMENT.fullmatch(p) for p in parts):
        raise InvalidVersionFormat(text)
    major, minor, patch = map(int, parts)
    return Version(major=major, minor=minor, patch=patch)


def format_version(version: Version) -> str:
    return f"{version.major}.{version.minor}.{version.patch}"


def bump(version: Version, kind: BumpClassification) -> Version:
    if kind is BumpClassification.MAJOR:
        return Version(major=version.major + 1, minor=0, patch=0)
    if kind is BumpClassification.MINOR:
        return Version(major=version.major, minor=version.minor + 1, patch=0)
    if kind is BumpClassification.PATCH:
        return Version(major=version.major, minor=version.minor, patch=version.patch + 1)
    return version
