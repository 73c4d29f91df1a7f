import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from semver_replay.classify import BumpClassification, classify, highest
from semver_replay.version import Version, bump, parse_version

logger = logging.getLogger("semver_replay")


class CommitRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str = ""
    subject: str = ""
    body: str = ""


class BumpCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)
    none: int = Field(default=0, ge=0)

    def __getitem__(self, kind: BumpClassification) -> int:
        return getattr(self, BumpClassification(kind).value)

    def items(self) -> list[tuple[BumpClassification, int]]:
        return [(kind, self[kind]) for kind in BumpClassification]

    @property
    def total(self) -> int:
        return self.major + self.minor + self.patch + self.none


class AccumulationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: Version
    counts: BumpCounts = Field(default_factory=BumpCounts)
    total: int = 0

    def count(self, kind: BumpClassification) -> int:
        return self.counts[kind]

    @property
    def highest_bump(self) -> BumpClassification:
        return highest(k for k, n in self.counts.items() if n)


def accumulate(start: Version | str, records: Iterable[CommitRecord]) -> AccumulationResult:
    """Replay ``records`` (oldest first) on top of ``start``.

    Records with an empty or whitespace-only subject are skipped and not
    counted. ``records`` is consumed lazily, one record at a time.
    """
    version = parse_version(start) if isinstance(start, str) else start
    counts = {kind.value: 0 for kind in BumpClassification}
    total = 0
    for record in records:
        if not record.subject or not record.subject.strip():
            continue
        kind = classify(record.subject, record.body)
        new_version = bump(version, kind)
        if kind is not BumpClassification.NONE:
            logger.debug("%s %s: %s -> %s", kind.value, record.hash[:12], version, new_version)
        version = new_version
        counts[kind.value] += 1
        total += 1
    return AccumulationResult(version=version, counts=BumpCounts(**counts), total=total)
