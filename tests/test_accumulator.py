import logging

import pytest
from pydantic import ValidationError

from semver_replay.accumulator import BumpCounts, CommitRecord, accumulate
from semver_replay.classify import BumpClassification as B
from semver_replay.version import InvalidVersionFormat, Version, parse_version


def _commits(*messages: str) -> list[CommitRecord]:
    out = []
    for i, msg in enumerate(messages):
        subject, _, body = msg.partition("\n")
        out.append(CommitRecord(hash=f"{i:040x}", subject=subject, body=body.lstrip("\n")))
    return out


def test_feat_from_zero():
    res = accumulate(parse_version("0.0.0"), _commits("feat: add login"))
    assert str(res.version) == "0.1.0"
    assert res.count(B.MINOR) == 1 and res.total == 1


def test_fix_then_feat_resets_patch():
    res = accumulate(parse_version("1.2.3"), _commits("fix: null check", "feat(api): new endpoint"))
    assert str(res.version) == "1.3.0"
    assert res.count(B.MINOR) == 1 and res.count(B.PATCH) == 1
    assert res.total == 2


def test_bang_header_is_major():
    res = accumulate(parse_version("1.0.0"), _commits("feat!: remove legacy API"))
    assert str(res.version) == "2.0.0"
    assert res.count(B.MAJOR) == 1


def test_body_breaking_marker_overrides_chore():
    res = accumulate(
        parse_version("1.0.0"),
        _commits("chore: update deps\n\nBREAKING CHANGE: config format changed"),
    )
    assert str(res.version) == "2.0.0"
    assert res.count(B.MAJOR) == 1
    assert res.count(B.NONE) == 0


def test_blank_subject_skipped_entirely():
    res = accumulate(parse_version("2.1.4"), _commits("docs: fix typo", "  "))
    assert str(res.version) == "2.1.4"
    assert res.count(B.NONE) == 1
    assert res.total == 1


def test_blank_subject_with_breaking_body_still_skipped():
    records = [CommitRecord(hash="a", subject="", body="BREAKING CHANGE: ignored")]
    res = accumulate(Version(major=1), records)
    assert res.version == Version(major=1)
    assert res.total == 0


def test_empty_sequence_is_identity():
    start = Version(major=3, minor=2, patch=1)
    res = accumulate(start, [])
    assert res.version == start
    assert res.total == 0
    assert res.counts == BumpCounts()


def test_order_matters():
    # patch after minor survives, minor after patch zeroes it
    a = accumulate("1.0.0", _commits("feat: a", "fix: b"))
    b = accumulate("1.0.0", _commits("fix: b", "feat: a"))
    assert str(a.version) == "1.1.1"
    assert str(b.version) == "1.1.0"


def test_mixed_history():
    res = accumulate(
        "0.9.7",
        _commits(
            "fix: one",
            "docs: two",
            "feat(ui): three",
            "fix: four",
            "refactor!: five",
            "feat: six",
            "fix: seven",
            "",
        ),
    )
    assert str(res.version) == "1.1.1"
    assert res.counts == BumpCounts(major=1, minor=2, patch=3, none=1)
    assert res.counts.total == res.total
    assert res.total == 7
    assert res.highest_bump is B.MAJOR


def test_accepts_string_start_and_rejects_bad_one():
    assert str(accumulate("1.2.3", []).version) == "1.2.3"
    with pytest.raises(InvalidVersionFormat):
        accumulate("1.2", _commits("feat: x"))


def test_consumes_generator_lazily_in_order():
    seen = []

    def gen():
        for rec in _commits("feat: a", "fix: b", "feat!: c"):
            seen.append(rec.subject)
            yield rec

    res = accumulate("0.0.0", gen())
    assert seen == ["feat: a", "fix: b", "feat!: c"]
    assert str(res.version) == "1.0.0"


def test_debug_log_per_bump(caplog):
    with caplog.at_level(logging.DEBUG, logger="semver_replay"):
        accumulate("0.0.0", _commits("feat: a", "docs: b"))
    msgs = [r.getMessage() for r in caplog.records]
    assert any("minor" in m and "0.0.0 -> 0.1.0" in m for m in msgs)
    assert not any("none" in m for m in msgs)


def test_result_json_uses_bump_names():
    res = accumulate("0.0.0", _commits("fix: a"))
    data = res.model_dump(mode="json")
    assert data["version"] == {"major": 0, "minor": 0, "patch": 1}
    assert data["counts"]["patch"] == 1


def test_result_counts_are_read_only():
    res = accumulate("0.0.0", _commits("feat!: a", "fix: b"))
    with pytest.raises(TypeError):
        res.counts[B.MAJOR] = 9  # type: ignore[index]
    with pytest.raises(ValidationError):
        res.counts.major = 9  # type: ignore[misc]
    assert res.count(B.MAJOR) == 1
    assert res.counts.total == res.total == 2
    assert res.counts.items() == [(B.MAJOR, 1), (B.MINOR, 0), (B.PATCH, 1), (B.NONE, 0)]
