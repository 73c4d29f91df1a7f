"""Read commit records from git, oldest first."""
from __future__ import annotations

import subprocess
from collections.abc import Iterator

from semver_replay.accumulator import CommitRecord

# %x01 separates fields, %x02 terminates a commit
LOG_FORMAT = "%H%x01%s%x01%b%x02"


class HistoryError(RuntimeError):
    pass


class GitNotFound(HistoryError):
    pass


class GitCommandError(HistoryError):
    pass


def _git(args: list[str], repo: str, git: str) -> str:
    try:
        return subprocess.check_output([git, *args], cwd=repo, text=True, stderr=subprocess.PIPE)
    except FileNotFoundError as e:
        raise GitNotFound(f"git executable not found: {git}") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
        raise GitCommandError(f"git {' '.join(args)} failed: {detail}") from e


def ref_exists(ref: str, repo: str = ".", git: str = "git") -> bool:
    try:
        _git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], repo, git)
    except GitCommandError:
        return False
    return True


def has_commits(repo: str = ".", git: str = "git") -> bool:
    # raises for a directory that is not a repository at all
    _git(["rev-parse", "--git-dir"], repo, git)
    return ref_exists("HEAD", repo, git)


def latest_tag(repo: str = ".", git: str = "git") -> str | None:
    try:
        out = _git(["describe", "--tags", "--abbrev=0"], repo, git).strip()
    except GitCommandError:
        return None
    return out or None


def parse_log(out: str) -> Iterator[CommitRecord]:
    for block in out.split("\x02"):
        block = block.strip("\n")
        if not block.strip():
            continue
        parts = block.split("\x01")
        if len(parts) < 3:
            continue
        commit_hash, subject, body = parts[0], parts[1], parts[2]
        yield CommitRecord(hash=commit_hash.strip(), subject=subject, body=body.strip("\n"))


def read_history(repo: str = ".", since: str | None = None, git: str = "git") -> Iterator[CommitRecord]:
    if since and not ref_exists(since, repo, git):
        raise HistoryError(f"starting commit not found: {since}")
    if not since and not has_commits(repo, git):
        return iter(())
    rev_range = f"{since}..HEAD" if since else "HEAD"
    out = _git(["log", "--reverse", f"--format={LOG_FORMAT}", rev_range], repo, git)
    return parse_log(out)
