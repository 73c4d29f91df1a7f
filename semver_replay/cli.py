#!/usr/bin/env python
"""Derive the semantic version of a repository by replaying its commits.

Every commit after ``--since`` (or the whole history) is classified with
Conventional Commits rules, oldest first, and folded onto ``--start``.
Prints the resulting version to stdout.
"""
from __future__ import annotations

import argparse
import json
import sys

from semver_replay.accumulator import accumulate
from semver_replay.ci import in_ci, write_github_output
from semver_replay.config import Settings, get_logger, load_settings
from semver_replay.history import HistoryError, latest_tag, read_history
from semver_replay.version import InvalidVersionFormat, parse_version


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="semver-replay", description=__doc__.splitlines()[0])
    p.add_argument("--start", default=settings.start_version, help="base version MAJOR.MINOR.PATCH")
    since = p.add_mutually_exclusive_group()
    since.add_argument("--since", default=settings.since, help="only replay commits after this ref")
    since.add_argument("--since-last-tag", action="store_true", help="replay commits after the newest tag")
    p.add_argument("--repo", default=settings.repo_path, help="repository path")
    p.add_argument("--json", action="store_true", help="print the full result as JSON")
    p.add_argument(
        "--github-output",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="append version outputs to $GITHUB_OUTPUT (default: on in CI)",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    logger = get_logger(settings.log_level)
    args = build_parser(settings).parse_args(argv)

    try:
        start = parse_version(args.start)
        since = args.since
        if args.since_last_tag:
            since = latest_tag(args.repo, settings.git_executable)
            if since is None:
                logger.info("no tags found; replaying full history")
        records = read_history(args.repo, since, settings.git_executable)
        result = accumulate(start, records)
    except (InvalidVersionFormat, HistoryError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if settings.structured_logging:
        logger.info(
            json.dumps(
                {
                    "event": "version_replayed",
                    "start": str(start),
                    "since": since,
                    "version": str(result.version),
                    "total": result.total,
                    "counts": {k.value: v for k, v in result.counts.items()},
                }
            )
        )
    else:
        logger.info(
            "%s -> %s (%d commits: %s)",
            start,
            result.version,
            result.total,
            ", ".join(f"{k.value}={v}" for k, v in result.counts.items()),
        )

    emit = args.github_output if args.github_output is not None else in_ci()
    if emit:
        write_github_output(
            {"version": str(result.version), "previous": str(start), "bump": result.highest_bump.value}
        )

    if args.json:
        print(result.model_dump_json())
    else:
        print(result.version)
    return 0


if __name__ == "__main__":
    sys.exit(main())
