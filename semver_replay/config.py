import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    # replay
    start_version: str = "0.0.0"  # SEMVER_START
    since: str | None = None  # SEMVER_SINCE (commit/tag; history after it)
    repo_path: str = "."  # SEMVER_REPO
    git_executable: str = "git"  # SEMVER_GIT

    # logging
    log_level: str = "INFO"  # SEMVER_LOG_LEVEL
    structured_logging: bool = True  # SEMVER_STRUCT_LOG ("0" to disable)

    # service
    auth_token: str | None = None  # SEMVER_AUTH_TOKEN
    max_body_bytes: int = 1_000_000  # 1MB
    log_jsonl_path: str | None = None  # SEMVER_LOG_JSONL


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        start_version=os.getenv("SEMVER_START", "0.0.0"),
        since=os.getenv("SEMVER_SINCE") or None,
        repo_path=os.getenv("SEMVER_REPO", "."),
        git_executable=os.getenv("SEMVER_GIT", "git"),
        log_level=os.getenv("SEMVER_LOG_LEVEL", "INFO"),
        structured_logging=os.getenv("SEMVER_STRUCT_LOG", "1") != "0",
        auth_token=os.getenv("SEMVER_AUTH_TOKEN"),
        max_body_bytes=int(os.getenv("SEMVER_MAX_BODY_BYTES", "1000000") or "1000000"),
        log_jsonl_path=os.getenv("SEMVER_LOG_JSONL"),
    )


def get_logger(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("semver_replay")
    if not logger.handlers:
        handler = logging.StreamHandler()
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
