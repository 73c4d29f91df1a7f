import asyncio
import json
import pathlib
import time
import uuid

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from semver_replay.accumulator import AccumulationResult, CommitRecord, accumulate
from semver_replay.config import get_logger, load_settings
from semver_replay.version import InvalidVersionFormat, parse_version

SET = load_settings()
logger = get_logger(SET.log_level)

app = FastAPI(title="semver-replay", version="0.1.0")

try:  # optional prometheus_client
    from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest
except ImportError:  # pragma: no cover
    Counter = None  # type: ignore

if Counter:  # pragma: no cover
    try:
        METRIC_COMMITS = Counter(
            "semver_replay_commits_total", "Commits classified", ["bump"]
        )
        METRIC_REQUESTS = Counter(
            "semver_replay_requests_total", "Accumulate requests", ["status"]
        )
    except ValueError:
        # Already registered (module reload in tests)
        METRIC_COMMITS = None
        METRIC_REQUESTS = None
else:
    METRIC_COMMITS = None
    METRIC_REQUESTS = None


class AccumulateRequest(BaseModel):
    start: str = "0.0.0"
    commits: list[CommitRecord] = Field(default_factory=list)


class AccumulateResponse(AccumulationResult):
    rendered: str
    request_id: str | None = None


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # type: ignore
    req_id = str(uuid.uuid4())
    request.state.request_id = req_id
    request.state.start_time = time.time()
    resp = await call_next(request)
    resp.headers["X-Request-ID"] = req_id
    return resp


@app.exception_handler(InvalidVersionFormat)
async def invalid_version_handler(request: Request, exc: InvalidVersionFormat):
    if METRIC_REQUESTS:
        METRIC_REQUESTS.labels(status="invalid").inc()
    return JSONResponse(
        status_code=422, content={"detail": "invalid_version_format", "value": exc.value}
    )


def require_auth(request: Request):
    if SET.auth_token:
        auth = request.headers.get("Authorization")
        if not auth or auth != f"Bearer {SET.auth_token}":
            raise HTTPException(status_code=401, detail="unauthorized")
    return True


@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "auth": bool(SET.auth_token),
        "log_jsonl": bool(SET.log_jsonl_path),
    }


@app.get("/readyz")
def readyz():
    return {"ok": True}


async def _append_jsonl(path: str, entry: dict) -> None:
    p = pathlib.Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    def _write():  # executed in thread
        with p.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry, separators=(",", ":")) + "\n")

    await asyncio.to_thread(_write)


@app.post("/accumulate")
async def accumulate_endpoint(request: Request, _: bool = Depends(require_auth)):
    body = await request.body()
    if len(body) > SET.max_body_bytes:
        raise HTTPException(status_code=413, detail="payload too large")
    try:
        req = AccumulateRequest.model_validate_json(body or b"{}")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"invalid_request:{e}") from e

    start = parse_version(req.start)
    result = accumulate(start, req.commits)
    request_id = getattr(request.state, "request_id", None)
    res = AccumulateResponse(
        **result.model_dump(), rendered=str(result.version), request_id=request_id
    )

    # persistence and metrics never block the response
    try:
        if SET.log_jsonl_path:
            client_ip = request.client.host if request.client else None
            await _append_jsonl(
                SET.log_jsonl_path,
                {
                    "ts": int(time.time()),
                    "start": req.start,
                    "version": res.rendered,
                    "total": res.total,
                    "ip": client_ip,
                },
            )
    except OSError as e:
        logger.warning("jsonl append failed: %s", e)
    if METRIC_COMMITS:
        for kind, n in result.counts.items():
            if n:
                METRIC_COMMITS.labels(bump=kind.value).inc(n)
    if METRIC_REQUESTS:
        METRIC_REQUESTS.labels(status="ok").inc()

    if SET.structured_logging:
        start_ts = getattr(request.state, "start_time", None)
        logger.info(
            json.dumps(
                {
                    "event": "accumulate_result",
                    "start": req.start,
                    "version": res.rendered,
                    "total": res.total,
                    "request_id": request_id,
                    "latency_ms": int((time.time() - start_ts) * 1000) if start_ts else None,
                }
            )
        )
    return Response(content=res.model_dump_json(), media_type="application/json", status_code=200)


@app.get("/metrics")
def metrics():  # pragma: no cover
    if not Counter:
        return Response(status_code=404, content="prometheus_client not installed")
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def main():
    # Convenience CLI entrypoint: `semver-replay-service`
    import os

    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8787"))
    uvicorn.run("services.semver.main:app", host=host, port=port, reload=False)
