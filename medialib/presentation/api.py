from __future__ import annotations

import json
import logging
import time
import uuid
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from medialib.application.dimension_rules import DimensionRulesUseCase
from medialib.config import settings
from medialib.domain.media import MediaCollection
from medialib.infrastructure.image_validation import ImageValidationError, validate_upload
from medialib.infrastructure.metrics import metrics
from medialib.infrastructure.mime_types import PillowMimeRegistry
from medialib.infrastructure.registry_loader import load_registry

logger = logging.getLogger("medialib.api")
if not logger.handlers:
    logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Media Dimension Rules")

mime_registry = PillowMimeRegistry(match_image_prefix=settings.match_image_mime_prefix)
rules = DimensionRulesUseCase(mime_registry.is_image_collection)
registry = load_registry(settings.media_registry_path)


@dataclass
class SlidingWindow:
    timestamps: deque[float]


def _api_area(path: str) -> str:
    # "/api/collections/logo/rules" -> "collections"
    parts = [part for part in path.split("/") if part]
    return parts[1] if len(parts) > 1 else "root"


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)
        self._buckets: dict[str, SlidingWindow] = defaultdict(lambda: SlidingWindow(deque()))

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        request.state.request_id = request_id
        metrics.incr("http_requests_total")

        if request.url.path.startswith("/api/"):
            client_ip = request.client.host if request.client else "unknown"
            now = time.time()
            bucket = self._buckets[client_ip]
            window_start = now - 60.0

            while bucket.timestamps and bucket.timestamps[0] < window_start:
                bucket.timestamps.popleft()

            if len(bucket.timestamps) >= settings.rate_limit_per_minute:
                area = _api_area(request.url.path)
                metrics.incr("rate_limited_total")
                metrics.incr(f"rate_limited_{area}_total")
                logger.warning(json.dumps({"request_id": request_id, "client": client_ip, "rate_limited": area}))
                return Response(
                    content='{"detail":"Rate limit exceeded. Try again in a minute."}',
                    status_code=429,
                    media_type="application/json",
                    headers={"x-request-id": request_id},
                )

            bucket.timestamps.append(now)

        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        response.headers["x-request-id"] = request_id
        logger.info(
            json.dumps(
                {
                    "request_id": request_id,
                    "method": request.method,
                    "path": str(request.url.path),
                    "status": response.status_code,
                    "elapsed_ms": elapsed_ms,
                }
            )
        )
        return response


app.add_middleware(RequestContextMiddleware)


def _collection_or_404(name: str) -> MediaCollection:
    collection = registry.get_media_collection(name)
    if collection is None:
        raise HTTPException(status_code=404, detail=f"Unknown media collection {name!r}")
    return collection


def _collection_payload(collection: MediaCollection) -> dict:
    return {
        "name": collection.name,
        "mime_types": sorted(collection.mime_types),
        "conversions": [c.name for c in collection.conversions],
        "image_typed": mime_registry.is_image_collection(collection),
        "rules": rules.execute(collection.name, registry),
    }


@app.get("/api/collections")
def list_collections() -> dict:
    return {
        "global_conversions": [c.name for c in registry.global_conversions],
        "items": [_collection_payload(c) for c in registry.collections],
    }


@app.get("/api/collections/{name}/rules")
def get_dimension_rules(name: str) -> dict[str, str]:
    rule = rules.execute(name, registry)
    metrics.incr("rules_resolved_total")
    if not rule:
        metrics.incr("rules_empty_total")
    return {"collection": name, "rules": rule}


@app.post("/api/collections/{name}/validate")
async def validate_collection_upload(name: str, file: UploadFile = File(...)) -> dict:
    collection = _collection_or_404(name)
    label = file.filename or "file"

    if not collection.accepts(file.content_type, file):
        metrics.incr("uploads_rejected_total")
        raise HTTPException(
            status_code=415,
            detail=f"{label} ({file.content_type or 'unknown type'}) is not accepted by {name!r}",
        )

    image_bytes = await file.read()
    if len(image_bytes) > settings.max_upload_bytes:
        metrics.incr("uploads_rejected_total")
        raise HTTPException(
            status_code=413,
            detail=f"{label} is too large. Max size is {settings.max_upload_bytes // (1024 * 1024)} MB",
        )

    rule = rules.rule_for(name, registry)
    if not rule and not mime_registry.is_image_mime_type(file.content_type or ""):
        # Nothing to measure on a non-image upload.
        metrics.incr("uploads_accepted_total")
        return {"width": None, "height": None, "format": None, "rules": ""}

    try:
        width, height, fmt = validate_upload(image_bytes, rule, max_pixels=settings.max_image_pixels)
    except ImageValidationError as exc:
        metrics.incr("uploads_rejected_total")
        raise HTTPException(status_code=422, detail=f"{label}: {exc}") from exc

    metrics.incr("uploads_accepted_total")
    return {"width": width, "height": height, "format": fmt, "rules": rule.render()}


@app.get("/api/metrics")
def get_metrics() -> dict:
    metrics.set_gauge("collections_registered", len(registry.collections))
    snapshot = metrics.snapshot()
    snapshot["timestamp"] = int(datetime.now(timezone.utc).timestamp())
    return snapshot


@app.get("/api/metrics/prometheus")
def get_prometheus_metrics() -> PlainTextResponse:
    metrics.set_gauge("collections_registered", len(registry.collections))
    return PlainTextResponse(metrics.to_prometheus_text(), media_type="text/plain; version=0.0.4")


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
