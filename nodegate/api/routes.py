from __future__ import annotations

import logging
import socket

from fastapi import APIRouter, BackgroundTasks, Request, Response

from nodegate.actuators.base import ShutdownError
from nodegate.api.exposition import CONTENT_TYPE, render_metrics
from nodegate.api.responses import plain_text
from nodegate.collectors.base import CollectorError
from nodegate.platforms import PlatformBackend

logger = logging.getLogger(__name__)

router = APIRouter()

UNKNOWN_HOSTNAME = "unknown"


def local_hostname() -> str:
    try:
        name = socket.gethostname()
    except OSError as exc:
        logger.warning("Failed to get hostname: %s", exc)
        return UNKNOWN_HOSTNAME
    return name or UNKNOWN_HOSTNAME


def run_shutdown(backend: PlatformBackend, force: bool) -> None:
    """Background task: the response has already been sent, so only log."""
    try:
        backend.shutdown(force)
    except ShutdownError as exc:
        logger.error("Shutdown failed: %s", exc)
    except Exception:
        logger.exception("Shutdown failed unexpectedly")


# ── routes ────────────────────────────────────────────


@router.get("/")
def get_hostname() -> Response:
    return plain_text(f"hostname: {local_hostname()}\n")


@router.get("/metrics")
def get_metrics(request: Request) -> Response:
    backend: PlatformBackend = request.app.state.backend
    try:
        metrics = backend.collect()
    except CollectorError as exc:
        logger.error("Failed to get metrics: %s", exc)
        return plain_text(f"Failed to get metrics: {exc}\n", status_code=500)
    return plain_text(render_metrics(metrics), content_type=CONTENT_TYPE)


@router.post("/shutdown")
def post_shutdown(
    request: Request,
    background_tasks: BackgroundTasks,
    force: str | None = None,
) -> Response:
    forced = force == "true"
    mode = "forced" if forced else "graceful"
    client = request.client.host if request.client else "<unknown>"
    logger.warning("Shutdown requested via web API (%s) by %s", mode, client)

    # Starlette runs background tasks only after the body has been sent.
    background_tasks.add_task(run_shutdown, request.app.state.backend, forced)
    return plain_text(f"Shutdown initiated ({mode})...\n")
