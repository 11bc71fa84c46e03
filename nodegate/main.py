from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from nodegate.api.gate import AccessGateMiddleware
from nodegate.api.responses import plain_text
from nodegate.api.routes import router
from nodegate.config import settings
from nodegate.engine import AccessGate, CommandPeerRoster
from nodegate.platforms import select_backend

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED = "Method not allowed"
METHOD_NOT_ALLOWED_POST = "Method not allowed (use POST)"


def build_gate() -> AccessGate:
    roster = CommandPeerRoster(settings.peer_roster_command) if settings.peer_roster_command else None
    return AccessGate(
        overlay_networks=(settings.overlay_ipv4_network, settings.overlay_ipv6_network),
        peer_roster=roster,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── startup ───────────────────────────────────────
    backend = select_backend()
    app.state.backend = backend
    app.state.gate = build_gate()

    logger.info(
        "nodegate started on %s:%d (platform backend: %s)",
        settings.host,
        settings.port,
        backend.platform,
    )

    yield

    # ── shutdown ──────────────────────────────────────
    logger.info("nodegate stopped")


# Only the three control routes are served; no generated docs or schema.
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(AccessGateMiddleware)
app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def plain_http_error(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if exc.status_code == 405:
        detail = METHOD_NOT_ALLOWED_POST if request.url.path == "/shutdown" else METHOD_NOT_ALLOWED
    return plain_text(f"{detail}\n", status_code=exc.status_code, headers=exc.headers)


def run(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Overlay-network gated control plane")
    parser.add_argument("--host", default=settings.host, help="bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="listen port")
    parser.add_argument("--log-level", default=settings.log_level, help="logging level")
    args = parser.parse_args(argv)

    settings.host = args.host
    settings.port = args.port

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    run()
