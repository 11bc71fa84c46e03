from __future__ import annotations

import logging

from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Receive, Scope, Send

from nodegate.api.responses import plain_text
from nodegate.engine.access_gate import AccessGate
from nodegate.models.access import AccessDecision, AccessReason

logger = logging.getLogger(__name__)

FORBIDDEN = "Forbidden\n"
FORBIDDEN_NOT_MEMBER = "Forbidden: Only accessible from the overlay network\n"


def denial_body(decision: AccessDecision) -> str:
    if decision.reason == AccessReason.INVALID_ADDRESS:
        return FORBIDDEN
    return FORBIDDEN_NOT_MEMBER


class AccessGateMiddleware:
    """Runs the access gate in front of every HTTP request.

    The gate is read from ``app.state.gate`` on each request. A denied
    request is answered with 403 and never reaches a route handler.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        gate: AccessGate = scope["app"].state.gate
        client = scope.get("client")
        remote = client[0] if client else ""

        # The roster lookup may shell out to the overlay CLI.
        decision = await run_in_threadpool(gate.decide, remote)
        if not decision.allow:
            logger.warning("Blocked request from %s: %s", remote or "<unknown>", decision.message)
            response = plain_text(denial_body(decision), status_code=403)
            await response(scope, receive, send)
            return

        scope.setdefault("state", {})["access"] = decision
        await self.app(scope, receive, send)
