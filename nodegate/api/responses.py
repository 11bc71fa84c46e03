from __future__ import annotations

from collections.abc import Mapping

from fastapi import Response


def plain_text(
    body: str,
    status_code: int = 200,
    content_type: str = "text/plain",
    headers: Mapping[str, str] | None = None,
) -> Response:
    """Plain-text response with the Content-Type passed through verbatim."""
    merged = dict(headers or {})
    merged["Content-Type"] = content_type
    return Response(content=body, status_code=status_code, headers=merged)
