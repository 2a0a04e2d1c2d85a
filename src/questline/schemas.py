"""Response envelope shared by every JSON endpoint: ``{success, data?, message, count?}``."""

from __future__ import annotations

from typing import Any


def envelope(data: Any = None, message: str = "", count: int | None = None) -> dict[str, Any]:  # noqa: ANN401
    """Build a success envelope. ``count`` is only emitted when given."""
    body: dict[str, Any] = {"success": True, "data": data, "message": message}
    if count is not None:
        body["count"] = count
    return body


def error_envelope(message: str) -> dict[str, Any]:
    return {"success": False, "message": message}
