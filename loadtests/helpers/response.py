"""Response error extraction for load test observability.

Parses ordering API error responses into human-readable messages. Errors
come back as ``{"error": {"field": ["msg", ...]}, "kind": "ClassName"}``;
the payment notification endpoint answers in plain text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message suitable for Locust failure lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict) or "error" not in body:
        return str(body)[:300]

    error = body["error"]
    kind = body.get("kind")
    if isinstance(error, dict):
        parts = []
        for key, messages in error.items():
            if isinstance(messages, list):
                messages = "; ".join(str(m) for m in messages)
            parts.append(f"{key}: {messages}")
        detail = " | ".join(parts)
    else:
        detail = str(error)
    return f"{kind}: {detail}" if kind else detail
