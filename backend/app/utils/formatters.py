"""
Formatting helpers shared by the API error handlers and the MCP tools.
"""

from typing import Any, Dict


def format_error_response(error: Exception, status_code: int = 500) -> Dict[str, Any]:
    """
    Build the JSON body returned for a failed request.

    The body always carries ``error`` (exception class name), ``detail`` and
    ``status_code``. Validation errors add the offending ``field``; transition
    errors add the ``current`` and ``requested`` statuses.
    """
    response: Dict[str, Any] = {
        "error": type(error).__name__,
        "detail": getattr(error, "detail", None) or str(error),
        "status_code": status_code,
    }

    for attr in ("field", "current", "requested"):
        value = getattr(error, attr, None)
        if value:
            response[attr] = value

    return response


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Shorten ``text`` to at most ``max_length`` characters, marking the cut with ``suffix``."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
