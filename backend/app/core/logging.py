"""
Request logging with per-request correlation IDs.
"""

import uuid
from contextvars import ContextVar
from typing import Optional
from loguru import logger
from fastapi import Request

# Correlation ID of the request being handled
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def set_correlation_id(cid: Optional[str] = None) -> str:
    """
    Store a correlation ID for the current request context.

    Args:
        cid: ID supplied by the caller. A fresh UUID4 is used when missing.

    Returns:
        The ID now in context.
    """
    cid = cid or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def log_request(
    request: Request,
    method: str,
    path: str,
    correlation_id: Optional[str] = None
) -> None:
    """Log an incoming API call."""
    cid = correlation_id or get_correlation_id() or set_correlation_id()
    client_ip = request.client.host if request.client else None

    logger.bind(correlation_id=cid, method=method, path=path, client_ip=client_ip).info(
        f"{method} {path} from {client_ip or 'unknown'} [{cid}]"
    )


def log_response(
    status_code: int,
    response_time_ms: float,
    correlation_id: Optional[str] = None
) -> None:
    """
    Log the outcome of an API call.

    4xx responses are warnings (not found, validation, bad transition), 5xx are errors.
    """
    cid = correlation_id or get_correlation_id()
    if status_code >= 500:
        level = "ERROR"
    elif status_code >= 400:
        level = "WARNING"
    else:
        level = "INFO"

    logger.bind(correlation_id=cid, status_code=status_code).log(
        level, f"Responded {status_code} in {response_time_ms:.2f}ms [{cid}]"
    )
