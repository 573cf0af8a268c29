"""Request ID management for correlating logs and audit records.

The current request id is held in a ContextVar so it follows the request
across sync and async code. The audit recorder stamps it onto every record.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

REQUEST_ID_HEADER = "X-Request-ID"
NO_REQUEST_ID = "no-request-id"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID (UUID v4)."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or NO_REQUEST_ID


def current_request_id() -> Optional[str]:
    """Get current request ID, or None outside a request."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


@contextmanager
def request_id_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a request ID for the duration of a block.

    Example:
        with request_id_scope("import-job-42"):
            orchestrator.submit_technical_verdict(...)
    """
    request_id = request_id or generate_request_id()
    token = request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_var.reset(token)
