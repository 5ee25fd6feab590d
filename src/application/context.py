"""
application.context - Request-scoped caller context.

Every service call receives its context explicitly. Two concurrent callers
get two different RequestContext instances; nothing is read from globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4


@dataclass(frozen=True)
class RequestContext:
    """Per-request context passed through all layers.

    Attributes:
        user_id:     Resolved identity of the caller (provided by the adapter).
        request_id:  Unique per request, for tracing/logging.
    """
    user_id: str
    request_id: str = field(default_factory=lambda: uuid4().hex)
