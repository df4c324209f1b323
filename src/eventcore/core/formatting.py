"""Diagnostic rendering of handler failures."""

from __future__ import annotations

from eventcore.core.exceptions import EventCoreError


def format_failure(message: str, error: BaseException) -> str:
    """Render *error* for diagnostic output.

    Errors from the eventcore hierarchy render as
    ``"<error message> [k1:v1,k2:v2]"``. Anything else falls back to
    the generic *message*.
    """
    if not isinstance(error, EventCoreError):
        return message
    pairs = ",".join(f"{key}:{value}" for key, value in error.details.items())
    return f"{error.message} [{pairs}]"
