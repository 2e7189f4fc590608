"""Shape dispatch outcomes into wire-ready values."""

from __future__ import annotations

import json
from typing import Any

from dotrpc.rpc.dispatcher import DispatchOutcome
from dotrpc.rpc.protocol import ErrorResponse, json_default


def build(outcome: DispatchOutcome) -> Any:
    """Return the structured reply, or None when nothing must be sent.

    A batch answers with a list in request order; a batch made only of
    notifications answers with nothing rather than an empty list.
    """
    entries = [entry.to_dict() for entry in outcome.entries]
    if outcome.is_batch:
        return entries or None
    return entries[0] if entries else None


def build_error(error: ErrorResponse) -> dict[str, Any]:
    """Structured form of a single top-level error."""
    return error.to_dict()


def serialize(value: Any) -> str:
    """Serialize a built reply; None becomes an empty body."""
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False, default=json_default)

