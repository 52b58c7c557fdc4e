"""
Error context extraction for Schwab API error bodies.

Schwab wraps upstream errors inside the ``error_description`` of its own
error payload, often as a quoted and partially escaped JSON string:

    {"error": "unsupported_token_type",
     "error_description": "400 Bad Request: \\"{\\"error_description\\":
        \\"Bad authorization code: ...\\",\\"error\\":\\"invalid_request\\"}\\""}

This module pulls the useful fields out of that structure. Parsing is
best-effort and never raises: the result is for diagnostics only.
"""

import json
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_STATUS_PATTERN = re.compile(r"(\d{3}) (.*)")


@dataclass
class ErrorContext:
    """
    Structured fields extracted from a Schwab error body.

    Attributes:
        error_label: Top-level ``error`` value (e.g. "unsupported_token_type")
        status_code: HTTP status embedded in the description (e.g. 400)
        status_name: HTTP reason embedded in the description (e.g. "Bad Request")
        error_tag: ``error`` value of the embedded JSON (e.g. "invalid_request")
        error_description: ``error_description`` of the embedded JSON
    """

    error_label: Optional[str] = None
    status_code: Optional[int] = None
    status_name: Optional[str] = None
    error_tag: Optional[str] = None
    error_description: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """True when nothing could be extracted."""
        return all(value is None for value in asdict(self).values())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _load_json_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _load_embedded_object(text: str) -> Optional[Dict[str, Any]]:
    """Decode the JSON embedded after the status prefix, tolerating stray escapes."""
    candidate = text.strip(' "')
    data = _load_json_object(candidate)
    if data is None and '\\"' in candidate:
        data = _load_json_object(candidate.replace('\\"', '"'))
    return data


def parse_error_body(body: Optional[str]) -> ErrorContext:
    """
    Extract an ErrorContext from a raw Schwab error response body.

    Args:
        body: Raw response text (may be empty, non-JSON or any JSON value)

    Returns:
        ErrorContext; fields that could not be found are left as None
    """
    context = ErrorContext()
    if not body:
        return context

    payload = _load_json_object(body)
    if payload is None:
        return context

    if payload.get("error") is not None:
        context.error_label = str(payload["error"])

    description = payload.get("error_description")
    if not isinstance(description, str):
        return context

    parts = description.split(":", 1)

    match = _STATUS_PATTERN.search(parts[0])
    if match:
        context.status_code = int(match.group(1))
        context.status_name = match.group(2)

    if len(parts) > 1:
        embedded = _load_embedded_object(parts[1])
        if embedded is not None:
            if embedded.get("error_description") is not None:
                context.error_description = str(embedded["error_description"]).strip()
            if embedded.get("error") is not None:
                context.error_tag = str(embedded["error"]).strip()

    logger.debug(f"Parsed error context: {context}")
    return context
