"""JSON response decoding for the Schwab API client."""

import json
import logging
from typing import Any, Dict, List, Union

import requests

from .exceptions import SchwabResponseDecodeError

logger = logging.getLogger(__name__)

JSONResult = Union[Dict[str, Any], List[Any]]


def decode_json(response: requests.Response) -> JSONResult:
    """
    Decode a response body into a dict or list.

    JSON ``null`` decodes to an empty dict. Scalars are returned as-is.

    Args:
        response: Successful HTTP response

    Returns:
        Decoded JSON value

    Raises:
        SchwabResponseDecodeError: If the body is empty or not valid JSON
    """
    body = response.text
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to decode JSON response ({response.status_code}): {e}")
        raise SchwabResponseDecodeError(
            f"Failed to decode JSON response: {e}",
            status_code=response.status_code,
            response_body=body,
        ) from e

    if data is None:
        return {}
    return data
