"""
Schwab-specific data models.

Endpoint methods return decoded JSON; the models here cover the few
responses that carry no JSON body.
"""

from dataclasses import dataclass
from typing import Optional

import requests


@dataclass
class OrderPlacement:
    """
    Outcome of an order mutation (place, replace, cancel).

    Schwab answers these with an empty body; a placed or replacing order's
    id is only available from the ``Location`` header.

    Attributes:
        status_code: HTTP status (201 for placed orders, 200 otherwise)
        order_id: Id of the new order, when Schwab reports one
        location: Raw ``Location`` header value
    """

    status_code: int
    order_id: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_response(cls, response: requests.Response) -> "OrderPlacement":
        location = response.headers.get("Location")
        order_id = None
        if location:
            order_id = location.rstrip("/").rsplit("/", 1)[-1] or None
        return cls(status_code=response.status_code, order_id=order_id, location=location)
