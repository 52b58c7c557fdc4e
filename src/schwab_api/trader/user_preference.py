"""User preference endpoint for the Schwab Trader API."""

import logging
from typing import Any, Dict

from . import endpoints

logger = logging.getLogger(__name__)


class UserPreferenceMixin:
    """User preference query. Mixed into SchwabClient."""

    def get_user_preference(self) -> Dict[str, Any]:
        """
        Get user preferences: accounts, streamer info and market data offers.
        """
        logger.info("Fetching user preference")
        return self.get(endpoints.USER_PREFERENCE)
