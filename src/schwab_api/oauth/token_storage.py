"""
Token storage for Schwab OAuth integration.

This module provides the token data structure with expiry tracking and an
optional file-based store. Tokens are written as plaintext JSON readable
only by the current user.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from .config import mask_secret
from .exceptions import TokenStorageError

logger = logging.getLogger(__name__)


@dataclass
class TokenData:
    """
    OAuth token set returned by the Schwab token endpoint.

    Attributes:
        access_token: Short-lived access token for API calls (30 minutes)
        refresh_token: Long-lived token for obtaining new access tokens (7 days)
        expires_in: Access token lifetime in seconds from issue time
        token_type: Token type (typically "Bearer")
        scope: Granted OAuth scopes
        issued_at: ISO timestamp of when tokens were issued/refreshed
        id_token: OpenID token, when the provider returns one
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"
    scope: str = ""
    issued_at: str = ""
    id_token: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.issued_at:
            self.issued_at = datetime.now(timezone.utc).isoformat()

    def __repr__(self) -> str:
        return (
            f"TokenData(access_token={mask_secret(self.access_token)}, "
            f"refresh_token={mask_secret(self.refresh_token)}, "
            f"expires_in={self.expires_in}, issued_at={self.issued_at})"
        )

    @property
    def expires_at(self) -> datetime:
        """
        Calculate expiration datetime.

        Returns:
            Datetime when access token expires (timezone-aware UTC)
        """
        issued = datetime.fromisoformat(self.issued_at)
        if issued.tzinfo is None:
            issued = issued.replace(tzinfo=timezone.utc)
        return issued + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at

    def expires_within(self, seconds: int) -> bool:
        """
        Check if token expires within given seconds.

        Args:
            seconds: Number of seconds to check

        Returns:
            True if token will expire within the specified time, False otherwise
        """
        return datetime.now(timezone.utc) + timedelta(seconds=seconds) >= self.expires_at

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenData":
        """
        Create TokenData from dictionary, ignoring unknown keys.

        Raises:
            TypeError: If required fields are missing
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


class TokenStorage:
    """
    File-based token storage (plaintext JSON, mode 600).

    Writes go through a temporary file in the same directory so a crash
    never leaves a half-written token file behind.
    """

    def __init__(self, token_file: str):
        """
        Initialize token storage.

        Args:
            token_file: Path of the token file (``~`` is expanded)
        """
        self.token_file = Path(token_file).expanduser()

    def save(self, token_data: TokenData) -> None:
        """
        Save tokens to file.

        Args:
            token_data: Token data to save

        Raises:
            TokenStorageError: If save operation fails
        """
        tmp_file = self.token_file.with_name(f".{self.token_file.name}.tmp")
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                json.dump(token_data.to_dict(), f, indent=2)
            os.replace(tmp_file, self.token_file)
            logger.info(f"Tokens saved to {self.token_file}")
        except OSError as e:
            logger.error(f"Failed to save tokens: {e}")
            raise TokenStorageError(f"Failed to save tokens: {e}") from e

    def load(self) -> Optional[TokenData]:
        """
        Load tokens from file.

        Returns:
            TokenData if file exists and is valid, None otherwise.
            A missing or corrupted file is not an error (re-authorization
            is needed either way).
        """
        if not self.token_file.exists():
            logger.debug(f"No token file found at {self.token_file}")
            return None

        try:
            with open(self.token_file, "r") as f:
                data = json.load(f)
            token_data = TokenData.from_dict(data)
            if isinstance(token_data.expires_in, bool) or not isinstance(token_data.expires_in, int):
                raise TypeError(f"expires_in must be an integer, got {token_data.expires_in!r}")
            expires_at = token_data.expires_at
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError, OverflowError) as e:
            logger.warning(
                f"Invalid token file at {self.token_file}, "
                f"will need re-authorization: {e}"
            )
            return None
        except OSError as e:
            logger.warning(f"Could not read token file: {e}")
            return None

        logger.debug(f"Tokens loaded from {self.token_file} (access token expires {expires_at})")
        return token_data

    def delete(self) -> bool:
        """
        Delete token file.

        Returns:
            True if file was deleted, False if file didn't exist

        Raises:
            TokenStorageError: If the file exists but cannot be removed
        """
        if not self.token_file.exists():
            logger.debug(f"Token file does not exist: {self.token_file}")
            return False

        try:
            self.token_file.unlink()
        except OSError as e:
            logger.error(f"Failed to delete token file: {e}")
            raise TokenStorageError(f"Failed to delete token file: {e}") from e

        logger.info(f"Token file deleted: {self.token_file}")
        return True

    def exists(self) -> bool:
        return self.token_file.exists()
