# bucketlist_advisor/credential_gate.py
"""
Credential gate around the backend's API-key config.

Status is cached after the first check. Any 401 seen elsewhere calls
invalidate(), and the next is_open() asks the server again.
"""

import logging
from typing import Optional

from .errors import ApiError

logger = logging.getLogger(__name__)


class CredentialGate:
    def __init__(self, api):
        self.api = api
        self._status: Optional[bool] = None
        self.last_error: Optional[str] = None

    @property
    def known(self) -> bool:
        return self._status is not None

    def check_status(self) -> bool:
        """Ask the server. A failed check counts as a closed gate."""
        try:
            self._status = self.api.api_key_status()
            self.last_error = None
        except ApiError as e:
            logger.warning("API key status check failed: %s", e)
            self._status = False
            self.last_error = "Failed to check API key status"
        return self._status

    def is_open(self) -> bool:
        if self._status is None:
            return self.check_status()
        return self._status

    def submit(self, key: str) -> bool:
        key = (key or "").strip()
        if not key:
            self.last_error = "Please enter an API key"
            return False

        try:
            valid = self.api.submit_api_key(key)
        except ApiError as e:
            logger.warning("API key submission failed: %s", e)
            self.last_error = "Failed to validate API key"
            return False

        self._status = valid
        self.last_error = None if valid else "Invalid API key"
        logger.info("API key submitted, valid=%s", valid)
        return valid

    def clear(self) -> None:
        self.api.clear_api_key()
        self._status = False

    def invalidate(self) -> None:
        """Forget the cached status; the next is_open() re-checks."""
        self._status = None
