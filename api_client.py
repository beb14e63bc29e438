"""
api_client.py
-------------
HTTP client for the bucket list backend (profile, queue, feedback,
history, API-key config).

- JSON in, JSON out
- GET requests are retried on transport errors and 5xx
- POST/DELETE are sent exactly once (feedback must never be doubled)
- 401 -> UnauthorizedError, other failures -> ApiError
- next_suggestion() returns None on 204/404 (empty queue, not an error)
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from .config import (
    API_BASE_URL,
    REQUEST_TIMEOUT,
    READ_RETRIES,
    RETRY_DELAY,
)
from .errors import ApiError, UnauthorizedError
from .models import FeedbackRecord, QueueKey, RejectedSuggestion, Suggestion, Verdict

logger = logging.getLogger(__name__)


# ============================================================
# Utility: error message extraction
# ============================================================
def _error_message(res: requests.Response, default: str) -> str:
    """Use the server's own message when it sent one."""
    try:
        body = res.json()
    except ValueError:
        return default

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return default


class ApiClient:
    def __init__(
        self,
        base_url: str = API_BASE_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        read_retries: int = READ_RETRIES,
        retry_delay: float = RETRY_DELAY,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.read_retries = max(1, read_retries)
        self.retry_delay = retry_delay

    # ---------------------------------------------------------
    # CORE REQUEST FUNCTION
    # ---------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        failure: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        ok_statuses=(),
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        attempts = self.read_retries if method == "GET" else 1
        last_error = None

        for attempt in range(attempts):
            try:
                res = self.session.request(
                    method,
                    url,
                    params=params,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.warning("%s %s failed (attempt %d): %s", method, path, attempt + 1, e)
                last_error = ApiError(f"{failure}: {e}")
                if attempt + 1 < attempts:
                    time.sleep(self.retry_delay)
                continue

            if res.status_code == 401:
                raise UnauthorizedError()

            if res.ok or res.status_code in ok_statuses:
                return res

            last_error = ApiError(_error_message(res, failure), res.status_code)

            # only server-side failures are worth another read attempt
            if res.status_code < 500:
                break
            if attempt + 1 < attempts:
                time.sleep(self.retry_delay)

        raise last_error

    @staticmethod
    def _json(res: requests.Response, failure: str) -> Any:
        try:
            return res.json()
        except ValueError:
            raise ApiError(f"{failure}: invalid JSON response", res.status_code)

    # ---------------------------------------------------------
    # PROFILE
    # ---------------------------------------------------------
    def create_profile(
        self, gender: str, age: int, capital, mode: Optional[str] = None
    ) -> Dict[str, Any]:
        failure = "Failed to create profile"
        payload = {"gender": gender, "age": age, "capital": float(capital)}
        if mode:
            payload["mode"] = mode

        res = self._request("POST", "/profile", failure=failure, payload=payload)
        data = self._json(res, failure)

        if not isinstance(data, dict) or "profileId" not in data:
            raise ApiError(f"{failure}: response has no profileId", res.status_code)
        return data

    # ---------------------------------------------------------
    # QUEUE
    # ---------------------------------------------------------
    def next_suggestion(self, key: QueueKey) -> Optional[Suggestion]:
        failure = "Failed to get next suggestion"
        res = self._request(
            "GET",
            f"/profiles/{key.profile_id}/suggestions/next",
            failure=failure,
            params=key.params(),
            ok_statuses=(404,),
        )

        if res.status_code in (204, 404) or not res.content:
            return None

        return Suggestion.from_dict(self._json(res, failure))

    def refill(self, key: QueueKey, batch_size: int) -> List[Suggestion]:
        failure = "Failed to generate new suggestions"
        res = self._request(
            "POST",
            f"/profiles/{key.profile_id}/suggestions/refill",
            failure=failure,
            params=key.params(),
            payload={"batchSize": batch_size},
        )

        if not res.content:
            return []

        data = self._json(res, failure)
        return [Suggestion.from_dict(s) for s in data.get("suggestions") or []]

    # ---------------------------------------------------------
    # FEEDBACK
    # ---------------------------------------------------------
    def submit_feedback(self, record: FeedbackRecord) -> None:
        verb = "accept" if record.verdict is Verdict.ACCEPT else "reject"
        self._request(
            "POST",
            "/feedback",
            failure=f"Failed to {verb} suggestion",
            payload=record.to_dict(),
        )

    # ---------------------------------------------------------
    # HISTORY
    # ---------------------------------------------------------
    def accepted(self, profile_id: str) -> List[Suggestion]:
        failure = "Failed to load bucket list"
        res = self._request(
            "GET", f"/profiles/{profile_id}/suggestions/accepted", failure=failure
        )
        data = self._json(res, failure)
        return [Suggestion.from_dict(s) for s in data.get("suggestions") or []]

    def rejected(self, profile_id: str) -> List[RejectedSuggestion]:
        failure = "Failed to load rejected suggestions"
        res = self._request(
            "GET", f"/profiles/{profile_id}/suggestions/rejected", failure=failure
        )
        data = self._json(res, failure)
        return [RejectedSuggestion.from_dict(s) for s in data.get("suggestions") or []]

    # ---------------------------------------------------------
    # API KEY CONFIG
    # ---------------------------------------------------------
    def api_key_status(self) -> bool:
        failure = "Failed to check API key status"
        res = self._request("GET", "/config/api-key/status", failure=failure)
        return bool(self._json(res, failure).get("hasValidKey"))

    def submit_api_key(self, api_key: str) -> bool:
        failure = "Failed to validate API key"
        # 400 carries {"valid": false, ...}: a negative answer, not a failure
        res = self._request(
            "POST",
            "/config/api-key",
            failure=failure,
            payload={"apiKey": api_key},
            ok_statuses=(400,),
        )
        return bool(self._json(res, failure).get("valid"))

    def clear_api_key(self) -> None:
        self._request("DELETE", "/config/api-key", failure="Failed to clear API key")
