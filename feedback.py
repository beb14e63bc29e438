# bucketlist_advisor/feedback.py

import logging
import threading
from typing import Callable, List, Optional

from .models import FeedbackRecord, RefreshEvent, Verdict

logger = logging.getLogger(__name__)

Listener = Callable[[RefreshEvent], None]


class RefreshChannel:
    """
    Publish/subscribe channel for "history changed" notifications.

    Listeners re-fetch from the server; nobody patches lists in place.
    A listener that raises is logged and does not stop the others.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: RefreshEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Refresh listener failed for %s", event.suggestion_id)


class FeedbackSubmitter:
    """Records a verdict server-side, then publishes a refresh event."""

    def __init__(self, api, channel: Optional[RefreshChannel] = None):
        self.api = api
        self.channel = channel or RefreshChannel()

    def submit(
        self,
        profile_id: str,
        suggestion_id: str,
        verdict: Verdict,
        reason: Optional[str] = None,
        is_custom_reason: bool = False,
    ) -> FeedbackRecord:
        reason = (reason or "").strip() or None
        if reason is None:
            is_custom_reason = False

        record = FeedbackRecord(
            profile_id=profile_id,
            suggestion_id=suggestion_id,
            verdict=verdict,
            reason=reason,
            is_custom_reason=is_custom_reason,
        )

        # raises on failure; nothing is published then
        self.api.submit_feedback(record)
        logger.info("Recorded %s for suggestion %s", verdict.value, suggestion_id)

        self.channel.publish(RefreshEvent(profile_id, suggestion_id, verdict))
        return record
