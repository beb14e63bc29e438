# bucketlist_advisor/suggestion_queue.py
"""
Suggestion Queue Client
-----------------------
Hands out one pending suggestion at a time for a queue key:

1. fetch next pending
2. found -> done
3. empty -> on_generating() callback, then ONE refill of `batch_size`
4. fetch next again (never trust the refill payload itself)
5. still empty -> "exhausted"

Request failures propagate; the session machine decides what to do.
"""

import logging
from typing import Callable, Dict, Any, Iterable, Optional

from .config import REFILL_BATCH_SIZE, REFILL_BATCH_MIN, REFILL_BATCH_MAX
from .models import QueueKey, Suggestion

logger = logging.getLogger(__name__)

READY = "ready"
EXHAUSTED = "exhausted"


# ---------------------------------------------------------
# uniform packaging
# ---------------------------------------------------------
def _pkg(status, suggestion=None, refilled=False, added=0) -> Dict[str, Any]:
    return {
        "status": status,
        "suggestion": suggestion,
        "refilled": refilled,
        "added": added,
    }


class SuggestionQueue:
    def __init__(self, api, *, batch_size: int = REFILL_BATCH_SIZE):
        if not REFILL_BATCH_MIN <= batch_size <= REFILL_BATCH_MAX:
            raise ValueError(
                f"batch_size must be between {REFILL_BATCH_MIN} and {REFILL_BATCH_MAX}"
            )
        self.api = api
        self.batch_size = batch_size

    def _fetch(self, key: QueueKey, exclude: Iterable[str]) -> Optional[Suggestion]:
        s = self.api.next_suggestion(key)
        if s is not None and s.id in exclude:
            # already verdicted locally; treat as empty rather than show it twice
            logger.warning("Server served resolved suggestion %s again, skipping", s.id)
            return None
        return s

    def next(
        self,
        key: QueueKey,
        *,
        exclude: Iterable[str] = (),
        on_generating: Optional[Callable[[], None]] = None,
    ) -> Dict[str, Any]:
        exclude = frozenset(exclude)

        s = self._fetch(key, exclude)
        if s is not None:
            return _pkg(READY, s)

        if on_generating is not None:
            on_generating()

        logger.info(
            "Queue empty for %s/%s, requesting refill of %d",
            key.category,
            key.mode,
            self.batch_size,
        )
        added = self.api.refill(key, self.batch_size)

        s = self._fetch(key, exclude)
        if s is not None:
            return _pkg(READY, s, refilled=True, added=len(added))

        logger.info("Queue exhausted for %s/%s after refill", key.category, key.mode)
        return _pkg(EXHAUSTED, refilled=True, added=len(added))
