# bucketlist_advisor/history.py
"""
History Views
-------------
Read-only projections of a profile's accepted and rejected suggestions.

Both lists are replaced wholesale on every refresh (last response wins)
and the budget is re-derived from the accepted list each time.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from .budget_tracker import BudgetState, compute_budget
from .errors import ApiError
from .feedback import RefreshChannel
from .models import Profile, RefreshEvent, RejectedSuggestion, Suggestion

logger = logging.getLogger(__name__)

class HistoryView:
    def __init__(self, api, channel: Optional[RefreshChannel] = None):
        self.api = api
        self._lock = threading.Lock()
        self._profile: Optional[Profile] = None

        self.accepted: List[Suggestion] = []
        self.rejected: List[RejectedSuggestion] = []
        self.budget: Optional[BudgetState] = None
        self.errors: Dict[str, str] = {}

        if channel is not None:
            channel.subscribe(self.on_refresh)

    # ---------------------------------------------------------
    # binding
    # ---------------------------------------------------------
    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    def bind(self, profile: Optional[Profile]) -> None:
        with self._lock:
            self._profile = profile
            self.accepted = []
            self.rejected = []
            self.budget = compute_budget([], profile.capital) if profile else None
            self.errors = {}

    def _is_bound(self, profile_id: str) -> bool:
        return self._profile is not None and self._profile.profile_id == profile_id

    # ---------------------------------------------------------
    # refresh
    # ---------------------------------------------------------
    def on_refresh(self, event: RefreshEvent) -> None:
        if self._is_bound(event.profile_id):
            self.refresh()

    def refresh_accepted(self) -> None:
        profile = self._profile
        if profile is None:
            return

        try:
            items = self.api.accepted(profile.profile_id)
        except ApiError as e:
            with self._lock:
                if self._is_bound(profile.profile_id):
                    self.errors["accepted"] = e.message
            return

        with self._lock:
            # profile changed while the request was in flight
            if not self._is_bound(profile.profile_id):
                logger.debug("Dropping accepted list for stale profile %s", profile.profile_id)
                return
            self.accepted = items
            self.budget = compute_budget(items, profile.capital)
            self.errors.pop("accepted", None)

    def refresh_rejected(self) -> None:
        profile = self._profile
        if profile is None:
            return

        try:
            items = self.api.rejected(profile.profile_id)
        except ApiError as e:
            with self._lock:
                if self._is_bound(profile.profile_id):
                    self.errors["rejected"] = e.message
            return

        # most recent first; entries without a timestamp sink to the end
        items = sorted(items, key=lambda r: r.rejected_at or "", reverse=True)

        with self._lock:
            if not self._is_bound(profile.profile_id):
                logger.debug("Dropping rejected list for stale profile %s", profile.profile_id)
                return
            self.rejected = items
            self.errors.pop("rejected", None)

    def refresh(self) -> None:
        """Both lists are independent reads; fetch them side by side."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [
                pool.submit(self.refresh_accepted),
                pool.submit(self.refresh_rejected),
            ]
            for f in futures:
                f.result()

    # ---------------------------------------------------------
    # derived stats
    # ---------------------------------------------------------
    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "accepted": len(self.accepted),
                "rejected": len(self.rejected),
                "custom_reasons": sum(1 for r in self.rejected if r.is_custom_reason),
            }

    def resolved_ids(self) -> set:
        with self._lock:
            return {s.id for s in self.accepted} | {r.id for r in self.rejected}
