# bucketlist_advisor/tests/conftest.py

import pytest

from bucketlist_advisor.errors import ApiError
from bucketlist_advisor.models import RejectedSuggestion, Suggestion, Verdict


def make_suggestion_dict(sid, *amounts, title=None, category="TRAVEL_VACATION", total=None):
    items = [
        {"name": f"item {i}", "description": "", "price": a}
        for i, a in enumerate(amounts)
    ]
    body = {
        "id": sid,
        "title": title or f"Suggestion {sid}",
        "description": "desc",
        "category": category,
        "priceBreakdown": {"lineItems": items, "currency": "SEK"},
        "rejectionReasons": ["Too expensive", "Not my thing"],
    }
    if total is not None:
        body["priceBreakdown"]["totalCost"] = total
    return body


def make_suggestion(sid, *amounts, **kw) -> Suggestion:
    return Suggestion.from_dict(make_suggestion_dict(sid, *amounts, **kw))


class FakeApi:
    """
    In-memory stand-in for the backend.

    pending[key]  : suggestions waiting in the queue for a (category, mode)
    stock[key]    : what the next refill will add (consumed per refill)
    """

    def __init__(self):
        self.key_valid = True
        self.profile_counter = 0
        self.pending = {}
        self.stock = {}
        self.accepted_list = []
        self.rejected_list = []
        self.feedback_calls = []
        self.refill_calls = []
        self.next_calls = 0

        # failure switches
        self.fail_create = None
        self.fail_feedback = None
        self.fail_next = None
        self.on_next = None

    @staticmethod
    def _k(key):
        return (key.category, key.mode)

    # --- config ---
    def api_key_status(self):
        return self.key_valid

    def submit_api_key(self, api_key):
        self.key_valid = api_key.startswith("sk-")
        return self.key_valid

    def clear_api_key(self):
        self.key_valid = False

    # --- profile ---
    def create_profile(self, gender, age, capital, mode=None):
        if self.fail_create:
            raise self.fail_create
        self.profile_counter += 1
        return {
            "profileId": f"p{self.profile_counter}",
            "profileSummary": f"{age} year old with {capital}",
            "mode": mode,
        }

    # --- queue ---
    def next_suggestion(self, key):
        self.next_calls += 1
        if self.on_next:
            self.on_next()
        if self.fail_next:
            raise self.fail_next
        queue = self.pending.get(self._k(key), [])
        return queue[0] if queue else None

    def refill(self, key, batch_size):
        self.refill_calls.append((self._k(key), batch_size))
        batch = self.stock.pop(self._k(key), [])[:batch_size]
        self.pending.setdefault(self._k(key), []).extend(batch)
        return list(batch)

    # --- feedback ---
    def submit_feedback(self, record):
        self.feedback_calls.append(record)
        if self.fail_feedback:
            raise self.fail_feedback

        for queue in self.pending.values():
            for s in list(queue):
                if s.id == record.suggestion_id:
                    queue.remove(s)
                    if record.verdict is Verdict.ACCEPT:
                        self.accepted_list.append(s)
                    else:
                        self.rejected_list.append(
                            RejectedSuggestion(s, record.reason, record.is_custom_reason)
                        )
                    return
        raise ApiError("Suggestion is not pending", 409)

    # --- history ---
    def accepted(self, profile_id):
        return list(self.accepted_list)

    def rejected(self, profile_id):
        return list(self.rejected_list)


@pytest.fixture
def api():
    return FakeApi()
