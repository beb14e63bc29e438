# bucketlist_advisor/tests/test_history.py

from decimal import Decimal

from bucketlist_advisor.errors import ApiError
from bucketlist_advisor.history import HistoryView
from bucketlist_advisor.models import Profile, RefreshEvent, RejectedSuggestion, Verdict

from conftest import make_suggestion


def _profile(pid="p1", capital=1000):
    return Profile(pid, "UNSPECIFIED", 30, Decimal(capital))


def test_refresh_replaces_lists_and_budget(api):
    api.accepted_list = [make_suggestion("a", 400), make_suggestion("b", 700)]
    view = HistoryView(api)
    view.bind(_profile())

    view.refresh()

    assert [s.id for s in view.accepted] == ["a", "b"]
    assert view.budget.total_cost == Decimal("1100")
    assert view.budget.is_over_budget

    api.accepted_list = [make_suggestion("a", 400)]
    view.refresh()
    assert view.budget.total_cost == Decimal("400")


def test_rejected_most_recent_first(api):
    api.rejected_list = [
        RejectedSuggestion(make_suggestion("old", 1), "meh", False, "2024-01-01T00:00:00Z"),
        RejectedSuggestion(make_suggestion("new", 1), "nah", True, "2024-03-01T00:00:00Z"),
        RejectedSuggestion(make_suggestion("none", 1), None),
    ]
    view = HistoryView(api)
    view.bind(_profile())
    view.refresh_rejected()

    assert [r.id for r in view.rejected] == ["new", "old", "none"]


def test_events_for_other_profiles_are_ignored(api):
    api.accepted_list = [make_suggestion("a", 1)]
    view = HistoryView(api)
    view.bind(_profile("p1"))

    view.on_refresh(RefreshEvent("p2", "a", Verdict.ACCEPT))
    assert view.accepted == []

    view.on_refresh(RefreshEvent("p1", "a", Verdict.ACCEPT))
    assert [s.id for s in view.accepted] == ["a"]


def test_response_for_unbound_profile_is_dropped(api):
    view = HistoryView(api)
    view.bind(_profile("p1"))

    def accepted_then_rebind(profile_id):
        view.bind(_profile("p2"))
        return [make_suggestion("stale", 5)]

    api.accepted = accepted_then_rebind
    view.refresh_accepted()

    assert view.accepted == []
    assert view.profile.profile_id == "p2"


def test_read_failure_is_kept_per_list(api):
    def broken(profile_id):
        raise ApiError("Failed to load bucket list", 500)

    api.accepted = broken
    api.rejected_list = [RejectedSuggestion(make_suggestion("r", 1), "x")]
    view = HistoryView(api)
    view.bind(_profile())

    view.refresh()

    assert view.errors == {"accepted": "Failed to load bucket list"}
    assert [r.id for r in view.rejected] == ["r"]


def test_unbound_view_does_nothing(api):
    view = HistoryView(api)
    view.refresh()
    assert view.budget is None
    assert view.stats() == {"accepted": 0, "rejected": 0, "custom_reasons": 0}


def test_nan_price_still_refreshes_budget(api):
    api.accepted_list = [make_suggestion("a", "NaN"), make_suggestion("b", 300)]
    view = HistoryView(api)
    view.bind(_profile())

    view.refresh()

    assert [s.id for s in view.accepted] == ["a", "b"]
    assert view.budget.total_cost == Decimal("300")
    assert view.errors == {}


def test_resolved_ids_cover_both_lists(api):
    api.accepted_list = [make_suggestion("a", 1)]
    api.rejected_list = [RejectedSuggestion(make_suggestion("r", 1), "x")]
    view = HistoryView(api)
    view.bind(_profile())
    view.refresh()

    assert view.resolved_ids() == {"a", "r"}
