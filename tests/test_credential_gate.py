# bucketlist_advisor/tests/test_credential_gate.py

from bucketlist_advisor.credential_gate import CredentialGate
from bucketlist_advisor.errors import ApiError


def test_status_is_cached_until_invalidated(api):
    calls = []
    original = api.api_key_status

    def counting():
        calls.append(1)
        return original()

    api.api_key_status = counting
    gate = CredentialGate(api)

    assert gate.is_open()
    assert gate.is_open()
    assert len(calls) == 1

    gate.invalidate()
    api.key_valid = False
    assert not gate.is_open()
    assert len(calls) == 2


def test_failed_status_check_counts_as_closed(api):
    def broken():
        raise ApiError("Failed to check API key status", 500)

    api.api_key_status = broken
    gate = CredentialGate(api)

    assert gate.check_status() is False
    assert gate.last_error == "Failed to check API key status"


def test_submit(api):
    gate = CredentialGate(api)

    assert gate.submit("  ") is False
    assert gate.last_error == "Please enter an API key"

    assert gate.submit("nope") is False
    assert gate.last_error == "Invalid API key"

    assert gate.submit("sk-123") is True
    assert gate.is_open()
    assert gate.last_error is None


def test_clear_closes_gate(api):
    gate = CredentialGate(api)
    assert gate.is_open()

    gate.clear()

    assert not gate.is_open()
    assert api.key_valid is False
