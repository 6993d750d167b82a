# backend/tests/services/test_cancellation.py

import pytest

from barbershop.services.availability.cancellation import (
    CancellationToken,
    SupersedeRegistry,
    check_token,
)
from barbershop.services.availability.errors import ComputationCancelled


def test_token_is_one_way():
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled()

    token.cancel()
    token.cancel()

    assert token.cancelled
    with pytest.raises(ComputationCancelled):
        token.raise_if_cancelled()


def test_check_token_accepts_none():
    check_token(None)


def test_new_request_cancels_previous_for_same_client():
    registry = SupersedeRegistry()

    first = registry.begin("tab-1")
    second = registry.begin("tab-1")
    other = registry.begin("tab-2")

    assert first.cancelled
    assert not second.cancelled
    assert not other.cancelled
    assert len(registry) == 2


def test_finish_only_removes_current_token():
    registry = SupersedeRegistry()
    first = registry.begin("tab-1")
    second = registry.begin("tab-1")

    registry.finish("tab-1", first)
    assert len(registry) == 1

    registry.finish("tab-1", second)
    assert len(registry) == 0


def test_anonymous_requests_are_not_tracked():
    registry = SupersedeRegistry()

    a = registry.begin(None)
    b = registry.begin("")

    assert not a.cancelled and not b.cancelled
    assert len(registry) == 0
    registry.finish(None, a)
