"""Draft, applied and debounced filter registers."""

import asyncio

import pytest

from review_dashboard.errors import ValidationError
from review_dashboard.filter_state import Debouncer, FilterStateManager
from review_dashboard.models import FilterCriteria


def test_editing_draft_does_not_apply():
    manager = FilterStateManager()

    manager.set_draft_field("location", "Chicago")

    assert manager.draft.location == "Chicago"
    assert manager.applied.is_empty
    assert manager.applied_version == 0


def test_commit_swaps_in_the_draft():
    manager = FilterStateManager()
    manager.set_draft_field("rating", 4)

    applied = manager.commit()
    manager.set_draft_field("rating", 2)

    assert applied.rating == "4"
    assert manager.applied.rating == "4"
    assert manager.draft.rating == "2"
    assert manager.applied_version == 1


def test_values_are_normalized():
    manager = FilterStateManager()

    manager.set_draft_field("location", "  Chicago ")
    manager.set_draft_field("discount_applied", 5)
    assert manager.draft.location == "Chicago"
    assert manager.draft.discount_applied == "5"

    manager.set_draft_field("location", None)
    assert manager.draft.location == ""


def test_unknown_field_is_rejected():
    manager = FilterStateManager()
    with pytest.raises(ValidationError):
        manager.set_draft_field("agent_name", "Alice")


def test_clear_is_idempotent():
    manager = FilterStateManager()
    manager.set_draft_field("sentiment", "Positive")
    manager.commit()

    manager.clear()
    once = (manager.draft, manager.applied, manager.debounced)
    manager.clear()
    twice = (manager.draft, manager.applied, manager.debounced)

    assert once == twice
    assert all(criteria == FilterCriteria.empty() for criteria in once)


def test_debounced_draft_settles_on_last_value():
    settled = []

    async def scenario():
        manager = FilterStateManager(debounce_seconds=0.05, on_debounced=settled.append)
        for text in ("C", "Ch", "Chi"):
            manager.set_draft_field("location", text)
        assert manager.debounced.is_empty
        await asyncio.sleep(0.15)
        return manager

    manager = asyncio.run(scenario())

    assert manager.debounced.location == "Chi"
    assert [criteria.location for criteria in settled] == ["Chi"]
    # The preview never applies anything
    assert manager.applied.is_empty


def test_superseded_timer_never_fires():
    async def scenario():
        manager = FilterStateManager(debounce_seconds=0.1)
        manager.set_draft_field("location", "a")
        await asyncio.sleep(0.06)
        manager.set_draft_field("location", "b")
        await asyncio.sleep(0.06)
        midway = manager.debounced
        await asyncio.sleep(0.12)
        return midway, manager.debounced

    midway, final = asyncio.run(scenario())

    assert midway.is_empty
    assert final.location == "b"


def test_clear_cancels_pending_preview():
    settled = []

    async def scenario():
        manager = FilterStateManager(debounce_seconds=0.05, on_debounced=settled.append)
        manager.set_draft_field("location", "x")
        manager.clear()
        await asyncio.sleep(0.1)
        return manager

    manager = asyncio.run(scenario())

    assert manager.debounced.is_empty
    assert settled == []


def test_debouncer_without_loop_settles_immediately():
    seen = []
    debouncer = Debouncer(initial=0, delay=10, on_settle=seen.append)

    debouncer.push(3)

    assert debouncer.value == 3
    assert not debouncer.pending
    assert seen == [3]


def test_commit_accepts_explicit_criteria():
    manager = FilterStateManager()
    manager.set_draft_field("location", "Houston")
    snapshot = manager.draft
    manager.set_draft_field("location", "Chicago")

    manager.commit(snapshot)

    assert manager.applied.location == "Houston"
    assert manager.draft.location == "Chicago"
