"""Tests for codebottle.cache.revision_store -- dense, position-keyed history."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from codebottle.cache import RevisionStore
from codebottle.exceptions import InvalidUsageError, ProtocolError, RevisionGapError


class _Rev:
    def __init__(self, index: int, payload: Mapping[str, Any]) -> None:
        self.index = index
        self.title = None
        self.explanation = None
        self.update(payload)

    @property
    def id(self) -> str:
        return str(self.index)

    def update(self, payload: Mapping[str, Any]) -> "_Rev":
        for field in ("title", "explanation"):
            if payload.get(field) is not None:
                setattr(self, field, payload[field])
        return self


@pytest.fixture
def store() -> RevisionStore[_Rev]:
    return RevisionStore("abc123", _Rev)


class TestReconcile:
    def test_append_at_end(self, store: RevisionStore[_Rev]) -> None:
        first = store.reconcile(0, {"title": "v0"})
        second = store.reconcile(1, {"title": "v1"})
        assert len(store) == 2
        assert store.values() == (first, second)
        assert second.index == 1

    def test_update_in_place(self, store: RevisionStore[_Rev]) -> None:
        rev = store.reconcile(0, {"title": "v0"})
        again = store.reconcile(0, {"explanation": "typo"})
        assert again is rev
        assert rev.title == "v0"
        assert rev.explanation == "typo"
        assert len(store) == 1

    def test_gap_is_rejected(self, store: RevisionStore[_Rev]) -> None:
        store.reconcile(0, {})
        with pytest.raises(RevisionGapError) as exc_info:
            store.reconcile(2, {})
        assert exc_info.value.index == 2
        assert exc_info.value.length == 1
        assert isinstance(exc_info.value, IndexError)
        assert len(store) == 1

    def test_gap_on_empty_store(self, store: RevisionStore[_Rev]) -> None:
        with pytest.raises(RevisionGapError, match="abc123"):
            store.reconcile(1, {})

    def test_negative_index(self, store: RevisionStore[_Rev]) -> None:
        with pytest.raises(InvalidUsageError):
            store.reconcile(-1, {})


class TestReconcileAll:
    def test_fills_empty_store(self, store: RevisionStore[_Rev]) -> None:
        result = store.reconcile_all([{"title": "a"}, {"title": "b"}, {"title": "c"}])
        assert [r.title for r in result] == ["a", "b", "c"]
        assert [r.index for r in result] == [0, 1, 2]

    def test_merges_known_positions_and_appends_the_rest(self, store: RevisionStore[_Rev]) -> None:
        first = store.reconcile(0, {"title": "a", "explanation": "initial"})
        result = store.reconcile_all([{"title": "A"}, {"title": "b"}])
        assert result[0] is first
        assert first.title == "A"
        assert first.explanation == "initial"
        assert len(store) == 2

    def test_null_entry_leaves_known_position_untouched(self, store: RevisionStore[_Rev]) -> None:
        first = store.reconcile(0, {"title": "a"})
        store.reconcile_all([None, {"title": "b"}])
        assert first.title == "a"
        assert len(store) == 2

    def test_null_entry_past_end(self, store: RevisionStore[_Rev]) -> None:
        with pytest.raises(ProtocolError, match="null revision 1"):
            store.reconcile_all([{"title": "a"}, None])

    def test_rejected_batch_stores_nothing(self, store: RevisionStore[_Rev]) -> None:
        first = store.reconcile(0, {"title": "a"})
        with pytest.raises(ProtocolError, match="null revision 3"):
            store.reconcile_all([{"title": "A"}, {"title": "b"}, {"title": "c"}, None])
        assert len(store) == 1
        assert store.values() == (first,)
        assert first.title == "a"

    def test_not_a_list(self, store: RevisionStore[_Rev]) -> None:
        with pytest.raises(ProtocolError):
            store.reconcile_all({"0": {}})

    def test_shorter_list_keeps_existing_tail(self, store: RevisionStore[_Rev]) -> None:
        store.reconcile_all([{"title": "a"}, {"title": "b"}])
        store.reconcile_all([{"title": "A"}])
        assert [r.title for r in store] == ["A", "b"]


class TestDensity:
    def test_positions_are_contiguous(self, store: RevisionStore[_Rev]) -> None:
        for i in range(5):
            store.reconcile(i, {"title": str(i)})
        with pytest.raises(RevisionGapError):
            store.reconcile(7, {})
        assert [r.index for r in store.values()] == list(range(5))
        assert store.get(4) is not None
        assert store.get(5) is None
