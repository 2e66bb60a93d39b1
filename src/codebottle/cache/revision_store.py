"""Per-snippet, position-keyed store of revisions.

Revisions have no global identity; their position in the snippet's history
is their id. The store keeps them in a dict keyed by position plus an
explicit count of contiguous positions, and only ever updates a known
position or appends at the end. A write that would leave a hole raises
:class:`~codebottle.exceptions.RevisionGapError`, so positions ``0..n-1``
are always all present.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from codebottle.entities.base import Entity
from codebottle.exceptions import InvalidUsageError, ProtocolError, RevisionGapError

R = TypeVar("R", bound=Entity)


class RevisionStore(Generic[R]):
    """Ordered revisions of one snippet.

    Args:
        snippet_id: Id of the owning snippet, used in error messages.
        factory: Builds a revision from its position and raw payload.
    """

    def __init__(self, snippet_id: str, factory: Callable[[int, Mapping[str, Any]], R]) -> None:
        self._snippet_id = snippet_id
        self._factory = factory
        self._revisions: dict[int, R] = {}
        self._length = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return self._length

    def __iter__(self) -> Iterator[R]:
        return iter(self.values())

    def get(self, index: int) -> Optional[R]:
        """Return the cached revision at *index*, or ``None`` if it is not known."""
        with self._lock:
            return self._revisions.get(index)

    def values(self) -> tuple[R, ...]:
        """Read-only snapshot of the stored revisions, ordered by position."""
        with self._lock:
            return tuple(self._revisions[i] for i in range(self._length))

    def reconcile(self, index: int, payload: Mapping[str, Any]) -> R:
        """Merge *payload* into position *index*, or append it there.

        Raises:
            InvalidUsageError: If *index* is negative.
            RevisionGapError: If *index* lies beyond the current length.
        """
        if index < 0:
            raise InvalidUsageError(f"Revision index must not be negative, got {index}")
        with self._lock:
            if index < self._length:
                revision = self._revisions[index]
                revision.update(payload)
                return revision
            if index == self._length:
                return self._append(payload)
            raise RevisionGapError(self._snippet_id, index, self._length)

    def reconcile_all(self, payloads: Any) -> tuple[R, ...]:
        """Reconcile a full revision list response positionally.

        Positions already stored are merged with the payload at the same
        position (``null`` entries leave them untouched); positions past the
        current length are appended in order. A batch with a ``null`` past the
        current length is rejected before anything is stored.

        Raises:
            ProtocolError: If *payloads* is not a list, or a position past
                the current length is ``null``.
        """
        if not isinstance(payloads, list):
            raise ProtocolError(
                f"Expected a list of revisions for snippet '{self._snippet_id}', "
                f"got {type(payloads).__name__}"
            )
        with self._lock:
            for index in range(self._length, len(payloads)):
                if payloads[index] is None:
                    raise ProtocolError(
                        f"Received null revision {index} for snippet '{self._snippet_id}'"
                    )
            for index, payload in enumerate(payloads):
                if index >= self._length:
                    self._append(payload)
                elif payload is not None:
                    self._revisions[index].update(payload)
            return self.values()

    def _append(self, payload: Mapping[str, Any]) -> R:
        revision = self._factory(self._length, payload)
        self._revisions[self._length] = revision
        self._length += 1
        return revision
