"""Identity-keyed, lock-guarded cache for one entity kind.

Every payload the client receives passes through :meth:`EntityCache.reconcile`
before it is exposed to callers. Reconciliation is a single get-or-insert-
then-update region under one lock acquisition, so once an id has been
observed there is exactly one cached instance for it:

1. acquire the cache lock;
2. if the id is cached, merge the payload into the existing instance;
3. otherwise construct a new instance from the payload and insert it;
4. release the lock.

Bulk responses are reconciled under one held lock for the whole batch, so
concurrent readers never see half of a list applied.

Known limitation: concurrent fetches of the same unseen id are not
coalesced. Both requests go out over the network; whichever completes
second merges into the instance the first one inserted. The guarantee is
at most one cache entry per id, not at most one network call.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from codebottle.entities.base import Entity
from codebottle.exceptions import InvalidUsageError, ProtocolError
from codebottle.models import canonical_id

E = TypeVar("E", bound=Entity)


class EntityCache(Generic[E]):
    """Process-local cache of one entity kind.

    Args:
        kind: Entity kind name used in error messages (``"language"``, ...).
        factory: Builds a new entity from a raw payload mapping.

    Example::

        cache = EntityCache("language", lambda payload: Language(client, payload))
        english = cache.reconcile({"id": "en", "name": "English"})
        assert cache.get("en") is english
    """

    def __init__(self, kind: str, factory: Callable[[Mapping[str, Any]], E]) -> None:
        self._kind = kind
        self._factory = factory
        self._entities: dict[str, E] = {}
        self._lock = threading.RLock()

    @property
    def kind(self) -> str:
        return self._kind

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return self.get(entity_id) is not None

    def __iter__(self) -> Iterator[E]:
        return iter(self.values())

    def get(self, entity_id: Any) -> Optional[E]:
        """Return the cached entity for *entity_id* without touching the network.

        Sentinel ids (``None``, ``""``, ``"-1"``) always return ``None``.

        Raises:
            InvalidUsageError: If *entity_id* is neither a string nor an integer.
        """
        try:
            key = canonical_id(entity_id)
        except ValueError as exc:
            raise InvalidUsageError(str(exc)) from exc
        if key is None:
            return None
        with self._lock:
            return self._entities.get(key)

    def values(self) -> list[E]:
        """Snapshot of all cached entities."""
        with self._lock:
            return list(self._entities.values())

    def reconcile(self, payload: Any) -> E:
        """Create or update the entity described by *payload*.

        Raises:
            ProtocolError: If *payload* is not an object or carries no usable id.
        """
        key = self._payload_id(payload)
        if key is None:
            raise ProtocolError(f"Received {self._kind} payload without an id: {payload!r}")
        with self._lock:
            return self._reconcile_locked(key, payload)

    def reconcile_reference(self, payload: Any) -> Optional[E]:
        """Reconcile a nested reference, returning ``None`` when it has no id.

        Used for the ``language``/``category`` objects embedded in snippets
        and revisions: an absent or unset reference is not an error and
        must not create a cache entry.
        """
        if payload is None:
            return None
        key = self._payload_id(payload)
        if key is None:
            return None
        with self._lock:
            return self._reconcile_locked(key, payload)

    def reconcile_many(self, payloads: Any) -> list[E]:
        """Reconcile every element of a list response under one lock.

        Raises:
            ProtocolError: If *payloads* is not a list, or an element has no id.
        """
        if not isinstance(payloads, list):
            raise ProtocolError(
                f"Expected a list of {self._kind} objects, got {type(payloads).__name__}"
            )
        with self._lock:
            results = []
            for payload in payloads:
                key = self._payload_id(payload)
                if key is None:
                    raise ProtocolError(
                        f"Received {self._kind} payload without an id: {payload!r}"
                    )
                results.append(self._reconcile_locked(key, payload))
            return results

    def _reconcile_locked(self, key: str, payload: Mapping[str, Any]) -> E:
        existing = self._entities.get(key)
        if existing is not None:
            existing.update(payload)
            return existing
        entity = self._factory(payload)
        self._entities[key] = entity
        return entity

    def _payload_id(self, payload: Any) -> Optional[str]:
        if not isinstance(payload, Mapping):
            raise ProtocolError(
                f"Expected a {self._kind} object, got {type(payload).__name__}"
            )
        try:
            return canonical_id(payload.get("id"))
        except ValueError as exc:
            raise ProtocolError(f"Received {self._kind} payload with {exc}") from exc
