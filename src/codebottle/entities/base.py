"""The shared capability of all cached entities.

Entities are standalone classes rather than a hierarchy; what they share is
the small :class:`Entity` protocol (an immutable ``id`` and a partial-merge
``update``) and the helpers below.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Iterable, Protocol, runtime_checkable

from pydantic import BaseModel

from codebottle.exceptions import CodeBottleError, ProtocolError

if TYPE_CHECKING:
    from codebottle.client import CodeBottle


@runtime_checkable
class Entity(Protocol):
    """Anything that can live in a cache: stable identity plus mergeable state."""

    @property
    def id(self) -> str: ...

    def update(self, payload: Mapping[str, Any]) -> Any: ...


def merge_fields(target: object, payload: BaseModel, exclude: Iterable[str] = ()) -> None:
    """Copy every field *payload* actually carries onto *target*.

    Fields that are absent or ``null`` in the payload keep their prior
    value, so applying the same payload twice is the same as applying it
    once.
    """
    skip = {"id", *exclude}
    for name, value in payload.model_dump(exclude_none=True, exclude=skip).items():
        setattr(target, name, value)


def require_id(payload: BaseModel, kind: str) -> str:
    """Return the payload's id or fail: new entities cannot be built without one."""
    entity_id = getattr(payload, "id", None)
    if entity_id is None:
        raise ProtocolError(f"Cannot create {kind} from a payload without an id")
    return entity_id


class ContextRef:
    """Non-owning reference from an entity back to its client."""

    __slots__ = ("_ref",)

    def __init__(self, context: CodeBottle) -> None:
        self._ref = weakref.ref(context)

    def __call__(self) -> CodeBottle:
        context = self._ref()
        if context is None:
            raise CodeBottleError("The client owning this entity has been garbage collected")
        return context
