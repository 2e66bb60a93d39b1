"""Historical snapshots of a snippet.

Revisions are owned by their snippet's
:class:`~codebottle.cache.RevisionStore`; they never appear in a global
cache. A revision's position in the history doubles as its id.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from codebottle.entities.base import ContextRef, merge_fields
from codebottle.entities.category import Category
from codebottle.entities.language import Language
from codebottle.models import RevisionPayload

if TYPE_CHECKING:
    from codebottle.client import CodeBottle


@functools.total_ordering
class Revision:
    """One revision of a snippet, ordered by ``(snippet_id, index)``.

    Args:
        context: The owning client, used to resolve ``language`` and
            ``category`` through its caches.
        snippet_id: Id of the parent snippet.
        index: Position within the snippet's history.
        payload: Raw revision object from the API.
    """

    def __init__(
        self,
        context: CodeBottle,
        snippet_id: str,
        index: int,
        payload: Mapping[str, Any],
    ) -> None:
        self._context = ContextRef(context)
        self._snippet_id = snippet_id
        self._index = index

        self.title: Optional[str] = None
        self.description: Optional[str] = None
        self.code: Optional[str] = None
        self.language: Optional[Language] = None
        self.category: Optional[Category] = None
        self.author: Optional[str] = None
        self.explanation: Optional[str] = None
        self.created_at: Optional[datetime] = None

        self.update(payload)

    @property
    def id(self) -> str:
        return str(self._index)

    @property
    def index(self) -> int:
        return self._index

    @property
    def snippet_id(self) -> str:
        return self._snippet_id

    @property
    def context(self) -> CodeBottle:
        return self._context()

    def update(self, payload: Mapping[str, Any]) -> Revision:
        data = RevisionPayload.model_validate(payload)
        merge_fields(self, data, exclude=("language", "category"))

        context = self.context
        language = context.resolve_language(data.language)
        if language is not None:
            self.language = language
        category = context.resolve_category(data.category)
        if category is not None:
            self.category = category
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "snippet": self._snippet_id,
            "index": self._index,
            "title": self.title,
            "description": self.description,
            "code": self.code,
            "language": self.language.id if self.language else None,
            "category": self.category.id if self.category else None,
            "author": self.author,
            "explanation": self.explanation,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def _key(self) -> tuple[str, int]:
        return (self._snippet_id, self._index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Revision):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Revision):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"Revision(snippet_id={self._snippet_id!r}, index={self._index}, title={self.title!r})"
