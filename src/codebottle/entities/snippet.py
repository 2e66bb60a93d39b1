"""Snippets and their revision history.

A :class:`Snippet` references a :class:`~codebottle.entities.Language` and a
:class:`~codebottle.entities.Category`. Those references are resolved
through the client's caches (get-or-create, then merge the nested object),
so fetching a snippet can populate the language and category caches as a
side effect. Each snippet owns a
:class:`~codebottle.cache.RevisionStore` that starts empty.
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from codebottle.cache.revision_store import RevisionStore
from codebottle.entities.base import ContextRef, merge_fields, require_id
from codebottle.entities.category import Category
from codebottle.entities.language import Language
from codebottle.entities.revision import Revision
from codebottle.exceptions import InvalidUsageError
from codebottle.models import SnippetPayload
from codebottle.rest import futures
from codebottle.rest.endpoint import Endpoint

if TYPE_CHECKING:
    from codebottle.client import CodeBottle


class Snippet:
    """A code snippet as published on CodeBottle.

    Args:
        context: The owning client.
        payload: Raw snippet object from the API; must carry an ``id``.
    """

    def __init__(self, context: CodeBottle, payload: Mapping[str, Any]) -> None:
        data = SnippetPayload.model_validate(payload)
        self._id = require_id(data, "snippet")
        self._context = ContextRef(context)
        self._revisions: RevisionStore[Revision] = RevisionStore(self._id, self._new_revision)

        self.title: Optional[str] = None
        self.description: Optional[str] = None
        self.code: Optional[str] = None
        self.views: Optional[int] = None
        self.language: Optional[Language] = None
        self.category: Optional[Category] = None
        self.votes: Optional[int] = None
        self.username: Optional[str] = None
        self.created_at: Optional[datetime] = None
        self.updated_at: Optional[datetime] = None

        self._merge(data)

    @property
    def id(self) -> str:
        return self._id

    @property
    def context(self) -> CodeBottle:
        return self._context()

    def update(self, payload: Mapping[str, Any]) -> Snippet:
        self._merge(SnippetPayload.model_validate(payload))
        return self

    def _merge(self, data: SnippetPayload) -> None:
        merge_fields(self, data, exclude=("language", "category"))

        context = self.context
        language = context.resolve_language(data.language)
        if language is not None:
            self.language = language
        category = context.resolve_category(data.category)
        if category is not None:
            self.category = category

    # ------------------------------------------------------------------ #
    # Revisions
    # ------------------------------------------------------------------ #

    @property
    def revisions(self) -> tuple[Revision, ...]:
        """Cached revisions, ordered by position."""
        return self._revisions.values()

    def get_revision(self, index: int) -> Optional[Revision]:
        """Cached revision at *index*, or ``None``. Never touches the network."""
        return self._revisions.get(index)

    def request_revision(self, index: int) -> Future[Revision]:
        """Fetch the revision at *index* and reconcile it into the store.

        The future fails with
        :class:`~codebottle.exceptions.RevisionGapError` when *index* is
        past the end of what the store holds when the response arrives.
        """
        if index < 0:
            return futures.failed(
                InvalidUsageError(f"Revision index must not be negative, got {index}")
            )
        return (
            self.context.request()
            .to(Endpoint.SNIPPET_REVISION_SPECIFIC, self._id, index)
            .make_get()
            .then(lambda data: self._revisions.reconcile(index, data))
        )

    def request_revisions(self) -> Future[tuple[Revision, ...]]:
        """Fetch the full revision list and reconcile it positionally."""
        return (
            self.context.request()
            .to(Endpoint.SNIPPET_REVISIONS, self._id)
            .make_get()
            .then(self._revisions.reconcile_all)
        )

    def _new_revision(self, index: int, payload: Mapping[str, Any]) -> Revision:
        return Revision(self.context, self._id, index, payload)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "title": self.title,
            "description": self.description,
            "code": self.code,
            "views": self.views,
            "language": self.language.id if self.language else None,
            "category": self.category.id if self.category else None,
            "votes": self.votes,
            "username": self.username,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "revisions": len(self._revisions),
        }

    def __repr__(self) -> str:
        return f"Snippet(id={self._id!r}, title={self.title!r})"
