"""The CodeBottle client facade.

:class:`CodeBottle` owns one :class:`~codebottle.cache.EntityCache` per
entity kind, a :class:`~codebottle.rest.Transport` and the thread pool
requests run on. It exposes ``get_*`` / ``request_*`` pairs:

- ``get_*`` reads the cache synchronously and never touches the network;
- ``request_*`` fetches, reconciles the payload into the cache, and returns
  a :class:`~concurrent.futures.Future` of the cached entity.

Falling back to the cache is always the caller's choice::

    with CodeBottle() as api:
        api.wait_for_lazy_loading()
        snippet = api.get_snippet_by_id("abc123") or api.request_snippet_by_id("abc123").result()

On construction the client starts loading languages and categories
(:attr:`CodeBottle.lazy_loading`). Fetches that depend on one another are
chained with :mod:`codebottle.rest.futures` and never block a pool thread.
"""

from __future__ import annotations

import itertools
from collections.abc import Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Optional, TypeVar

import httpx

from codebottle.cache import EntityCache
from codebottle.entities import Category, Entity, Language, Revision, Snippet
from codebottle.exceptions import InvalidUsageError
from codebottle.models import ClientConfig, canonical_id
from codebottle.output import get_output
from codebottle.rest import futures
from codebottle.rest.endpoint import Endpoint
from codebottle.rest.request import Request
from codebottle.rest.transport import Transport

E = TypeVar("E", bound=Entity)


class CodeBottle:
    """Client for the CodeBottle snippet API.

    Args:
        config: Connection and scheduling settings. Defaults to
            :class:`~codebottle.models.ClientConfig` defaults.
        token: Value for the ``Authorization`` header. When omitted and
            ``config.token_source`` is set, the token is resolved from it.
        http_client: Existing :class:`httpx.Client` to send requests through.
        executor: Pool to run requests on. When omitted the client creates
            a :class:`~concurrent.futures.ThreadPoolExecutor` of
            ``config.max_workers`` threads and shuts it down on :meth:`close`.
        lazy_loading: Start fetching languages and categories immediately.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        executor: Optional[Executor] = None,
        lazy_loading: bool = True,
    ) -> None:
        self._config = config or ClientConfig()
        if token is None and self._config.token_source:
            from codebottle.config import resolve_credential

            token = resolve_credential(self._config.token_source)

        self._transport = Transport(
            token=token,
            timeout=self._config.timeout,
            verify_ssl=self._config.verify_ssl,
            http_client=http_client,
        )
        self._owns_executor = executor is None
        self._closed = False
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=self._config.max_workers,
            thread_name_prefix="codebottle",
        )

        self._languages: EntityCache[Language] = EntityCache("language", self._new_language)
        self._categories: EntityCache[Category] = EntityCache("category", self._new_category)
        self._snippets: EntityCache[Snippet] = EntityCache("snippet", self._new_snippet)

        self.lazy_loading: Future[None]
        if lazy_loading:
            self.lazy_loading = futures.then(
                futures.gather([self.request_languages(), self.request_categories()]),
                lambda _: None,
            )
        else:
            self.lazy_loading = futures.completed(None)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CodeBottle:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Wait for in-flight requests, then release the pool and transport."""
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._transport.close()

    def abort(self) -> None:
        """Drop queued requests and release the transport without waiting.

        Requests still queued on an owned pool are cancelled; ones already on
        the wire fail once the transport is closed. A borrowed executor is
        left alone. Later calls to :meth:`close` do nothing.
        """
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._transport.close()

    def wait_for_lazy_loading(self, timeout: Optional[float] = None) -> CodeBottle:
        """Block until languages and categories have loaded.

        Before this completes, ``get_language_by_id`` and
        ``get_category_by_id`` may return ``None`` for ids the API knows.

        Raises:
            CodeBottleError: Whatever the bootstrap requests failed with.
        """
        self.lazy_loading.result(timeout=timeout)
        return self

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get_token(self) -> Optional[str]:
        return self._transport.token

    def request(self) -> Request[Any]:
        """A raw request builder bound to this client's transport and pool.

        Useful for write operations the facade does not wrap::

            api.request().make("POST", body).to(Endpoint.SNIPPETS).expect(201).then(decode)
        """
        return Request(self._transport, self._executor, self._config.base_url)

    # ------------------------------------------------------------------ #
    # Languages
    # ------------------------------------------------------------------ #

    def get_language_by_id(self, language_id: Any) -> Optional[Language]:
        return self._languages.get(language_id)

    def get_languages(self) -> list[Language]:
        return self._languages.values()

    def request_language_by_id(self, language_id: Any) -> Future[Language]:
        return self._request_one(self._languages, Endpoint.LANGUAGE_SPECIFIC, language_id)

    def request_languages(self) -> Future[list[Language]]:
        return self._request_all(self._languages, Endpoint.LANGUAGES)

    # ------------------------------------------------------------------ #
    # Categories
    # ------------------------------------------------------------------ #

    def get_category_by_id(self, category_id: Any) -> Optional[Category]:
        return self._categories.get(category_id)

    def get_categories(self) -> list[Category]:
        return self._categories.values()

    def request_category_by_id(self, category_id: Any) -> Future[Category]:
        return self._request_one(self._categories, Endpoint.CATEGORY_SPECIFIC, category_id)

    def request_categories(self) -> Future[list[Category]]:
        return self._request_all(self._categories, Endpoint.CATEGORIES)

    # ------------------------------------------------------------------ #
    # Snippets
    # ------------------------------------------------------------------ #

    def get_snippet_by_id(self, snippet_id: Any) -> Optional[Snippet]:
        return self._snippets.get(snippet_id)

    def get_snippets(self) -> list[Snippet]:
        return self._snippets.values()

    def request_snippet_by_id(self, snippet_id: Any) -> Future[Snippet]:
        return self._request_one(self._snippets, Endpoint.SNIPPET_SPECIFIC, snippet_id)

    def request_snippets(self) -> Future[list[Snippet]]:
        return self._request_all(self._snippets, Endpoint.SNIPPETS)

    # ------------------------------------------------------------------ #
    # Revisions
    # ------------------------------------------------------------------ #

    def get_snippet_revision(self, snippet_id: Any, index: int) -> Optional[Revision]:
        snippet = self._snippets.get(snippet_id)
        if snippet is None:
            return None
        return snippet.get_revision(index)

    def get_snippet_revisions(self) -> list[Revision]:
        """All cached revisions of all cached snippets."""
        return [revision for snippet in self._snippets.values() for revision in snippet.revisions]

    def request_snippet_revision(self, snippet_id: Any, index: int) -> Future[Revision]:
        """Fetch one revision, fetching its snippet first if it is not cached."""
        return futures.compose(
            self._cached_or_requested_snippet(snippet_id),
            lambda snippet: snippet.request_revision(index),
        )

    def request_snippet_revisions(self, snippet_id: Any) -> Future[tuple[Revision, ...]]:
        """Fetch all revisions of one snippet, fetching the snippet first if needed."""
        return futures.compose(
            self._cached_or_requested_snippet(snippet_id),
            lambda snippet: snippet.request_revisions(),
        )

    def request_all_revisions(self) -> Future[list[Revision]]:
        """Fetch every snippet, then every snippet's revisions.

        Up to ``config.parallel_threshold`` snippets, revision lists are
        fetched one after another; above it, all requests are handed to the
        pool at once and bounded only by its size.
        """

        def _fan_out(snippets: list[Snippet]) -> Future[list[tuple[Revision, ...]]]:
            if len(snippets) > self._config.parallel_threshold:
                get_output().debug(f"Fetching revisions of {len(snippets)} snippets in parallel")
                return futures.gather([snippet.request_revisions() for snippet in snippets])
            get_output().debug(f"Fetching revisions of {len(snippets)} snippets sequentially")
            return futures.sequence(snippets, Snippet.request_revisions)

        return futures.then(
            futures.compose(self.request_snippets(), _fan_out),
            lambda histories: list(itertools.chain.from_iterable(histories)),
        )

    # ------------------------------------------------------------------ #
    # Reference resolution (used by entities)
    # ------------------------------------------------------------------ #

    def resolve_language(self, payload: Optional[Mapping[str, Any]]) -> Optional[Language]:
        """Get-or-create the language a nested payload refers to, then merge it."""
        return self._languages.reconcile_reference(payload)

    def resolve_category(self, payload: Optional[Mapping[str, Any]]) -> Optional[Category]:
        """Get-or-create the category a nested payload refers to, then merge it."""
        return self._categories.reconcile_reference(payload)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _new_language(self, payload: Mapping[str, Any]) -> Language:
        return Language(self, payload)

    def _new_category(self, payload: Mapping[str, Any]) -> Category:
        return Category(self, payload)

    def _new_snippet(self, payload: Mapping[str, Any]) -> Snippet:
        return Snippet(self, payload)

    def _request_one(self, cache: EntityCache[E], endpoint: Endpoint, entity_id: Any) -> Future[E]:
        try:
            key = canonical_id(entity_id)
        except ValueError as exc:
            return futures.failed(InvalidUsageError(str(exc)))
        if key is None:
            return futures.failed(
                InvalidUsageError(f"Cannot request {cache.kind} with unset id {entity_id!r}")
            )

        def _reconcile(data: Any) -> E:
            # Single-entity responses are keyed by the requested id when they omit their own.
            if isinstance(data, Mapping) and data.get("id") is None:
                data = {**data, "id": key}
            return cache.reconcile(data)

        return self.request().to(endpoint, key).make_get().then(_reconcile)

    def _request_all(self, cache: EntityCache[E], endpoint: Endpoint) -> Future[list[E]]:
        return self.request().to(endpoint).make_get().then(cache.reconcile_many)

    def _cached_or_requested_snippet(self, snippet_id: Any) -> Future[Snippet]:
        try:
            cached = self._snippets.get(snippet_id)
        except InvalidUsageError as exc:
            return futures.failed(exc)
        if cached is not None:
            return futures.completed(cached)
        return self.request_snippet_by_id(snippet_id)
