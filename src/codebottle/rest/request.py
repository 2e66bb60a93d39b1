"""Fluent request builder that delivers decoded results through futures.

A GET to an endpoint::

    Request(transport, executor)
        .to(Endpoint.SNIPPET_SPECIFIC, "abc123")
        .make_get()
        .then(decode)

A DELETE with a body, expecting ``204 No Content``::

    Request(transport, executor)
        .make(HTTPMethod.DELETE, {"reason": "spam"})
        .to(Endpoint.SNIPPET_SPECIFIC, "abc123")
        .expect(204)
        .then(lambda _: None)

:meth:`Request.then` submits the exchange to the executor and returns a
:class:`~concurrent.futures.Future`. When the response arrives:

1. a status differing from the expected one fails the future with
   :class:`~codebottle.exceptions.UnexpectedStatusCodeError`, carrying the
   server's ``error`` field when the body has one;
2. an expected ``204`` resolves to ``None`` without looking at the body;
3. otherwise the body is parsed as JSON (a parse failure is a fatal
   :class:`~codebottle.exceptions.ProtocolError`) and handed to ``decode``.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Any, Callable, Generic, Optional, TypeVar

import httpx
from pydantic import ValidationError

from codebottle.exceptions import InvalidUsageError, ProtocolError, UnexpectedStatusCodeError
from codebottle.models import DEFAULT_BASE_URL, HTTPMethod
from codebottle.rest.endpoint import Endpoint
from codebottle.rest.transport import Transport

T = TypeVar("T")

JsonTree = Any
"""A decoded JSON value: ``dict``, ``list``, ``str``, number, bool or ``None``."""

NO_ERROR_MESSAGE = "No error message received"


class Request(Generic[T]):
    """One HTTP exchange against the CodeBottle API.

    Args:
        transport: The :class:`~codebottle.rest.transport.Transport` that
            sends the request.
        executor: Pool the exchange runs on; never the caller's thread.
        base_url: API origin the endpoint templates are resolved against.
    """

    def __init__(
        self,
        transport: Transport,
        executor: Executor,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._transport = transport
        self._executor = executor
        self._base_url = base_url
        self._method = HTTPMethod.GET
        self._body: Optional[JsonTree] = None
        self._url: Optional[str] = None
        self._expected: Optional[int] = None

    @property
    def method(self) -> HTTPMethod:
        return self._method

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def expected_status(self) -> int:
        """The status code the response must carry.

        Defaults to ``204`` for DELETE and ``200`` for everything else.
        """
        if self._expected is not None:
            return self._expected
        if self._method == HTTPMethod.DELETE:
            return httpx.codes.NO_CONTENT
        return httpx.codes.OK

    def make(self, method: HTTPMethod | str, body: Optional[JsonTree] = None) -> Request[T]:
        """Set the verb and, for non-GET verbs, the JSON body."""
        self._method = HTTPMethod(method.upper() if isinstance(method, str) else method)
        self._body = None if self._method == HTTPMethod.GET else body
        return self

    def make_get(self) -> Request[T]:
        return self.make(HTTPMethod.GET)

    def to(self, endpoint: Endpoint, *params: Any) -> Request[T]:
        """Target *endpoint* filled with *params*.

        Raises:
            InvalidUsageError: If the parameter count does not match the
                endpoint's arity. Nothing has been sent at this point.
        """
        self._url = endpoint.url(*params, base_url=self._base_url)
        return self

    def expect(self, status_code: int) -> Request[T]:
        """Require *status_code* instead of the verb's default.

        Raises:
            InvalidUsageError: If *status_code* is not a known HTTP status.
        """
        try:
            self._expected = int(httpx.codes(status_code))
        except ValueError as exc:
            raise InvalidUsageError(f"Invalid code entered: {status_code}") from exc
        return self

    def then(self, decode: Callable[[JsonTree], T]) -> Future[T]:
        """Dispatch the request and decode its body with *decode*.

        The verb, URL, body and expected status are captured here; changing
        the builder afterwards does not affect the dispatched exchange.

        Returns:
            A future resolving to ``decode(body)``, or to ``None`` when the
            expected status is ``204``.

        Raises:
            InvalidUsageError: If no endpoint was set with :meth:`to`.
        """
        if self._url is None:
            raise InvalidUsageError("Request has no endpoint; call to() first")
        return self._executor.submit(
            self._execute, self._method, self._url, self._body, self.expected_status, decode
        )

    # ------------------------------------------------------------------ #
    # Executed on the pool
    # ------------------------------------------------------------------ #

    def _execute(
        self,
        verb: HTTPMethod,
        url: str,
        body: Optional[JsonTree],
        expected: int,
        decode: Callable[[JsonTree], T],
    ) -> Optional[T]:
        method = verb.value
        response = self._transport.send(method, url, body)

        if response.status_code != expected:
            raise UnexpectedStatusCodeError(response.status_code, _error_message(response))

        if expected == httpx.codes.NO_CONTENT:
            return None

        data = _parse_json(response)
        try:
            return decode(data)
        except ValidationError as exc:
            raise ProtocolError(f"Received malformed payload from {method} {url}: {exc}") from exc


def _parse_json(response: httpx.Response) -> JsonTree:
    """Decode the body as JSON or fail fatally."""
    try:
        return response.json()
    except ValueError as exc:
        raise ProtocolError(
            f"Received invalid JSON data from {response.request.method} {response.request.url}"
        ) from exc


def _error_message(response: httpx.Response) -> str:
    """Extract the server's ``error`` field, falling back to a generic message."""
    try:
        detail = response.json()
    except ValueError:
        return NO_ERROR_MESSAGE
    if isinstance(detail, dict):
        message = detail.get("error")
        if isinstance(message, str) and message:
            return message
    return NO_ERROR_MESSAGE
