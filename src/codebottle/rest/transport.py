"""Blocking HTTP transport for the request pipeline.

:class:`Transport` wraps :class:`httpx.Client` and layers on the two
headers every CodeBottle call carries:

- **Accept** -- the versioned media type
  ``application/vnd.codebottle.v1+json``.
- **Authorization** -- the opaque token, when the client was given one.

Transport failures (connection refused, DNS, timeouts, broken protocol) are
mapped to :class:`~codebottle.exceptions.ProtocolError`. There is no retry:
a request, once sent, runs to completion or failure within the configured
timeout.

The transport is called from pool threads; :class:`httpx.Client` is safe to
share between them.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from codebottle.exceptions import ProtocolError
from codebottle.models import ACCEPT_HEADER
from codebottle.output import get_output


class Transport:
    """Sends single HTTP requests with the API's fixed headers.

    Args:
        token: Optional value for the ``Authorization`` header.
        timeout: Request deadline in seconds.
        verify_ssl: Verify TLS certificates.
        http_client: An existing :class:`httpx.Client` to send through (for
            example one built on :class:`httpx.MockTransport`). A client
            passed in is not closed by :meth:`close`.

    Example::

        with Transport(token="secret") as transport:
            response = transport.send("GET", "https://api.codebottle.io/languages")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._token = token
        self._owns_client = http_client is None
        self._client: Optional[httpx.Client] = http_client or httpx.Client(
            timeout=timeout,
            verify=verify_ssl,
            follow_redirects=True,
        )

    @property
    def token(self) -> Optional[str]:
        return self._token

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None

    def headers(self) -> dict[str, str]:
        """Headers attached to every request."""
        headers = {"Accept": ACCEPT_HEADER}
        if self._token:
            headers["Authorization"] = self._token
        return headers

    def send(
        self,
        method: str,
        url: str,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send one request and return the raw response.

        Args:
            method: HTTP verb.
            url: Absolute request URL.
            json_body: JSON-serialisable body, sent for non-GET verbs only.

        Raises:
            ProtocolError: On any transport-level failure, or when the
                transport has been closed.
        """
        if self._client is None:
            raise ProtocolError("Transport is closed")

        get_output().debug(f"Requesting: {method} @ {url}")

        kwargs: dict[str, Any] = {
            "method": method,
            "url": url,
            "headers": self.headers(),
        }
        if json_body is not None and method != "GET":
            kwargs["json"] = json_body

        try:
            return self._client.request(**kwargs)
        except httpx.TransportError as exc:
            raise ProtocolError(f"Unexpected transport failure for {method} {url}: {exc}") from exc
