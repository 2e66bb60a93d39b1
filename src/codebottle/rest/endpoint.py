"""Endpoint descriptors for the CodeBottle REST API.

Each :class:`Endpoint` member pairs a URL template with the number of
positional path parameters it needs. The arity is derived from the template
itself, so adding an endpoint never requires a separate count to be kept in
sync.
"""

from __future__ import annotations

import enum
from typing import Any
from urllib.parse import quote

from codebottle.exceptions import InvalidUsageError
from codebottle.models import DEFAULT_BASE_URL

_PLACEHOLDER = "{}"


class Endpoint(enum.Enum):
    """URL templates relative to the API base URL."""

    LANGUAGES = "languages"
    LANGUAGE_SPECIFIC = "language/{}"

    CATEGORIES = "categories"
    CATEGORY_SPECIFIC = "categories/{}"

    SNIPPETS = "snippets"
    SNIPPET_SPECIFIC = "snippets/{}"

    SNIPPET_REVISIONS = "snippets/{}/revisions"
    SNIPPET_REVISION_SPECIFIC = "snippets/{}/revisions/{}"

    @property
    def template(self) -> str:
        return self.value

    @property
    def parameter_count(self) -> int:
        """Number of positional path parameters the template requires."""
        return self.value.count(_PLACEHOLDER)

    def path(self, *params: Any) -> str:
        """Fill the template with *params*.

        Each parameter is percent-encoded as a single path segment, so an id
        containing ``/``, ``?`` or ``#`` cannot address another endpoint.

        Raises:
            InvalidUsageError: If the number of parameters does not match
                :attr:`parameter_count`.
        """
        expected = self.parameter_count
        if len(params) != expected:
            raise InvalidUsageError(
                f"Illegal argument count for {self.name} "
                f"{{actual: {len(params)}, expected: {expected}}}"
            )
        return self.value.format(*(quote(str(p), safe="") for p in params))

    def url(self, *params: Any, base_url: str = DEFAULT_BASE_URL) -> str:
        """Absolute URL for this endpoint under *base_url*."""
        return base_url.rstrip("/") + "/" + self.path(*params)
