"""codebottle -- Client for the CodeBottle snippet-sharing API.

The client keeps one process-local cache per entity kind and reconciles
every response into it, so each language, category and snippet the client
has seen is represented by exactly one object. Fetches run on a thread pool
and are delivered as :class:`concurrent.futures.Future` objects::

    from codebottle import CodeBottle

    with CodeBottle() as api:
        snippet = api.request_snippet_by_id("abc123").result()
        print(snippet.title, snippet.language.name)

Modules:
    client: The :class:`CodeBottle` facade.
    entities: Language, Category, Snippet and Revision.
    cache: Identity-keyed entity cache and per-snippet revision store.
    rest: Endpoint table, HTTP transport, request builder and future helpers.
    models: Pydantic models for configuration and API payloads.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from codebottle.client import CodeBottle
from codebottle.exceptions import (
    CodeBottleError,
    ConfigError,
    InvalidUsageError,
    ProtocolError,
    RequestTimeoutError,
    RevisionGapError,
    UnexpectedStatusCodeError,
)
from codebottle.rest.endpoint import Endpoint

__all__ = [
    "CodeBottle",
    "CodeBottleError",
    "ConfigError",
    "Endpoint",
    "InvalidUsageError",
    "ProtocolError",
    "RequestTimeoutError",
    "RevisionGapError",
    "UnexpectedStatusCodeError",
    "__version__",
]
