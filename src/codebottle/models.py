"""Canonical Pydantic models shared across all codebottle modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ClientConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**Payload models** -- schemas for the JSON objects the CodeBottle API
returns: :class:`LanguagePayload`, :class:`CategoryPayload`,
:class:`SnippetPayload` and :class:`RevisionPayload`. Every field is
optional because list endpoints omit heavy fields; entities merge only what
a payload actually carries (see :mod:`codebottle.entities`).

Identity is always a ``str``. Integer ids found in payloads are normalised
by :func:`canonical_id` before they reach a cache.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://api.codebottle.io/"
ACCEPT_HEADER = "application/vnd.codebottle.v1+json"

# Ids that mean "no reference"; lookups for them never hit a cache or the network.
UNSET_IDS = frozenset({"", "-1"})


def canonical_id(value: Any) -> Optional[str]:
    """Normalise a payload or caller supplied id to the canonical ``str`` form.

    Returns ``None`` for ``None`` and for the sentinel ids in
    :data:`UNSET_IDS`.

    Raises:
        ValueError: If *value* is not a string or an integer.
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError(f"Entity id must be a string or an integer, got {value!r}")
    text = str(value)
    if text in UNSET_IDS:
        return None
    return text


# --- Configuration ---


class ClientConfig(BaseModel):
    """Connection and scheduling settings for :class:`~codebottle.client.CodeBottle`."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API origin")
    token_source: Optional[str] = Field(
        default=None,
        description="Credential source for the Authorization header: env:VAR, file:/path, prompt",
    )
    timeout: float = Field(default=30.0, description="Request deadline in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_workers: int = Field(default=8, ge=1, description="Size of the request thread pool")
    parallel_threshold: int = Field(
        default=200,
        ge=0,
        description="Snippet count above which revision crawls fan out in parallel",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`.

    Used by the CLI when neither ``--json`` nor ``--plain`` is given.
    """

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/codebottle/config.json``.

    Loaded and saved by :func:`~codebottle.config.load_global_config` and
    :func:`~codebottle.config.save_global_config`. See
    :func:`~codebottle.config.resolve_config` for the precedence chain.
    """

    client: ClientConfig = Field(default_factory=ClientConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- HTTP ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs the request pipeline can issue."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"


# --- Payloads ---


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps without an offset are UTC instants."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value: Any) -> Optional[str]:
        return canonical_id(value)


class LanguagePayload(_Payload):
    """A language object, e.g. ``{"id": "5", "name": "Python"}``."""

    name: Optional[str] = None


class CategoryPayload(_Payload):
    """A category object, e.g. ``{"id": "2", "name": "Snippet"}``."""

    name: Optional[str] = None


class SnippetPayload(_Payload):
    """A snippet object as returned by ``snippets`` and ``snippets/{id}``.

    ``language`` and ``category`` stay raw dicts; they are reconciled
    through the client's caches rather than parsed here.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    views: Optional[int] = None
    language: Optional[dict[str, Any]] = None
    category: Optional[dict[str, Any]] = None
    votes: Optional[int] = None
    username: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class RevisionPayload(_Payload):
    """A revision object as returned by ``snippets/{id}/revisions[/{rev}]``."""

    title: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    language: Optional[dict[str, Any]] = None
    category: Optional[dict[str, Any]] = None
    author: Optional[str] = None
    explanation: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _timestamps_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)
