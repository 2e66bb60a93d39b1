"""Browse commands -- read the CodeBottle catalogue.

Every command opens a :class:`~codebottle.client.CodeBottle` from the
resolved configuration (see :func:`~codebottle.config.resolve_config`),
waits on the future of the one fetch it needs and renders the cached
entities through :mod:`codebottle.output`. Errors are left to propagate;
the entry point in :mod:`codebottle.app` turns them into exit codes.
"""

from __future__ import annotations

import time
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Optional

import typer

from codebottle.client import CodeBottle
from codebottle.exceptions import RequestTimeoutError
from codebottle.output import format_response, info, print_table, success


def open_client(ctx: typer.Context) -> CodeBottle:
    """Build a client from config, environment and the root ``--base-url``/``--token`` flags."""
    from codebottle.config import resolve_config

    obj = ctx.obj or {}
    config, token = resolve_config(
        cli_base_url=obj.get("base_url"),
        cli_token=obj.get("token"),
    )
    return CodeBottle(config.client, token=token, lazy_loading=False)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def languages_command(ctx: typer.Context) -> None:
    """List all languages.

    Example::

        codebottle languages
        codebottle --json languages
    """
    with open_client(ctx) as api:
        languages = api.request_languages().result()
    rows = [[lang.id, _text(lang.name)] for lang in languages]
    print_table(["id", "name"], rows, title="Languages")


def categories_command(ctx: typer.Context) -> None:
    """List all categories."""
    with open_client(ctx) as api:
        categories = api.request_categories().result()
    rows = [[cat.id, _text(cat.name)] for cat in categories]
    print_table(["id", "name"], rows, title="Categories")


def snippets_command(ctx: typer.Context) -> None:
    """List all snippets with their language and category."""
    with open_client(ctx) as api:
        snippets = api.request_snippets().result()
    rows = [
        [
            s.id,
            _text(s.title),
            _text(s.language.name if s.language else None),
            _text(s.category.name if s.category else None),
            _text(s.votes),
            _text(s.username),
        ]
        for s in snippets
    ]
    print_table(
        ["id", "title", "language", "category", "votes", "username"],
        rows,
        title="Snippets",
    )


def snippet_command(
    ctx: typer.Context,
    snippet_id: str = typer.Argument(help="Snippet id."),
) -> None:
    """Show one snippet, including its code."""
    with open_client(ctx) as api:
        snippet = api.request_snippet_by_id(snippet_id).result()
    format_response(snippet.to_dict())


def revisions_command(
    ctx: typer.Context,
    snippet_id: str = typer.Argument(help="Snippet id."),
) -> None:
    """List the revision history of a snippet."""
    with open_client(ctx) as api:
        revisions = api.request_snippet_revisions(snippet_id).result()
    rows = [
        [
            str(rev.index),
            _text(rev.title),
            _text(rev.author),
            _text(rev.explanation),
            rev.created_at.isoformat() if rev.created_at else "",
        ]
        for rev in revisions
    ]
    print_table(
        ["index", "title", "author", "explanation", "createdAt"],
        rows,
        title=f"Revisions of {snippet_id}",
    )


def revision_command(
    ctx: typer.Context,
    snippet_id: str = typer.Argument(help="Snippet id."),
    index: int = typer.Argument(help="Zero-based revision index."),
) -> None:
    """Show one revision of a snippet."""
    with open_client(ctx) as api:
        revision = api.request_snippet_revision(snippet_id, index).result()
    format_response(revision.to_dict())


def crawl_command(
    ctx: typer.Context,
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Give up after this many seconds."
    ),
) -> None:
    """Fetch every snippet and the revisions of each, then print a summary.

    Catalogues larger than ``client.parallel_threshold`` snippets are
    fetched in parallel on the client's thread pool. With ``--timeout`` the
    crawl gives up once the deadline passes, cancelling queued requests.
    """
    started = time.monotonic()
    with open_client(ctx) as api:
        info(f"Crawling {api.config.base_url}")
        try:
            revisions = api.request_all_revisions().result(timeout=timeout)
        except FutureTimeoutError:
            api.abort()
            raise RequestTimeoutError(f"Crawl did not finish within {timeout}s") from None
        summary = {
            "languages": len(api.get_languages()),
            "categories": len(api.get_categories()),
            "snippets": len(api.get_snippets()),
            "revisions": len(revisions),
        }
    format_response(summary)
    success(f"Crawl finished in {time.monotonic() - started:.1f}s")
