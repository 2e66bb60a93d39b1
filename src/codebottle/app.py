"""Typer application and CLI entry point for codebottle.

The root callback installs the global :class:`~codebottle.output.OutputManager`
from the output flags, falling back to the configured ``output.format``,
and stores connection overrides (``--base-url``, ``--token``) in the Typer
context for the sub-commands.

:func:`main` is the console-script entry point. A
:class:`~codebottle.exceptions.CodeBottleError` escaping a command is
reported on stderr and turned into its ``exit_code``.
"""

from __future__ import annotations

import signal
import sys
import traceback
from typing import Any, Optional

import typer

from codebottle import __version__
from codebottle.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="codebottle",
    help="Browse snippets, languages and categories on CodeBottle.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"codebottle {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="API origin (overrides config and CODEBOTTLE_BASE_URL)."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="Authorization token (overrides CODEBOTTLE_TOKEN)."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace every request on stderr."
    ),
) -> None:
    """Root callback executed before every sub-command."""
    from codebottle.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        from codebottle.config import load_global_config

        fmt = OutputFormat(load_global_config().output.format)

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["token"] = token


from codebottle.commands.browse import (  # noqa: E402
    categories_command,
    crawl_command,
    languages_command,
    revision_command,
    revisions_command,
    snippet_command,
    snippets_command,
)
from codebottle.commands.config import config_app  # noqa: E402

app.command("languages")(languages_command)
app.command("categories")(categories_command)
app.command("snippets")(snippets_command)
app.command("snippet")(snippet_command)
app.command("revisions")(revisions_command)
app.command("revision")(revision_command)
app.command("crawl")(crawl_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``codebottle`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app(standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from codebottle.exceptions import CodeBottleError
        from codebottle.output import debug, error

        if isinstance(exc, CodeBottleError):
            error(str(exc))
            sys.exit(exc.exit_code)
        debug(traceback.format_exc())
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
