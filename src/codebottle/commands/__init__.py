"""Built-in CLI sub-commands for codebottle.

* :mod:`~codebottle.commands.browse` -- list and show languages,
  categories, snippets and revisions, and crawl the whole catalogue.
* :mod:`~codebottle.commands.config` -- view and modify global settings.

Single commands are plain callback functions registered directly on the
root app; multi-command groups like ``config`` export a
:class:`typer.Typer` sub-application.
"""
