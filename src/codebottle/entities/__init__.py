"""Domain entities for the CodeBottle API.

Classes:
    :class:`Language`, :class:`Category` -- leaf entities ``{id, name}``.
    :class:`Snippet` -- a snippet with language/category references and an
        owned revision history.
    :class:`Revision` -- one historical snapshot of a snippet.

All four satisfy the :class:`Entity` protocol: an immutable ``id`` and an
``update(payload)`` that merges only the fields a payload carries.
"""

from codebottle.entities.base import Entity
from codebottle.entities.category import Category
from codebottle.entities.language import Language
from codebottle.entities.revision import Revision
from codebottle.entities.snippet import Snippet

__all__ = ["Category", "Entity", "Language", "Revision", "Snippet"]
