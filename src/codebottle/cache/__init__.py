"""In-memory caches for codebottle entities.

:class:`EntityCache` holds one entity kind keyed by id and is the single
place where "is this id already known" is decided. :class:`RevisionStore`
holds one snippet's revisions keyed by position. Nothing is persisted; the
caches are rebuilt every run.
"""

from codebottle.cache.entity_cache import EntityCache
from codebottle.cache.revision_store import RevisionStore

__all__ = ["EntityCache", "RevisionStore"]
