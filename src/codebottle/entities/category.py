"""Snippet categories (snippet, class, function, ...)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from codebottle.entities.base import ContextRef, merge_fields, require_id
from codebottle.models import CategoryPayload

if TYPE_CHECKING:
    from codebottle.client import CodeBottle


class Category:
    def __init__(self, context: CodeBottle, payload: Mapping[str, Any]) -> None:
        data = CategoryPayload.model_validate(payload)
        self._id = require_id(data, "category")
        self._context = ContextRef(context)
        self.name: Optional[str] = None
        merge_fields(self, data)

    @property
    def id(self) -> str:
        return self._id

    @property
    def context(self) -> CodeBottle:
        return self._context()

    def update(self, payload: Mapping[str, Any]) -> Category:
        merge_fields(self, CategoryPayload.model_validate(payload))
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"id": self._id, "name": self.name}

    def __repr__(self) -> str:
        return f"Category(id={self._id!r}, name={self.name!r})"
