"""Base model for AppVeyor API responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class AppVeyorModel(BaseModel):
    """Base model with common behavior for all AppVeyor API models.

    The API uses camelCase keys; fields are snake_case with camelCase aliases.
    """

    model_config = {"extra": "ignore", "populate_by_name": True, "alias_generator": to_camel}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
