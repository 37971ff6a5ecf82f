"""
Base model for store documents.

The store speaks camelCase JSON; models expose snake_case attributes and
serialize back with aliases.

Dependencies: pydantic
System role: Shared serialization rules for store-backed models
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StoreModel(BaseModel):
    """Base for every model read from or written to the document store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_store(self, **kwargs: Any) -> dict[str, Any]:
        """Serialize to the store's camelCase JSON shape, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json", **kwargs)


def relation_id(value: Any) -> Any:
    """Collapse a populated relationship (``{"id": ...}``) to its id."""
    if isinstance(value, dict):
        return value.get("id")
    return value
