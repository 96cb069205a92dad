"""Base classes for domain models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ValueObject(BaseModel):
    """Immutable value object.

    Fields are exposed to API consumers in camelCase; Python code uses the
    snake_case names. Both spellings are accepted on input so that cached
    JSON documents can be read back.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys and JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)
