from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseModelWithMethods(BaseModel):
    """Base model with dict/json helpers used across services."""

    def to_json(self, **kwargs: Any) -> str:
        return self.model_dump_json(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


class CamelModel(BaseModelWithMethods):
    """Model exchanged with the frontend: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, exclude_none: bool = True) -> dict[str, Any]:
        """Serialize to the JSON-ready camelCase dict."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
