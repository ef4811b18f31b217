"""
Shared model configuration.

Every entity in the aggregate is an immutable pydantic model. Python code
uses snake_case attributes; the persisted document uses the camelCase field
names of the stored data document, so existing documents keep loading.
"""

from datetime import date
from types import MappingProxyType
from typing import Annotated, Any, Mapping, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


K = TypeVar("K")
V = TypeVar("V")


def _blank_to_none(value: Any) -> Any:
    """Forms submit empty strings for unset optional fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _freeze(value: dict) -> Mapping:
    return MappingProxyType(value)


def _thaw(value: Mapping) -> dict:
    return dict(value)


OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]
OptionalStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]

# A dict on the way in and out, a read-only view while held by a model
ReadOnlyMap = Annotated[dict[K, V], AfterValidator(_freeze), PlainSerializer(_thaw)]


class LifeModel(BaseModel):
    """Base class for all aggregate entities."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        allow_inf_nan=False,
    )

    def to_document(self) -> dict:
        """Serialize with the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


class Entity(LifeModel):
    """An aggregate member addressed by a string id, unique in its collection."""

    id: str
