"""Query Options: caller-supplied filter / sort / limit for a list call.

A filter left at None adds no predicate. ``featured=False`` is a real filter
(``featured == False``), distinct from leaving ``featured`` unset.
"""

from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, PositiveInt
from pydantic.alias_generators import to_camel

from .models import ProjectCategory, ProjectStatus

OrderDirection = Literal["asc", "desc"]

TOptions = TypeVar("TOptions", bound="QueryOptions")


class QueryOptions(BaseModel):
    """Options shared by every collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    filter_fields: ClassVar[Tuple[str, ...]] = ()

    limit: Optional[PositiveInt] = None
    order_by: Optional[str] = None
    order_direction: Optional[OrderDirection] = None

    @classmethod
    def coerce(cls: Type[TOptions], value: Union["QueryOptions", Mapping[str, Any], None]) -> TOptions:
        """
        Build options from None, a mapping, or an existing instance.

        Raises:
            pydantic.ValidationError: unknown keys or bad values
            TypeError: options built for a different collection
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, QueryOptions):
            raise TypeError(f"Expected {cls.__name__}, got {type(value).__name__}")
        return cls.model_validate(dict(value))

    def filters(self) -> Dict[str, Any]:
        """Active equality predicates keyed by stored field name."""
        return {
            to_camel(name): getattr(self, name)
            for name in self.filter_fields
            if getattr(self, name) is not None
        }


class ProjectQueryOptions(QueryOptions):
    filter_fields: ClassVar[Tuple[str, ...]] = ("category", "featured", "status")

    category: Optional[ProjectCategory] = None
    featured: Optional[bool] = None
    status: Optional[ProjectStatus] = None


class ExperienceQueryOptions(QueryOptions):
    filter_fields: ClassVar[Tuple[str, ...]] = ("featured", "current")

    featured: Optional[bool] = None
    current: Optional[bool] = None


def resolve_order_field(entity_model: Type[BaseModel], name: str) -> str:
    """
    Map an ``orderBy`` value (snake_case or camelCase) to the stored field name.

    Raises:
        ValueError: the entity has no such field
    """
    generator = entity_model.model_config.get("alias_generator")
    for field_name, info in entity_model.model_fields.items():
        stored = info.alias or (generator(field_name) if callable(generator) else field_name)
        if name in (field_name, stored):
            return stored
    raise ValueError(f"Unsupported orderBy field for {entity_model.__name__}: {name}")
