"""Work Item entities stored in the ``projects`` and ``experiences`` collections.

Documents are stored with camelCase keys. Models accept either camelCase or
snake_case on input and dump camelCase with ``by_alias=True``.

Each entity comes in three shapes:
- ``<Entity>``: a stored document (id and timestamps present)
- ``<Entity>Create``: fields a caller supplies to create one
- ``<Entity>Update``: a partial field set for an update
"""

from datetime import date, datetime, timezone
from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

ProjectCategory = Literal["mobile", "web", "desktop", "other"]
ProjectStatus = Literal["completed", "in-progress", "planned"]


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self, exclude_unset: bool = False) -> dict:
        """Field map in stored (camelCase, JSON-safe) form."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset)


class StoredEntity(DocumentModel):
    """Fields the store and service own: id and timestamps."""

    id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # documents written by other tools may carry naive timestamps
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def check_created_before_updated(self):
        if self.created_at > self.updated_at:
            raise ValueError("createdAt must not be after updatedAt")
        return self


class PartialUpdate(DocumentModel):
    """Base for update inputs: every field optional, unknown fields rejected.

    An explicit null is only accepted for fields listed in ``nullable_fields``;
    for anything else it would blank a required field.
    """

    model_config = ConfigDict(extra="forbid")

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


# --- projects ---------------------------------------------------------------


class ProjectFields(DocumentModel):
    title: str
    description: str = ""
    thumbnail_file_name: str = ""
    link: str = ""
    category: ProjectCategory = "other"
    technologies: List[str] = Field(default_factory=list)  # display order
    status: ProjectStatus = "planned"
    featured: bool = False
    sort_order: int = 0


class ProjectCreate(ProjectFields):
    model_config = ConfigDict(extra="forbid")


class Project(ProjectFields, StoredEntity):
    """A portfolio project."""


class ProjectUpdate(PartialUpdate):
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_file_name: Optional[str] = None
    link: Optional[str] = None
    category: Optional[ProjectCategory] = None
    technologies: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None
    featured: Optional[bool] = None
    sort_order: Optional[int] = None


# --- experiences ------------------------------------------------------------


class ExperienceFields(DocumentModel):
    period: str = ""
    company: str
    logo: str = ""
    role: str
    company_url: str = ""
    description: List[str] = Field(default_factory=list)  # paragraphs
    technologies: List[str] = Field(default_factory=list)
    start_date: date
    end_date: Optional[date] = None  # open-ended while current
    current: bool = False
    featured: bool = False

    @model_validator(mode="after")
    def check_end_not_before_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not precede startDate")
        return self


class ExperienceCreate(ExperienceFields):
    model_config = ConfigDict(extra="forbid")


class Experience(ExperienceFields, StoredEntity):
    """A position held, shown on the experience timeline."""


class ExperienceUpdate(PartialUpdate):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"end_date"})

    period: Optional[str] = None
    company: Optional[str] = None
    logo: Optional[str] = None
    role: Optional[str] = None
    company_url: Optional[str] = None
    description: Optional[List[str]] = None
    technologies: Optional[List[str]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    current: Optional[bool] = None
    featured: Optional[bool] = None
