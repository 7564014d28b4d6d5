from typing import ClassVar, List, Optional, Type

from pydantic import BaseModel

from folio.database.document_store import DocumentStore
from folio.items.models import (
    PartialUpdate,
    Project,
    ProjectCategory,
    ProjectCreate,
    ProjectUpdate,
    StoredEntity,
)
from folio.items.query_options import ProjectQueryOptions, QueryOptions
from folio.services.collection_service import Clock, CollectionService
from folio.services.results import ServiceResult


class ProjectService(CollectionService[Project, ProjectCreate, ProjectUpdate, ProjectQueryOptions]):
    """Projects collection. Default order: ``sortOrder`` ascending."""

    entity_model: ClassVar[Type[StoredEntity]] = Project
    create_model: ClassVar[Type[BaseModel]] = ProjectCreate
    update_model: ClassVar[Type[PartialUpdate]] = ProjectUpdate
    options_model: ClassVar[Type[QueryOptions]] = ProjectQueryOptions

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        order_by: str = "sortOrder",
        order_direction: str = "asc",
        clock: Optional[Clock] = None,
    ):
        super().__init__(store, collection, order_by=order_by, order_direction=order_direction, clock=clock)

    def get_featured_projects(self) -> ServiceResult[List[Project]]:
        return self.list(ProjectQueryOptions(featured=True, order_by="sortOrder", order_direction="asc"))

    def get_projects_by_category(self, category: ProjectCategory) -> ServiceResult[List[Project]]:
        return self.list({"category": category, "orderBy": "sortOrder", "orderDirection": "asc"})

    @staticmethod
    def create_sample_project() -> ProjectCreate:
        """Demo input for seeding an empty collection. Nothing is written."""
        return ProjectCreate(
            title="Transcom Digital Mobile app",
            description=(
                "Transcomdigital.com is an online shopping platform for original "
                "electronic appliances, built as a cross-platform mobile app."
            ),
            thumbnail_file_name="transcomdigital.jpg",
            link="https://transcomdigital.com",
            category="mobile",
            technologies=["React Native", "TypeScript", "Firebase"],
            status="completed",
            featured=True,
            sort_order=1,
        )
