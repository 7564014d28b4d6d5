from datetime import date
from typing import ClassVar, List, Optional, Type

from pydantic import BaseModel

from folio.database.document_store import DocumentStore
from folio.items.models import (
    Experience,
    ExperienceCreate,
    ExperienceUpdate,
    PartialUpdate,
    StoredEntity,
)
from folio.items.query_options import ExperienceQueryOptions, QueryOptions
from folio.services.collection_service import Clock, CollectionService
from folio.services.results import ServiceResult

FEATURED_EXPERIENCE_LIMIT = 5


class ExperienceService(
    CollectionService[Experience, ExperienceCreate, ExperienceUpdate, ExperienceQueryOptions]
):
    """Experiences collection. Default order: ``startDate`` descending (most recent first)."""

    entity_model: ClassVar[Type[StoredEntity]] = Experience
    create_model: ClassVar[Type[BaseModel]] = ExperienceCreate
    update_model: ClassVar[Type[PartialUpdate]] = ExperienceUpdate
    options_model: ClassVar[Type[QueryOptions]] = ExperienceQueryOptions

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        order_by: str = "startDate",
        order_direction: str = "desc",
        clock: Optional[Clock] = None,
    ):
        super().__init__(store, collection, order_by=order_by, order_direction=order_direction, clock=clock)

    def get_featured_experiences(self) -> ServiceResult[List[Experience]]:
        return self.list(ExperienceQueryOptions(featured=True, limit=FEATURED_EXPERIENCE_LIMIT))

    def get_current_experiences(self) -> ServiceResult[List[Experience]]:
        return self.list(ExperienceQueryOptions(current=True))

    def get_all_experiences(self) -> ServiceResult[List[Experience]]:
        """Every experience, most recent start first."""
        return self.list(ExperienceQueryOptions(order_by="startDate", order_direction="desc"))

    @staticmethod
    def create_sample_experience() -> ExperienceCreate:
        """Demo input for seeding an empty collection. Nothing is written."""
        return ExperienceCreate(
            period="December 2024 - Aug 2025",
            company="Ausis Accommodation Services",
            logo="/images/experiences/ausis.png",
            role="Freelance Full Stack Software Engineer (Contractual)",
            company_url="https://www.airpaz.com/en/hotel/ausis-accommodation-services.5377238",
            description=[
                "Gathered business requirements, estimated tasks and implemented features "
                "for the new website, and automated manual back-office work."
            ],
            technologies=["Python", "PHP", "Laravel", "Vue.js", "Mysql", "AWS"],
            start_date=date(2024, 12, 1),
            end_date=date(2025, 8, 31),
            current=False,
            featured=True,
        )
