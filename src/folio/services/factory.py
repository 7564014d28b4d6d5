"""Wire services from configuration."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from folio.config.loader import default_config, get_collection_settings
from folio.database.document_store import DocumentStore, SqlDocumentStore
from folio.services.collection_service import Clock
from folio.services.experiences import ExperienceService
from folio.services.projects import ProjectService


@dataclass
class Services:
    projects: ProjectService
    experiences: ExperienceService


def build_services(
    config: Optional[Dict[str, Any]] = None,
    store: Optional[DocumentStore] = None,
    clock: Optional[Clock] = None,
) -> Services:
    """
    Build one service per collection.

    Args:
        config: Normalized config (see ``load_config``). Defaults apply when None.
        store: Store to use. Defaults to a SqlDocumentStore at ``store.sqlite_path``.
        clock: Timestamp source shared by both services

    Returns:
        Services bundle
    """
    if config is None:
        config = default_config()
    if store is None:
        store = SqlDocumentStore(config["store"]["sqlite_path"])

    projects = get_collection_settings("projects", config)
    experiences = get_collection_settings("experiences", config)
    return Services(
        projects=ProjectService(
            store,
            projects["name"],
            order_by=projects["order_by"],
            order_direction=projects["order_direction"],
            clock=clock,
        ),
        experiences=ExperienceService(
            store,
            experiences["name"],
            order_by=experiences["order_by"],
            order_direction=experiences["order_direction"],
            clock=clock,
        ),
    )
