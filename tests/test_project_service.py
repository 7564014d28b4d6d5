"""Tests for ProjectService CRUD and query semantics."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from conftest import make_project
from folio.database.document_store import DocumentStoreError
from folio.items.models import Project, ProjectCreate
from folio.items.query_options import ExperienceQueryOptions, ProjectQueryOptions
from folio.services.projects import ProjectService
from folio.services.results import ErrorKind, ServiceFailure


def _titles(result):
    assert result.ok, result.error
    return [p.title for p in result.data]


def test_list_without_filters_returns_everything_in_sort_order(projects):
    for title, order in (("c", 3), ("a", 1), ("b", 2)):
        projects.create(make_project(title=title, sortOrder=order)).unwrap()

    assert _titles(projects.list()) == ["a", "b", "c"]
    assert _titles(projects.list({})) == ["a", "b", "c"]


def test_empty_collection_is_not_an_error(projects):
    result = projects.list()
    assert result.ok
    assert result.data == []


def test_featured_true_returns_only_featured(projects):
    projects.create(make_project(title="star", featured=True)).unwrap()
    projects.create(make_project(title="plain", featured=False)).unwrap()

    result = projects.list(ProjectQueryOptions(featured=True))

    assert _titles(result) == ["star"]
    assert all(p.featured is True for p in result.data)


def test_featured_false_is_a_filter_not_absence(projects):
    projects.create(make_project(title="star", featured=True)).unwrap()
    projects.create(make_project(title="plain", featured=False)).unwrap()

    assert _titles(projects.list({"featured": False})) == ["plain"]
    assert len(projects.list({"featured": None}).data) == 2


def test_limit_returns_first_n_in_requested_order(projects):
    for order in range(5):
        projects.create(make_project(title=f"p{order}", sortOrder=order)).unwrap()

    result = projects.list({"limit": 2, "orderBy": "sortOrder", "orderDirection": "desc"})

    assert _titles(result) == ["p4", "p3"]


def test_filters_combine_with_and(projects):
    projects.create(make_project(title="web-done", category="web", status="completed")).unwrap()
    projects.create(make_project(title="web-planned", category="web", status="planned")).unwrap()
    projects.create(make_project(title="mobile-done", category="mobile", status="completed")).unwrap()

    assert _titles(projects.list({"category": "web", "status": "completed"})) == ["web-done"]


def test_order_by_accepts_snake_and_camel_case(projects):
    projects.create(make_project(title="b", sortOrder=2)).unwrap()
    projects.create(make_project(title="a", sortOrder=1)).unwrap()

    assert _titles(projects.list({"order_by": "sort_order"})) == ["a", "b"]
    assert _titles(projects.list({"orderBy": "title", "orderDirection": "desc"})) == ["b", "a"]


def test_create_then_get_round_trips(projects):
    fields = make_project(title="X", technologies=["Zig", "Alpine.js", "Go"])

    created = projects.create(fields).unwrap()
    fetched = projects.get_by_id(created.id).unwrap()

    assert created.id
    assert fetched == created
    assert fetched.created_at == fetched.updated_at
    assert fetched.technologies == ["Zig", "Alpine.js", "Go"]
    expected = ProjectCreate.model_validate(fields).model_dump()
    assert fetched.model_dump(exclude={"id", "created_at", "updated_at"}) == expected


def test_update_replaces_technologies_and_restamps(projects):
    created = projects.create(make_project(title="X", technologies=["a", "b"])).unwrap()

    updated = projects.update(created.id, {"technologies": ["c", "a"]}).unwrap()
    fetched = projects.get_by_id(created.id).unwrap()

    assert updated == fetched
    assert fetched.technologies == ["c", "a"]
    assert fetched.updated_at > fetched.created_at
    assert fetched.created_at == created.created_at
    assert fetched.title == "X"
    assert fetched.description == created.description


def test_update_returns_persisted_state_not_local_input(projects, store):
    created = projects.create(make_project(title="X")).unwrap()
    store.update_document("projects", created.id, {"link": "https://example.com"})

    updated = projects.update(created.id, {"featured": True}).unwrap()

    assert updated.link == "https://example.com"
    assert updated.featured is True


def test_get_by_id_after_delete_is_not_found(projects):
    created = projects.create(make_project()).unwrap()

    assert projects.delete(created.id).unwrap() is True
    result = projects.get_by_id(created.id)

    assert not result.ok
    assert result.not_found
    assert result.error.kind == ErrorKind.NOT_FOUND


def test_get_by_id_never_created_is_not_found(projects):
    result = projects.get_by_id("never-created")
    assert result.error.kind == ErrorKind.NOT_FOUND
    assert result.error.detail == {"id": "never-created"}


def test_featured_scenario(projects):
    created = projects.create(
        {"title": "X", "status": "planned", "sortOrder": 5, "featured": False}
    ).unwrap()
    assert created.id not in [p.id for p in projects.list({"featured": True}).data]

    projects.update(created.id, {"featured": True}).unwrap()

    featured_ids = [p.id for p in projects.list({"featured": True}).data]
    assert featured_ids.count(created.id) == 1


def test_update_missing_is_not_found_and_writes_nothing(projects, store):
    result = projects.update("ghost", {"title": "Y"})

    assert result.error.kind == ErrorKind.NOT_FOUND
    assert store.get_document("projects", "ghost") is None


@pytest.mark.parametrize(
    "fields",
    [
        {"createdAt": "2020-01-01T00:00:00Z"},
        {"id": "other"},
        {"title": None},
        {"status": "abandoned"},
    ],
)
def test_update_rejects_bad_fields(projects, fields):
    created = projects.create(make_project()).unwrap()

    result = projects.update(created.id, fields)

    assert result.error.kind == ErrorKind.VALIDATION
    assert projects.get_by_id(created.id).unwrap() == created


@pytest.mark.parametrize(
    "fields",
    [
        {"description": "no title"},
        make_project(id="chosen-by-caller"),
        make_project(updatedAt="2020-01-01T00:00:00Z"),
        make_project(category="console"),
    ],
)
def test_create_rejects_bad_input(projects, fields):
    result = projects.create(fields)

    assert result.error.kind == ErrorKind.VALIDATION
    assert projects.list().data == []


@pytest.mark.parametrize(
    "options",
    [
        {"orderBy": "popularity"},
        {"limit": 0},
        {"limit": -3},
        {"orderDirection": "sideways"},
        {"current": True},
        ExperienceQueryOptions(current=True),
    ],
)
def test_bad_query_options_are_validation_faults(projects, options):
    result = projects.list(options)
    assert result.error.kind == ErrorKind.VALIDATION


def test_store_faults_become_transport_errors():
    store = Mock()
    store.add_document.side_effect = DocumentStoreError("quota exceeded")
    store.query_documents.side_effect = DocumentStoreError("network unreachable")
    store.get_document.side_effect = DocumentStoreError("permission denied")
    store.delete_document.side_effect = DocumentStoreError("network unreachable")
    store.delete_collection.side_effect = DocumentStoreError("network unreachable")
    service = ProjectService(store, "projects")

    results = [
        service.create(make_project()),
        service.list(),
        service.get_by_id("abc"),
        service.update("abc", {"title": "Y"}),
        service.delete("abc"),
        service.delete_all(),
    ]

    assert [r.error.kind for r in results] == [ErrorKind.TRANSPORT] * 6
    assert results[0].error.message == "quota exceeded"


def test_malformed_stored_document_is_transport_fault(projects, store):
    doc_id = store.add_document("projects", {"description": "missing title and timestamps"})

    result = projects.get_by_id(doc_id)

    assert result.error.kind == ErrorKind.TRANSPORT
    assert "Malformed document" in result.error.message


def test_delete_all_clears_only_this_collection(projects, experiences):
    projects.create(make_project(title="a")).unwrap()
    projects.create(make_project(title="b")).unwrap()
    experiences.create(experiences.create_sample_experience()).unwrap()

    assert projects.delete_all().unwrap() == 2
    assert projects.list().data == []
    assert len(experiences.list().data) == 1


def test_collection_name_is_injected(store, clock):
    service = ProjectService(store, "archived_projects", clock=clock)
    created = service.create(make_project()).unwrap()

    assert store.get_document("archived_projects", created.id) is not None
    assert store.get_document("projects", created.id) is None


def test_constructor_rejects_unknown_default_order(store):
    with pytest.raises(ValueError, match="Unsupported orderBy"):
        ProjectService(store, "projects", order_by="popularity")


def test_featured_and_category_shortcuts(projects):
    projects.create(make_project(title="b", category="mobile", featured=True, sortOrder=2)).unwrap()
    projects.create(make_project(title="a", category="web", featured=True, sortOrder=1)).unwrap()
    projects.create(make_project(title="c", category="mobile", featured=False, sortOrder=3)).unwrap()

    assert _titles(projects.get_featured_projects()) == ["a", "b"]
    assert _titles(projects.get_projects_by_category("mobile")) == ["b", "c"]


def test_sample_project_is_valid_input(projects):
    sample = ProjectService.create_sample_project()

    created = projects.create(sample).unwrap()

    assert isinstance(created, Project)
    assert created.technologies == ["React Native", "TypeScript", "Firebase"]


def test_unwrap_raises_service_failure(projects):
    with pytest.raises(ServiceFailure) as excinfo:
        projects.get_by_id("missing").unwrap()
    assert excinfo.value.kind == ErrorKind.NOT_FOUND


def test_documents_are_stored_camel_case(projects, store):
    created = projects.create(make_project(thumbnail_file_name="x.jpg")).unwrap()

    data = store.get_document("projects", created.id).data

    assert data["thumbnailFileName"] == "x.jpg"
    assert data["sortOrder"] == 1
    assert data["createdAt"] == data["updatedAt"]
    assert data["createdAt"].endswith("Z")


def test_order_by_created_at_across_whole_second(store):
    stamps = iter([
        datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        datetime(2025, 1, 1, 12, 0, 0, 500000, tzinfo=timezone.utc),
    ])
    service = ProjectService(store, "projects", clock=lambda: next(stamps))
    service.create(make_project(title="first")).unwrap()
    service.create(make_project(title="second")).unwrap()

    assert _titles(service.list({"orderBy": "createdAt"})) == ["first", "second"]
    assert _titles(service.list({"orderBy": "createdAt", "orderDirection": "desc"})) == ["second", "first"]


def test_update_advances_updated_at_with_stalled_clock(store):
    frozen = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    service = ProjectService(store, "projects", clock=lambda: frozen)
    created = service.create(make_project(title="X")).unwrap()

    first = service.update(created.id, {"technologies": ["x"]}).unwrap()
    second = service.update(created.id, {"featured": True}).unwrap()

    assert first.updated_at > first.created_at
    assert second.updated_at > first.updated_at
    assert second.created_at == frozen


def test_update_never_moves_updated_at_backwards(store):
    stamps = iter([
        datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc),
        datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc),
    ])
    service = ProjectService(store, "projects", clock=lambda: next(stamps))
    created = service.create(make_project(title="X")).unwrap()

    first = service.update(created.id, {"sortOrder": 2}).unwrap()
    second = service.update(created.id, {"sortOrder": 3}).unwrap()

    assert second.updated_at > first.updated_at
