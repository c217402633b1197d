from datetime import timedelta

import pytest

from app import crud
from app.core.exceptions import AuthorizationError, BadRequestError, NotFoundError
from app.core.tenant_context import PaginationOptions
from app.models import Project, ProjectStatus
from app.models.base import utcnow
from tests.conftest import ctx_for, make_project


@pytest.fixture
def projects(db, owner):
    created = []
    base = utcnow() - timedelta(hours=1)
    for index in range(5):
        project = make_project(db, owner, name=f"Project {index}")
        project.created_at = base + timedelta(minutes=index)
        created.append(project)
    db.commit()
    return created


def test_get_multi_paginates_with_meta(db, owner, projects):
    page = crud.project.get_multi(db, ctx_for(owner), options=PaginationOptions(skip=0, take=2))
    assert page["meta"] == {"total": 5, "skip": 0, "take": 2, "has_more": True}
    # Newest first by default
    assert [p.name for p in page["data"]] == ["Project 4", "Project 3"]

    last = crud.project.get_multi(db, ctx_for(owner), options=PaginationOptions(skip=4, take=2))
    assert last["meta"]["has_more"] is False
    assert [p.name for p in last["data"]] == ["Project 0"]


def test_get_multi_custom_order(db, owner, projects):
    page = crud.project.get_multi(
        db, ctx_for(owner), options=PaginationOptions(take=10, order_by={"name": "asc"})
    )
    assert [p.name for p in page["data"]] == [f"Project {i}" for i in range(5)]


def test_unknown_order_column_is_rejected(db, owner, projects):
    with pytest.raises(BadRequestError):
        crud.project.get_multi(db, ctx_for(owner), options=PaginationOptions(order_by={"nope": "asc"}))
    with pytest.raises(BadRequestError):
        crud.project.get_multi(db, ctx_for(owner), options=PaginationOptions(order_by={"name": "sideways"}))


def test_reads_are_tenant_scoped(db, owner, other_owner, projects):
    page = crud.project.get_multi(db, ctx_for(other_owner))
    assert page["meta"]["total"] == 0
    assert page["data"] == []

    with pytest.raises(NotFoundError):
        crud.project.get(db, ctx_for(other_owner), projects[0].id)


def test_create_injects_tenant(db, owner):
    project = crud.project.create(
        db, ctx_for(owner), obj_in={"name": "Injected", "tenant_id": "forged"}, extra={"owner_id": owner.id}
    )
    assert project.tenant_id == owner.tenant_id


def test_update_cannot_move_tenant_or_touch_foreign_rows(db, owner, other_owner, projects):
    target = projects[0]
    updated = crud.project.update(
        db, ctx_for(owner), id=target.id, obj_in={"name": "Renamed", "tenant_id": other_owner.tenant_id}
    )
    assert updated.name == "Renamed"
    assert updated.tenant_id == owner.tenant_id

    with pytest.raises(NotFoundError):
        crud.project.update(db, ctx_for(other_owner), id=target.id, obj_in={"name": "Hijacked"})


def test_soft_remove_hides_row(db, owner, projects):
    ctx = ctx_for(owner)
    crud.project.soft_remove(db, ctx, id=projects[0].id)

    assert db.get(Project, projects[0].id).deleted_at is not None
    page = crud.project.get_multi(db, ctx, filters=crud.project.visible_to(ctx))
    assert page["meta"]["total"] == 4


def test_permission_table_is_enforced(db, tester, projects):
    with pytest.raises(AuthorizationError):
        crud.project.create(db, ctx_for(tester), obj_in={"name": "Nope"}, extra={"owner_id": tester.id})


def test_count_is_tenant_scoped(db, owner, other_owner, projects):
    assert crud.project.count(db, ctx_for(owner)) == 5
    assert crud.project.count(db, ctx_for(owner), [Project.status == ProjectStatus.DRAFT]) == 0
    assert crud.project.count(db, ctx_for(other_owner)) == 0
