# tests/test_categories.py

import pytest

from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services import category_service
from app.services.exceptions import DataSourceError, ServiceError

from .fakes import FlakyDataSource


def test_create_and_list(source):
    category_service.create_category(source, CategoryCreate(name="Home"))
    category_service.create_category(source, CategoryCreate(name="Errands"))

    names = [c.name for c in category_service.list_categories(source)]

    assert names == ["Home", "Errands"]


def test_rename(source, category):
    renamed = category_service.update_category(source, category.id, CategoryUpdate(name="Office"))

    assert renamed.name == "Office"
    assert category_service.get_category(source, category.id).name == "Office"


def test_missing_category(source):
    with pytest.raises(ServiceError) as exc:
        category_service.get_category(source, 77)
    assert exc.value.status_code == 404

    with pytest.raises(ServiceError) as exc:
        category_service.update_category(source, 77, CategoryUpdate(name="x"))
    assert exc.value.status_code == 404


def test_delete_refused_while_tasks_reference_it(source, category, make_task):
    make_task()

    with pytest.raises(ServiceError) as exc:
        category_service.delete_category(source, category.id)

    assert exc.value.status_code == 400
    assert exc.value.detail == "Cannot delete category with associated tasks"


def test_delete_unused_category(source, category):
    category_service.delete_category(source, category.id)

    with pytest.raises(ServiceError):
        category_service.get_category(source, category.id)


def test_delete_when_task_lookup_fails(source, category):
    flaky = FlakyDataSource(source, {"query_tasks": DataSourceError("timeout")})

    with pytest.raises(ServiceError) as exc:
        category_service.delete_category(flaky, category.id)

    assert exc.value.status_code == 500
    assert exc.value.detail == "Failed to check related tasks"
    assert flaky.calls == ["query_tasks"]


def test_unexpected_error_is_generic(source):
    flaky = FlakyDataSource(source, {"list_categories": RuntimeError("stack trace here")})

    with pytest.raises(ServiceError) as exc:
        category_service.list_categories(flaky)

    assert exc.value.detail == "Failed to fetch categories"
