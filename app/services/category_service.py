# app/services/category_service.py
import logging
from typing import List

from app.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from app.services.data_source import Filter, TaskDataSource
from app.services.exceptions import (
    DataSourceError,
    ServiceError,
    bad_request,
    not_found,
    server_error,
)

logger = logging.getLogger(__name__)


def create_category(source: TaskDataSource, payload: CategoryCreate) -> CategoryOut:
    try:
        try:
            category = source.insert_category(payload.name)
        except DataSourceError as e:
            raise bad_request(e.message)

        logger.info(f"Category {category.id} created: {category.name}")
        return CategoryOut.model_validate(category)

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in create_category")
        raise server_error("Failed to create category")


def list_categories(source: TaskDataSource) -> List[CategoryOut]:
    try:
        try:
            categories = source.list_categories()
        except DataSourceError as e:
            raise bad_request(e.message)

        return [CategoryOut.model_validate(category) for category in categories]

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in list_categories")
        raise server_error("Failed to fetch categories")


def get_category(source: TaskDataSource, category_id: int) -> CategoryOut:
    try:
        try:
            category = source.get_category(category_id)
        except DataSourceError:
            category = None
        if category is None:
            raise not_found("Category not found")

        return CategoryOut.model_validate(category)

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in get_category")
        raise server_error("Failed to fetch category")


def update_category(source: TaskDataSource, category_id: int, payload: CategoryUpdate) -> CategoryOut:
    try:
        try:
            category = source.update_category(category_id, payload.name)
        except DataSourceError as e:
            raise bad_request(e.message)
        if category is None:
            raise not_found("Category not found")

        return CategoryOut.model_validate(category)

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in update_category")
        raise server_error("Failed to update category")


def delete_category(source: TaskDataSource, category_id: int) -> None:
    """Delete a category that no task refers to"""
    try:
        try:
            related = source.query_tasks(Filter().eq("category_id", category_id))
        except DataSourceError:
            raise server_error("Failed to check related tasks")

        if related:
            raise bad_request("Cannot delete category with associated tasks")

        try:
            source.delete_category(category_id)
        except DataSourceError as e:
            raise bad_request(e.message)

        logger.info(f"Category {category_id} deleted")

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in delete_category")
        raise server_error("Failed to delete category")
