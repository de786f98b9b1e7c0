"""
Categories component unit tests.
"""

from __future__ import annotations

import pytest

from pumpwork.adapters.sqlite.repos import SQLiteCategoryRepo
from pumpwork.components.categories import (
    GetCategoryInput,
    run_get_category,
    run_list_categories,
)
from pumpwork.domain.entities import Category
from pumpwork.domain.errors import NOT_FOUND


@pytest.fixture
def repo(db_path: str) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(db_path)


def test_seeded_categories_sorted_by_name(repo: SQLiteCategoryRepo) -> None:
    result = run_list_categories(repo)
    names = [c.name for c in result.categories]
    assert result.total == 6
    assert names == sorted(names)
    assert names[0] == "Auditing"


def test_new_category_is_listed_in_order(repo: SQLiteCategoryRepo) -> None:
    repo.save(Category(name="AI Agents", slug="ai-agents"))
    assert run_list_categories(repo).categories[0].slug == "ai-agents"


def test_get_by_slug(repo: SQLiteCategoryRepo) -> None:
    result = run_get_category(GetCategoryInput(slug="design"), repo)
    assert result.success
    assert result.category.name == "Design"


def test_unknown_slug(repo: SQLiteCategoryRepo) -> None:
    result = run_get_category(GetCategoryInput(slug="nope"), repo)
    assert not result.success
    assert result.error.code == NOT_FOUND
