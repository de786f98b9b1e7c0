"""
Categories component - read-only job/service categories.
"""

from __future__ import annotations

from pumpwork.domain.errors import not_found

from .models import CategoryListOutput, CategoryOutput, GetCategoryInput
from .ports import CategoryRepoPort


def run_list_categories(repo: CategoryRepoPort) -> CategoryListOutput:
    categories = repo.list_all()
    return CategoryListOutput(categories=categories, total=len(categories))


def run_get_category(inp: GetCategoryInput, repo: CategoryRepoPort) -> CategoryOutput:
    category = repo.get_by_slug(inp.slug)
    if category is None:
        return CategoryOutput(category=None, success=False, error=not_found("Category", inp.slug))
    return CategoryOutput(category=category, success=True)
