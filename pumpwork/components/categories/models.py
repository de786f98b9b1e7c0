"""
Categories component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass

from pumpwork.domain.entities import Category
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class GetCategoryInput:
    slug: str


@dataclass(frozen=True)
class CategoryOutput:
    category: Category | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class CategoryListOutput:
    categories: list[Category]
    total: int
