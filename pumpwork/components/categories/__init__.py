"""
Categories component - job and service categories.
"""

from .component import run_get_category, run_list_categories
from .models import CategoryListOutput, CategoryOutput, GetCategoryInput
from .ports import CategoryRepoPort

__all__ = [
    "run_get_category",
    "run_list_categories",
    "CategoryListOutput",
    "CategoryOutput",
    "GetCategoryInput",
    "CategoryRepoPort",
]
