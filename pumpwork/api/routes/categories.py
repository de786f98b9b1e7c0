from fastapi import APIRouter, Depends

from pumpwork.adapters.sqlite.repos import SQLiteCategoryRepo
from pumpwork.api.deps import get_category_repo
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import CategoryListResponse
from pumpwork.components.categories import GetCategoryInput, run_get_category, run_list_categories
from pumpwork.domain.entities import Category

router = APIRouter()


@router.get("", response_model=CategoryListResponse)
def list_categories(repo: SQLiteCategoryRepo = Depends(get_category_repo)) -> CategoryListResponse:
    result = run_list_categories(repo)
    return CategoryListResponse(items=result.categories, total=result.total)


@router.get("/{slug}", response_model=Category)
def get_category(slug: str, repo: SQLiteCategoryRepo = Depends(get_category_repo)) -> Category:
    result = run_get_category(GetCategoryInput(slug), repo)
    if not result.success or result.category is None:
        raise_for_error(result.error)
    return result.category
