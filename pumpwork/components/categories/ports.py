from typing import Protocol

from pumpwork.domain.entities import Category


class CategoryRepoPort(Protocol):
    def list_all(self) -> list[Category]:
        """All categories ordered by name."""
        ...

    def get_by_slug(self, slug: str) -> Category | None: ...
