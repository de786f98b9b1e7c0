"""Field checks shared by job and service posts."""

from __future__ import annotations

from pumpwork.domain.errors import OperationError, invalid

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 10_000


def validate_post_fields(
    title: str | None = None,
    description: str | None = None,
    amount: float | None = None,
    amount_field: str = "budget",
) -> OperationError | None:
    """
    Validate the fields present on a create or update.

    ``None`` means "not being changed" and is skipped. Returns the first
    problem found.
    """
    if title is not None:
        if not title.strip():
            return invalid("Title is required", field="title")
        if len(title) > TITLE_MAX_LENGTH:
            return invalid(
                f"Title must be {TITLE_MAX_LENGTH} characters or less", field="title"
            )

    if description is not None:
        if not description.strip():
            return invalid("Description is required", field="description")
        if len(description) > DESCRIPTION_MAX_LENGTH:
            return invalid(
                f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less",
                field="description",
            )

    if amount is not None and amount < 0:
        return invalid(f"{amount_field.capitalize()} cannot be negative", field=amount_field)

    return None


def clean_skills(skills: list[str] | None) -> list[str] | None:
    """Strip, drop blanks and de-duplicate while keeping order."""
    if skills is None:
        return None
    seen: dict[str, None] = {}
    for skill in skills:
        s = skill.strip()
        if s:
            seen.setdefault(s, None)
    return list(seen)
