"""
Category management (admin back-office).

Categories are never hard-deleted; they are deactivated instead.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class CategoryNotFound(Exception):
    """No category with the requested id."""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category not found: id={category_id}")


# =============================================================================
# Models
# =============================================================================


class CategoryForm(BaseModel):
    """Validated fields from the admin category form."""
    category_name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)

    @field_validator("category_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class Category(BaseModel):
    id: int
    category_name: str
    description: str | None = None
    is_active: bool = True


class Page(BaseModel):
    """One page of a listing."""
    items: list[Category]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0


# =============================================================================
# Service (in-memory, replace with DB in production)
# =============================================================================


class CategoryService:
    """CRUD over categories."""

    def __init__(self):
        self._categories: dict[int, Category] = {}
        self._next_id = 1

    def _page(self, categories: list[Category], page: int, size: int) -> Page:
        page = max(page, 0)
        size = max(size, 1)
        start = page * size
        return Page(
            items=categories[start:start + size],
            page=page,
            size=size,
            total=len(categories),
        )

    def find_all(self, page: int = 0, size: int = 10) -> Page:
        """All categories, active and inactive."""
        return self._page(list(self._categories.values()), page, size)

    def find_active(self, page: int = 0, size: int = 10) -> Page:
        return self._page([c for c in self._categories.values() if c.is_active], page, size)

    def get_by_id(self, category_id: int) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            raise CategoryNotFound(category_id)
        return category

    def create(self, form: CategoryForm) -> Category:
        category = Category(
            id=self._next_id,
            category_name=form.category_name,
            description=form.description,
        )
        self._categories[category.id] = category
        self._next_id += 1
        return category

    def update(self, category_id: int, form: CategoryForm) -> Category:
        """Replace name and description; the active flag is untouched."""
        category = self.get_by_id(category_id).model_copy(
            update={"category_name": form.category_name, "description": form.description}
        )
        self._categories[category_id] = category
        return category

    def toggle_active(self, category_id: int) -> Category:
        category = self.get_by_id(category_id)
        category = category.model_copy(update={"is_active": not category.is_active})
        self._categories[category_id] = category
        return category
