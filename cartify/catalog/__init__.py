"""Catalog back-office: categories."""

from cartify.catalog.categories import (
    Category,
    CategoryForm,
    CategoryNotFound,
    CategoryService,
    Page,
)
from cartify.catalog.routes import router as categories_router

__all__ = [
    "Category",
    "CategoryForm",
    "CategoryNotFound",
    "CategoryService",
    "Page",
    "categories_router",
]
