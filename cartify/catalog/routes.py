# =============================================================================
# Admin Category Routes
# =============================================================================
#
# All paths sit under /admin/**, so only ADMIN users reach them.
#
#   GET  /admin/categories              - List (page, size, active_only)
#   GET  /admin/categories/new          - Empty form
#   POST /admin/categories              - Create
#   GET  /admin/categories/edit/{id}    - Filled form
#   POST /admin/categories/update/{id}  - Update
#   POST /admin/categories/toggle/{id}  - Activate / deactivate
#
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from cartify.auth.handlers import redirect
from cartify.catalog.categories import CategoryForm, CategoryNotFound, CategoryService
from cartify.templating import templates

router = APIRouter(prefix="/admin/categories", tags=["admin"])

LIST_PATH = "/admin/categories"


def get_categories(request: Request) -> CategoryService:
    return request.app.state.categories


async def read_form(request: Request) -> tuple[dict, CategoryForm | None, list[str]]:
    form = await request.form()
    values = {
        "category_name": str(form.get("category_name", "")),
        "description": str(form.get("description", "")),
    }
    try:
        return values, CategoryForm(**values), []
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return values, None, errors


def render_form(request: Request, values: dict, action: str, title: str, errors: list[str] | None = None):
    return templates.TemplateResponse(
        request,
        "admin/category-form.html",
        {
            "subject": getattr(request.state, "subject", None),
            "form": values,
            "form_action": action,
            "form_title": title,
            "errors": errors or [],
        },
    )


@router.get("", response_class=HTMLResponse)
async def list_categories(request: Request, page: int = 0, size: int = 10, active_only: bool = False):
    service = get_categories(request)
    result = service.find_active(page, size) if active_only else service.find_all(page, size)
    return templates.TemplateResponse(
        request,
        "admin/category-list.html",
        {
            "subject": getattr(request.state, "subject", None),
            "categories": result,
            "active_only": active_only,
            "success": request.query_params.get("success"),
            "error": request.query_params.get("error"),
        },
    )


@router.get("/new", response_class=HTMLResponse)
async def new_category(request: Request):
    return render_form(request, {"category_name": "", "description": ""}, LIST_PATH, "Add Category")


@router.post("")
async def create_category(request: Request):
    values, form, errors = await read_form(request)
    if form is None:
        return render_form(request, values, LIST_PATH, "Add Category", errors)

    get_categories(request).create(form)
    return redirect(f"{LIST_PATH}?success=created")


@router.get("/edit/{category_id}", response_class=HTMLResponse)
async def edit_category(request: Request, category_id: int):
    try:
        category = get_categories(request).get_by_id(category_id)
    except CategoryNotFound:
        return redirect(f"{LIST_PATH}?error=not-found")

    values = {"category_name": category.category_name, "description": category.description or ""}
    return render_form(request, values, f"{LIST_PATH}/update/{category_id}", "Edit Category")


@router.post("/update/{category_id}")
async def update_category(request: Request, category_id: int):
    values, form, errors = await read_form(request)
    if form is None:
        return render_form(request, values, f"{LIST_PATH}/update/{category_id}", "Edit Category", errors)

    try:
        get_categories(request).update(category_id, form)
    except CategoryNotFound:
        return redirect(f"{LIST_PATH}?error=not-found")
    return redirect(f"{LIST_PATH}?success=updated")


@router.post("/toggle/{category_id}")
async def toggle_category(request: Request, category_id: int):
    try:
        get_categories(request).toggle_active(category_id)
    except CategoryNotFound:
        return redirect(f"{LIST_PATH}?error=not-found")
    return redirect(f"{LIST_PATH}?success=status-updated")
