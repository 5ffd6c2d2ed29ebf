"""
Storefront and back-office pages.

Who may open each page is decided by the URL rule table, not here.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from cartify.templating import templates

router = APIRouter(tags=["pages"])


def render(request: Request, name: str, title: str, **context):
    return templates.TemplateResponse(
        request,
        name,
        {"title": title, "subject": getattr(request.state, "subject", None), **context},
    )


@router.get("/", response_class=HTMLResponse)
@router.get("/home", response_class=HTMLResponse)
async def home(request: Request):
    return render(request, "home.html", "Cartify")


@router.get("/register", response_class=HTMLResponse)
async def register(request: Request):
    return render(request, "page.html", "Create an account", message="Registration opens soon.")


@router.get("/admin/dashboard", response_class=HTMLResponse)
async def admin_dashboard(request: Request):
    return render(request, "admin/dashboard.html", "Admin dashboard")


@router.get("/cart", response_class=HTMLResponse)
async def cart(request: Request):
    return render(request, "page.html", "Your cart", message="Your cart is empty.")


@router.get("/orders", response_class=HTMLResponse)
async def orders(request: Request):
    return render(request, "page.html", "Orders", message="No orders yet.")
