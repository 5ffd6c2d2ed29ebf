# =============================================================================
# Auth Routes
# =============================================================================
#
# Endpoints:
#   GET  /login      - Login form (?error / ?logout banners)
#   POST /login      - Check credentials, start session, optional remember-me
#   POST /logout     - End session, clear cookies
#   GET  /error/403  - Friendly access-denied page
#
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from cartify.auth.errors import AuthenticationError
from cartify.auth.handlers import redirect, set_session_cookie
from cartify.auth.security import Security
from cartify.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

TRUTHY = {"on", "true", "yes", "1"}


# =============================================================================
# Request Models
# =============================================================================


class LoginRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


def get_security(request: Request) -> Security:
    return request.app.state.security


async def read_login_form(request: Request, security: Security) -> LoginRequest:
    """Parse the posted login form. The email travels as `username`."""
    form = await request.form()
    remember = str(form.get(security.config.remember_me_parameter, "")).strip().lower()
    return LoginRequest(
        email=str(form.get("username", "")).strip(),
        password=str(form.get("password", "")),
        remember_me=remember in TRUTHY,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    """
    Render the login form.
    """
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "subject": getattr(request.state, "subject", None),
            "error": "error" in request.query_params,
            "logged_out": "logout" in request.query_params,
            "remember_me_parameter": get_security(request).config.remember_me_parameter,
        },
    )


@router.post("/login")
async def login(request: Request):
    """
    Authenticate and start a session.

    Every failure looks the same to the browser: back to /login?error.
    """
    security = get_security(request)
    config = security.config
    data = await read_login_form(request, security)

    # PBKDF2 runs in a worker thread
    try:
        subject = await run_in_threadpool(security.provider.authenticate, data.email, data.password)
    except AuthenticationError:
        return redirect(config.login_error_path)

    # Never reuse a session id that existed before login
    security.sessions.invalidate(request.cookies.get(config.session_cookie_name))
    session_id = security.sessions.create(subject)
    request.state.subject = subject

    response = security.success_handler.on_success(subject)
    set_session_cookie(response, config, session_id)
    security.csrf.rotate(request, response)
    if data.remember_me:
        security.remember_me.set_cookie(response, subject.email)

    logger.info("Login succeeded (%s)", ", ".join(sorted(subject.authorities)))
    return response


@router.post("/logout")
async def logout(request: Request):
    """
    Invalidate the session and clear the session and remember-me cookies.
    """
    return get_security(request).logout_handler.logout(request)


@router.get("/error/403", response_class=HTMLResponse)
async def access_denied(request: Request):
    """
    Friendly access-denied page.
    """
    return templates.TemplateResponse(
        request,
        "error/403.html",
        {"subject": getattr(request.state, "subject", None)},
        status_code=403,
    )
