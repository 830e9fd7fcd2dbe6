"""Server-rendered page shells.

Access to /dashboard, /tasks, /ladder and /admin is enforced by the page
gate middleware before these handlers run. /apply sits outside the gated
prefixes and checks the session itself.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from habitladder.auth.dependencies import get_identity
from habitladder.auth.policy import LOGIN_PATH, require_auth
from habitladder.auth.session import Identity
from habitladder.db.models import WEEKS

router = APIRouter(tags=["Pages"], include_in_schema=False)

templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")

_WEEK_TITLES = {
    "week1": "Week 1",
    "week2": "Week 2",
    "week3": "Week 3",
    "week4": "Week 4",
    "complete": "Program Complete",
}


def _render(request: Request, template: str, title: str, data_page: str, **context: Any) -> HTMLResponse:
    context.setdefault("identity", getattr(request.state, "identity", None))
    return templates.TemplateResponse(
        request,
        template,
        {"title": title, "data_page": data_page, **context},
    )


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request) -> HTMLResponse:
    return _render(request, "login.html", "Sign in", "login", identity=None)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(request: Request) -> HTMLResponse:
    return _render(request, "dashboard.html", "Dashboard", "dashboard")


@router.get("/tasks", response_class=HTMLResponse)
async def tasks_page(request: Request) -> HTMLResponse:
    return _render(request, "tasks.html", "Tasks", "tasks")


@router.get("/ladder", response_class=HTMLResponse)
async def ladder_page(request: Request) -> HTMLResponse:
    weeks = [(week, _WEEK_TITLES[week]) for week in WEEKS]
    return _render(request, "ladder.html", "Ladder", "ladder", weeks=weeks)


@router.get("/ladder/{week}", response_class=HTMLResponse)
async def ladder_week_page(week: str, request: Request) -> Response:
    """Submission page for one week; unknown weeks go back to the overview."""
    if week not in WEEKS:
        return RedirectResponse(url="/ladder", status_code=307)
    return _render(request, "ladder_week.html", _WEEK_TITLES[week], f"ladder-{week}", week=week)


@router.get("/apply", response_class=HTMLResponse)
async def apply_page(request: Request, identity: Identity | None = Depends(get_identity)) -> Response:
    decision = require_auth(identity)
    if not decision.allowed:
        return RedirectResponse(url=decision.redirect_to or LOGIN_PATH, status_code=307)
    return _render(request, "apply.html", "Apply to Ladder Program", "apply", identity=identity)


@router.get("/admin", response_class=HTMLResponse)
@router.get("/admin/dashboard", response_class=HTMLResponse)
async def admin_dashboard_page(request: Request) -> HTMLResponse:
    return _render(request, "admin.html", "Admin Dashboard", "admin-dashboard", section="stats")


@router.get("/admin/applications", response_class=HTMLResponse)
async def admin_applications_page(request: Request) -> HTMLResponse:
    return _render(request, "admin.html", "Applications", "admin-applications", section="applications")


@router.get("/admin/ladder", response_class=HTMLResponse)
async def admin_ladder_page(request: Request) -> HTMLResponse:
    return _render(request, "admin.html", "Ladder Management", "admin-ladder", section="questions")
