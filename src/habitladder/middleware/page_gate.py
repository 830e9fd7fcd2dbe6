"""Page gate middleware: enforces the page access matrix on protected prefixes."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from habitladder.auth.policy import check_page_access, is_protected_path
from habitladder.auth.session import resolve
from habitladder.config import settings_for


class PageGateMiddleware(BaseHTTPMiddleware):
    """Redirect callers who may not see a protected page.

    Only /dashboard, /admin, /tasks and /ladder (and their subpaths) are
    checked; every other path passes through untouched.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not is_protected_path(path):
            return await call_next(request)

        identity = resolve(request)
        decision = check_page_access(identity, path, settings_for(request).admin_emails)
        if not decision.allowed:
            return RedirectResponse(url=decision.redirect_to or "/login", status_code=307)

        request.state.identity = identity
        return await call_next(request)
