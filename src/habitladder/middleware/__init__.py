"""Middleware registration."""

from fastapi import FastAPI

from habitladder.config import Settings
from habitladder.middleware.cors import setup_cors
from habitladder.middleware.error_handler import setup_error_handlers
from habitladder.middleware.logging import setup_logging
from habitladder.middleware.page_gate import PageGateMiddleware
from habitladder.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    FastAPI/Starlette executes middleware in reverse-add order (last added = outermost).
    The page gate runs innermost so its redirects still get a request id and CORS headers.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(PageGateMiddleware)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
