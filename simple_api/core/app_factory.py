"""
app_factory.py
==============
Builds the two FastAPI apps. Both share the same CORS policy and the
AppError handler; they differ only in their router.

  main app         → simple_api.main_server.main_routes
  application app  → simple_api.app_server.app_routes
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from simple_api.app_server.app_routes import router as app_router
from simple_api.core.errors import AppError, app_error_handler
from simple_api.main_server.main_routes import router as main_router
from simple_api.version import SERVICE_VERSION

# ─────────────────────────────
# CORS Configuration
# ─────────────────────────────
CORS_ALLOW_ORIGINS = ["*"]
CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Authorization", "Accept", "Content-Type"]
CORS_MAX_AGE = 3600  # seconds


def _build(title: str, description: str, router) -> FastAPI:
    app = FastAPI(title=title, version=SERVICE_VERSION, description=description)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        max_age=CORS_MAX_AGE,
    )
    app.add_exception_handler(AppError, app_error_handler)
    app.include_router(router)
    return app


def create_main_app() -> FastAPI:
    return _build(
        "Simple API Demo — Main Server",
        "Plain-text greeting and health check.",
        main_router,
    )


def create_application_app() -> FastAPI:
    return _build(
        "Simple API Demo — Application Server",
        "JSON status, public and private placeholder routes.",
        app_router,
    )
