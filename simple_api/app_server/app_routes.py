"""
app_routes.py
=============
Routes for the application server (PORT_APP).

Endpoints:
  GET /         — service status
  GET /health   — same status object
  GET /public   — public placeholder with a fresh timestamp
  GET /private  — "private" placeholder; NOT authenticated

/public and /private have identical access today. The warning field on
/private is part of the response contract.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from simple_api.version import SERVICE_NAME, SERVICE_VERSION

PRIVATE_ROUTE_WARNING = "This route should require authentication in production"

router = APIRouter(tags=["Application"])


# ─────────────────────────────
# Response models
# ─────────────────────────────

class StatusResponse(BaseModel):
    status: str
    service: str
    version: str


class PublicRouteResponse(BaseModel):
    message: str
    access: str
    timestamp: str  # ISO-8601, UTC


class PrivateRouteResponse(PublicRouteResponse):
    warning: str


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ─────────────────────────────
# Endpoints
# ─────────────────────────────

@router.get("/", response_model=StatusResponse)
async def root():
    """Service status, also used for service discovery."""
    return StatusResponse(status="ok", service=SERVICE_NAME, version=SERVICE_VERSION)


@router.get("/health", response_model=StatusResponse)
async def health():
    return await root()


@router.get("/public", response_model=PublicRouteResponse)
async def public_route():
    return PublicRouteResponse(
        message="public route",
        access="public",
        timestamp=utc_timestamp(),
    )


@router.get("/private", response_model=PrivateRouteResponse)
async def private_route():
    """
    Placeholder for protected content.

    There is no auth layer yet; the warning field says so to every caller.
    """
    return PrivateRouteResponse(
        message="private and protected route",
        access="private",
        timestamp=utc_timestamp(),
        warning=PRIVATE_ROUTE_WARNING,
    )
