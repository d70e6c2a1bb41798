"""
main_routes.py
==============
Routes for the main server (PORT).

Endpoints:
  GET /        — plain-text greeting
  GET /health  — same greeting, used by container health checks
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

GREETING = "Hello world!"

router = APIRouter(tags=["Main"])


@router.get("/", response_class=PlainTextResponse)
async def hello():
    return GREETING


@router.get("/health", response_class=PlainTextResponse)
async def health():
    # Same payload as / on purpose; there is nothing else to check
    return GREETING
