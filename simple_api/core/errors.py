"""
errors.py
=========
Error taxonomy shared by the configuration loader, the server manager and
both FastAPI apps.

  ConfigurationError          — malformed or out-of-range setting
    EnvironmentVariableError  — same, naming the offending variable
  ServerError                 — bind failure or listener fault
  ValidationError             — malformed request input (reserved)

Every error knows how to render itself as the JSON error body used by
the apps' exception handler.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base class for every error raised by this service."""

    error_type: str = "internal_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    label: str = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def to_response_body(self) -> Dict[str, Any]:
        return {
            "error": {
                "type": self.error_type,
                "message": str(self),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        }


class ConfigurationError(AppError):
    error_type = "configuration_error"
    label = "Configuration error"


class EnvironmentVariableError(ConfigurationError):
    """A configuration error tied to one environment variable."""

    error_type = "environment_error"
    label = "Environment variable error"

    def __init__(self, var_name: str, message: str):
        super().__init__(message)
        self.var_name = var_name

    def __str__(self) -> str:
        return f"{self.label}: {self.var_name} - {self.message}"


class ServerError(AppError):
    """A listener failed to bind or died while serving."""

    error_type = "server_error"
    label = "Server error"

    def __init__(
        self,
        message: str,
        server: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        super().__init__(message)
        self.server = server
        self.host = host
        self.port = port


class ValidationError(AppError):
    error_type = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    label = "Validation error"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError raised inside a route as a JSON error body."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_response_body())
