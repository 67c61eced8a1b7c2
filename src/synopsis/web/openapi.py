from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

# (method, path) pairs that do not require a bearer token
PUBLIC_ENDPOINTS = {
    ("POST", "/auth/register"),
    ("POST", "/auth/login"),
    ("GET", "/summaries"),
    ("PATCH", "/summaries/{summary_id}/star"),
    ("POST", "/summaries/{summary_id}/share"),
    ("GET", "/s/{slug}"),
    ("GET", "/health"),
    ("GET", "/"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Synopsis API",
            version="0.1.0",
            summary="Store, search and share AI-generated note summaries",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Signed token returned by register/login, valid for 15 minutes by default",
            },
        }

        # Apply security globally, then clear it for public endpoints
        openapi_schema["security"] = [{"BearerAuth": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in PUBLIC_ENDPOINTS:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid credentials", "type": "authentication_error"},
                {"message": "Summary not found", "type": "not_found"},
                {"message": "Email already registered", "type": "conflict"},
            ]
        }
    }
