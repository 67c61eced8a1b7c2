from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from synopsis.app import App
from synopsis.config import Config
from synopsis.errors import UserError
from synopsis.web.error_handlers import (
    general_exception_handler,
    http_exception_handler,
    request_validation_error_handler,
    user_error_handler,
)
from synopsis.web.openapi import set_custom_openapi
from synopsis.web.rate_limit import RateLimitMiddleware
from synopsis.web.routers import auth_router, shared_router, summaries_router
from synopsis.web.security_headers import SecurityHeadersMiddleware


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Synopsis API",
        lifespan=lifespan,
    )
    # Set before startup so requests can resolve the App without running the lifespan
    app.state.app = app_instance

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.rate_limit_requests,
        window_seconds=config.rate_limit_window_seconds,
    )
    app.add_middleware(SecurityHeadersMiddleware)

    # Added last so it is outermost and CORS headers also reach 429 responses
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health", tags=["meta"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", tags=["meta"], include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"message": "API is running"}

    app.include_router(auth_router)
    app.include_router(summaries_router)
    app.include_router(shared_router)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
