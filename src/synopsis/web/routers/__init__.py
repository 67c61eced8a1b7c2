from synopsis.web.routers.auth import router as auth_router
from synopsis.web.routers.shared import router as shared_router
from synopsis.web.routers.summaries import router as summaries_router

__all__ = [
    "auth_router",
    "shared_router",
    "summaries_router",
]
