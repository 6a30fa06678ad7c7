"""
Offline kill-switch middleware
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.flags.store import FlagStore, flag_store

ALWAYS_ALLOWED = ("/health", "/ready")


class OfflineMiddleware(BaseHTTPMiddleware):
    """Answers 503 for everything but health checks while the offline flag is on"""

    def __init__(self, app, store: FlagStore = flag_store, allowed_paths=ALWAYS_ALLOWED):
        super().__init__(app)
        self.store = store
        self.allowed_paths = tuple(allowed_paths)

    async def dispatch(self, request: Request, call_next):
        if request.url.path not in self.allowed_paths and self.store.current().offline:
            return JSONResponse(status_code=503, content={"error": "service temporarily offline"})
        return await call_next(request)
