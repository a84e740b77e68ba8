from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from thesync import task_queue
from thesync.auth.router import router as auth_router
from thesync.config import get_settings
from thesync.database import init_db
from thesync.milestones.router import router as milestones_router
from thesync.rate_limit import limiter
from thesync.redis_client import close_redis_client
from thesync_shared.middleware.error_handler import (
    error_body,
    error_envelope_middleware,
    register_exception_handlers,
)
from thesync_shared.middleware.request_id import request_id_middleware


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## TheSync Identity Service

Authentication for the thesis-management platform:

* **Admins** log in with username + password.
* **Users** (lecturers, moderators, students) log in with email + password.
  The role is derived from the lecturer/student profile.
* Access tokens (1 h) and refresh tokens (7 d) are signed with separate
  secrets.  A new login supersedes every earlier refresh token.
* **Password reset** via an 8-digit code sent by email; the new password is
  generated and mailed to the user.

### Authentication
```
Authorization: Bearer <access_token>
```

### Response shape
```json
{ "success": true, "statusCode": 200, "data": { ... } }
{ "success": false, "statusCode": 401, "error": "Not authorized" }
```
"""

_TAGS_METADATA = [
    {
        "name": "auth",
        "description": "Admin and user login, token refresh, logout, password reset and change.",
    },
    {
        "name": "milestones",
        "description": "**Admin only.** Schedule, move, cancel and inspect milestone reminder jobs.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded: {exc.detail}"),
    )


# ── App factory ───────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.database_url)
    await task_queue.init_pool(settings.redis_url)
    yield
    await task_queue.close_pool()
    await close_redis_client()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="TheSync Identity Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Attach rate limiter state before middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    # Middleware is applied in reverse-registration order (last added = outermost).
    # CORS must be outermost so ALL responses (including 429s) carry CORS headers.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(milestones_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="thesync")

    return app


app = create_app()
