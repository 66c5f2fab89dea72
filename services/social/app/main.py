import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.config import Settings
from app.database import init_db
from app.events.publishers import EventPublisher, log_event
from app.exceptions import DomainError, domain_error_handler
from app.rate_limit import limiter
from app.accounts.router import router as accounts_router
from app.accounts.admin_router import router as accounts_admin_router
from app.social_graph.router import router as social_router
from app.posts.router import router as posts_router
from app.moderation.router import router as moderation_router
from app.moderation.admin_router import router as moderation_admin_router
from shared.middleware.request_id import request_id_middleware
from shared.middleware.error_handler import error_envelope_middleware

_settings = Settings()
logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(levelname)s:%(name)s: %(message)s",
)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Dunbar Social Service

Relationships, visibility and moderation for a network capped at 150 follows
per account:

* **Accounts** — social profile per identity, private by default.
* **Social graph** — follow requests for private accounts, instant follows for
  public ones, accept / reject / cancel, unfollow, remove follower.
  An account may follow at most 150 others.
* **Posts** — posts, home feed and comments, visible only to the owner and
  approved followers.
* **Moderation** — one report per user per post; posts reaching the report
  threshold jump to the admin's priority queue. Admins approve or remove.

### Authentication
All endpoints except `/health` require:
```
Authorization: Bearer <access_token>
```
Admin endpoints additionally require an account with the `admin` role.

### Error shape
Domain errors return a consistent JSON envelope:
```json
{ "error": { "code": "follow_cap_reached", "message": "Follow limit reached (150)." },
  "request_id": "..." }
```
"""

_TAGS_METADATA = [
    {"name": "accounts", "description": "Create, view, search and update social profiles."},
    {
        "name": "social-graph",
        "description": (
            "Follow workflow. Private targets get a pending request; public targets are "
            "followed immediately. Counters change only when a follow is approved or removed."
        ),
    },
    {"name": "posts", "description": "Posts, feed and comments gated by follow approval."},
    {"name": "moderation", "description": "Report a post."},
    {"name": "admin-moderation", "description": "**Admin only.** Review queue and decisions."},
    {"name": "admin-accounts", "description": "**Admin only.** Promote or delete accounts."},
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or _settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(settings.social_database_url)
        yield

    app = FastAPI(
        title="Dunbar Social Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(DomainError, domain_error_handler)

    publisher = EventPublisher()
    publisher.subscribe(log_event)
    app.state.event_publisher = publisher

    # Middleware is applied in reverse-registration order (last added = outermost).
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

    app.include_router(accounts_router, prefix="/api/v1")
    app.include_router(accounts_admin_router, prefix="/api/v1")
    app.include_router(social_router, prefix="/api/v1")
    app.include_router(posts_router, prefix="/api/v1")
    app.include_router(moderation_router, prefix="/api/v1")
    app.include_router(moderation_admin_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="social")

    return app


app = create_app()
