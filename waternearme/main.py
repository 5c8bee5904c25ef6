"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from waternearme.config import settings
from waternearme.database import Base, engine
from waternearme.errors import INTERNAL_ERROR_MESSAGE

# Import routers
from waternearme.routers import favorites, reviews, stats, users, waypoints

# Import all models so Base.metadata knows about them
from waternearme.models.user import User                      # noqa: F401
from waternearme.models.auth_session import AuthSession       # noqa: F401
from waternearme.models.bubbler import Bubbler                # noqa: F401
from waternearme.models.audit_log import BubblerAuditLog      # noqa: F401
from waternearme.models.review import Review                  # noqa: F401
from waternearme.models.favorite import Favorite              # noqa: F401
from waternearme.models.xp_event import XpEvent               # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="WaterNearMe",
    description="Crowdsourced map of public water fountains: waypoints, reviews, favourites and moderation",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    return (
        request.headers.get("cf-connecting-ip")
        or (forwarded.split(",")[0].strip() if forwarded else None)
        or (request.client.host if request.client else "unknown")
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info(
        "[%s] %s from %s -> %d",
        request.method, request.url.path, _client_ip(request), response.status_code,
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with a short field-level summary."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(problems) or "Invalid input"},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_MESSAGE},
    )


# Register routers
app.include_router(waypoints.router, prefix="/api/waypoints", tags=["Waypoints"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(favorites.router, prefix="/api/user/favorites", tags=["Favorites"])
app.include_router(users.router, prefix="/api/user", tags=["Users"])
app.include_router(stats.router, prefix="/api/stats", tags=["Stats"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
