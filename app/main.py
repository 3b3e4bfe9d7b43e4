# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Glass API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main        (binds API_HOST:API_PORT)
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    GENERIC_ERROR_MESSAGE,
    GlassException,
    glass_exception_handler,
    validation_exception_handler,
)
from app.routers import collaborations, health, lab_requests, labs, teams

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The Supabase client is created lazily on first use, so startup only
    logs the effective configuration.
    """
    logger.info(f"Starting Glass API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down Glass API")


# Create FastAPI application
app = FastAPI(
    title="Glass API",
    description="""
## Lab and Team Directory API

Glass lists research labs and teams. Each lab or team is one record plus
several child collections (photos, equipment, members, ...) that are always
replaced as a whole.

### Partial updates

`PUT` and `PATCH` only touch the keys present in the body:

```bash
# Clear a team's members, leave everything else alone
curl -X PATCH http://localhost:8000/api/teams/42 \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"members": []}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Labs",
            "description": "Lab listings with photos, equipment, compliance and offers",
        },
        {
            "name": "Teams",
            "description": "Research teams with members, techniques and lab links",
        },
        {
            "name": "Lab Requests",
            "description": "Rental requests for lab space and their review",
        },
        {
            "name": "Collaborations",
            "description": "Collaboration enquiries addressed to labs",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(GlassException)
async def handle_glass_exception(request: Request, exc: GlassException):
    """Handle custom Glass exceptions."""
    return await glass_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    """Handle malformed requests as 400 with the first issue."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": GENERIC_ERROR_MESSAGE,
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

# Lab endpoints
app.include_router(
    labs.router,
    prefix="/api/labs",
    tags=["Labs"]
)

# Team endpoints
app.include_router(
    teams.router,
    prefix="/api/teams",
    tags=["Teams"]
)

# Lab request endpoints
app.include_router(
    lab_requests.router,
    prefix="/api/lab-requests",
    tags=["Lab Requests"]
)

# Collaboration endpoints
app.include_router(
    collaborations.router,
    prefix="/api/lab-collaborations",
    tags=["Collaborations"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Glass API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
