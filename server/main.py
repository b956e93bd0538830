"""
FastAPI server for Creative Scale

HTTP surface for the decision engine, compiler and execution router.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from creative import __version__
from creative.config import get_settings
from creative.engines import build_engine_pool
from creative.routing import ExecutionRouter, load_registry
from creative.validation import InputValidationError
from server.config import settings
from server.routes import decisions, routing

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - load the registry once and build the router"""
    creative_settings = get_settings().model_copy(update={"engine_mode": settings.engine_mode})
    registry = load_registry(settings.registry_path or creative_settings.registry_path)
    engines = build_engine_pool(registry, creative_settings)

    app.state.registry = registry
    app.state.engines = engines
    app.state.router = ExecutionRouter.from_settings(registry, engines, creative_settings)
    app.state.batch_concurrency = creative_settings.batch_concurrency

    print("=" * 50)
    print("Creative Scale - FastAPI Server")
    print("=" * 50)
    print(f"Environment: {settings.env}")
    print(f"Debug: {settings.debug}")
    print(f"Engine Mode: {settings.engine_mode}")
    print(f"Registry: {registry.version} ({len(registry)} engines)")
    print("=" * 50)

    yield

    # Shutdown
    for engine in engines.values():
        await engine.aclose()
    print("\nShutting down Creative Scale server...")


# Create FastAPI app
app = FastAPI(
    title="Creative Scale",
    description="Strategy decisions, render plan compilation and capability-based routing for video ads",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    """Reject invalid upstream documents with the full error list"""
    return JSONResponse(status_code=422, content=exc.to_dict())


# Include routers
app.include_router(decisions.router, tags=["Decisions"])
app.include_router(routing.router, tags=["Routing"])


@app.get("/health")
async def health(request: Request):
    """Health check endpoint"""
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "healthy",
        "service": "creative-scale",
        "version": __version__,
        "mode": settings.engine_mode,
        "registry_version": registry.version if registry else None,
        "engines": len(registry) if registry else 0,
        "env": settings.env,
    }


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": "Creative Scale",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "decide": "POST /decide",
            "compile": "POST /compile",
            "route": "POST /route",
            "route_batch": "POST /route/batch",
            "pipeline": "POST /pipeline",
            "engines": "GET /engines",
            "engine": "GET /engines/{engine_id}",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
