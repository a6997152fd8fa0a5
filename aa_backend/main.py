from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, user_operations
from .api.dependencies import Upstreams, build_upstreams
from .config import Settings, settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware, register_error_handlers


def create_app(
    config: Optional[Settings] = None,
    upstreams: Optional[Upstreams] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application and its upstream clients.

    The bundler and paymaster clients are created here, once, and closed when
    the application shuts down.
    """
    config = config or settings
    upstreams = upstreams or build_upstreams(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.upstreams.aclose()

    app = FastAPI(
        title="Account Abstraction Backend",
        description="Proxy to an ERC-4337 bundler and paymaster",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.upstreams = upstreams

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(user_operations.router, tags=["UserOperations"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "Account Abstraction Backend",
            "version": "0.1.0",
            "description": "Proxy to an ERC-4337 bundler and paymaster",
            "docs": "/docs",
            "health": "/health",
        }

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "aa_backend.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
