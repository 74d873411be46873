"""FastAPI application factory.

The proxy layer:
- Parses JSON bodies and picks the provider once per request
- Delegates to genmedia.core.generation
- Converts the error taxonomy into JSON error responses
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from genmedia import __version__
from genmedia.core.config import Config
from genmedia.core.providers import get_registry
from genmedia.server.errors import install_error_handlers

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Optional config; defaults to Config.from_env().

    Returns:
        Configured FastAPI application.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    config = config or Config.from_env()
    config.validate()
    # Start on the app's configured provider, not the shared config's
    get_registry().set_current(config.default_provider)

    app = FastAPI(
        title="genmedia",
        description="Proxy for hosted image and video generation providers",
        version=__version__,
    )
    app.state.config = config

    # CORS for the browser front end
    origins = os.environ.get("GENMEDIA_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # Include routes
    from genmedia.server.routes import generation, providers

    app.include_router(generation.router)
    app.include_router(providers.router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app
