"""
URAuth - Decentralized URI Ownership Registry

Main application entry point.

Prove you control a URI to a quorum of oracles, own its document,
and share that ownership with weighted co-owners.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from urauth.api import admin_router, claims_router, public_router, urauth_error_handler
from urauth.core import ExpirySweeper, SweeperConfig, URAuthError, URAuthRegistry
from urauth.observability import (
    RequestContextMiddleware,
    check_health,
    get_logger,
    get_metrics,
    setup_logging,
)

logger = get_logger(__name__)


DESCRIPTION = """
## URI Ownership Registry

### Lifecycle

```
request -> oracle quorum -> registered -> weighted updates
```

- **Request**: a claimant signs a request and receives a challenge
- **Verify**: oracle members observe the published challenge; ceil(3n/5) must agree
- **Claim**: whitelisted roots, or URIs under a document you own, skip the quorum
- **Update**: owners sign changes until their weights reach the threshold

Pending requests expire after a fixed number of steps.
"""


def create_app(
    registry: Optional[URAuthRegistry] = None,
    sweeper_config: Optional[SweeperConfig] = None,
    admin_token_hash: Optional[str] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        registry: Registry to serve (a fresh in-memory one if None)
        sweeper_config: Step clock settings (environment if None)
        admin_token_hash: Argon2 hash for X-Admin-Token (environment if None)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.registry.bootstrap()

        sweeper = ExpirySweeper(app.state.registry, sweeper_config)
        app.state.sweeper = sweeper
        sweeper.start()

        logger.info(
            "Application startup complete",
            oracle_members=len(app.state.registry.oracle_members()),
            store_type=type(app.state.registry.store).__name__,
            sweeper_enabled=sweeper.config.enabled,
        )

        yield

        sweeper.stop()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="URAuth",
        description=DESCRIPTION,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.registry = registry or URAuthRegistry()
    app.state.admin_token_hash = admin_token_hash

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(URAuthError, urauth_error_handler)

    app.include_router(public_router)
    app.include_router(claims_router)
    app.include_router(admin_router)

    @app.get("/health", tags=["System"])
    async def health():
        return {"status": "healthy", "service": "urauth"}

    @app.get("/health/detailed", tags=["System"])
    async def health_detailed(request: Request):
        """
        Liveness, event chain integrity and oracle quorum readiness.

        Returns 200 if healthy, 503 if not.
        """
        registry = request.app.state.registry
        result = check_health(registry=registry, store=registry.store)
        return JSONResponse(
            status_code=200 if result.healthy else 503,
            content={
                "status": "healthy" if result.healthy else "unhealthy",
                "checks": result.checks,
                "duration_ms": result.duration_ms,
            },
        )

    @app.get("/metrics", tags=["System"])
    async def metrics():
        return get_metrics().get_summary()

    return app


def _build_default_app() -> FastAPI:
    setup_logging()
    return create_app()


app = _build_default_app()
