"""
Shop Backend - server entrypoint for the multi-tenant e-commerce REST API

This package boots the HTTP API on every CPU core of the host:

- A supervisor process that keeps one worker per logical CPU alive,
  replacing any worker that exits
- Per-worker database connection pools
- Cross-origin policy for the storefront client
- Response compression and per-client rate limiting
- Mounting of the auth, admin, shop and common route groups

Key Components:
    - supervisor: Worker pool ownership and respawn-on-exit loop
    - worker: Per-process server startup on the shared listening socket
    - app: FastAPI application factory (middleware, routes, health check)
    - main: Module-level application for `uvicorn shop_backend.main:app`
    - configuration: Default settings merged with environment overrides
    - database: Bounded SQLAlchemy connection pool per worker
    - middleware: Fixed-window rate limiter
    - routes: Route group mounting

Usage:
    Run the supervised server with:
        shop-backend --port 5000

    Or a single development process with:
        uvicorn shop_backend.main:app --reload
"""

__version__ = "0.1.0"
