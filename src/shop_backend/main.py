"""ASGI entry point: ``uvicorn shop_backend.main:app``."""

from .app import create_app

app = create_app()
