"""
Route group mounting.

The API is split into route groups (auth, admin, shop, common). Each group is
mounted under its own prefix. A group's router is provided by the deployment
through ``routes.<group>.router`` in the settings; groups without one are
mounted as empty routers so the URL layout stays fixed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import APIRouter, FastAPI

from .utils import import_object, normalize_prefix

logger = logging.getLogger(__name__)


def load_router(group: str, import_path: Optional[str]) -> APIRouter:
    """
    Resolve the router for a route group.

    Falls back to an empty router (and logs the reason) when no import path
    is configured or the configured object cannot be loaded.
    """
    if not import_path:
        return APIRouter(tags=[group])

    try:
        router = import_object(import_path)
    except (ImportError, AttributeError) as exc:
        logger.error(f"Failed to load router for '{group}' from {import_path}: {exc}. Mounting an empty router.")
        return APIRouter(tags=[group])

    if not isinstance(router, APIRouter):
        logger.error(f"{import_path} is not an APIRouter ({type(router).__name__}). Mounting an empty router.")
        return APIRouter(tags=[group])
    return router


def mount_route_groups(app: FastAPI, groups: Mapping[str, Mapping[str, Any]]) -> Dict[str, str]:
    """
    Mount every configured route group on the application.

    Args:
        app: The application to mount on
        groups: ``{group: {"prefix": ..., "router": ...}}`` from the settings

    Returns:
        Mapping of group name to the prefix it was mounted at
    """
    mounted: Dict[str, str] = {}
    for group, options in groups.items():
        prefix = normalize_prefix(options["prefix"])
        router = load_router(group, options.get("router"))
        app.include_router(router, prefix=prefix)
        mounted[group] = prefix
        logger.debug(f"Mounted route group '{group}' at {prefix}")
    return mounted
