"""
Small helpers shared by the application factory and the command line.

This module provides helper functions for:
- Resolving ``package.module:attribute`` import paths
- Normalising URL path prefixes
"""

from __future__ import annotations

import importlib
from typing import Any


def import_object(path: str) -> Any:
    """
    Import an object from a ``package.module:attribute`` path.

    Args:
        path: Import path, e.g. ``"myshop.routes.auth:router"``

    Returns:
        The resolved attribute

    Raises:
        ImportError: If the module cannot be imported or the path is malformed
        AttributeError: If the module has no such attribute

    Example:
        >>> import_object("os.path:join")
        <function join at ...>
    """
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ImportError(f"Import path must look like 'package.module:attribute', got {path!r}")

    obj: Any = importlib.import_module(module_name)
    for part in attribute.split("."):
        obj = getattr(obj, part)
    return obj


def normalize_prefix(prefix: str) -> str:
    """
    Normalise a route prefix to a leading slash and no trailing slash.

    Example:
        >>> normalize_prefix("api/shop/cart/")
        "/api/shop/cart"
    """
    cleaned = "/" + prefix.strip().strip("/")
    return "" if cleaned == "/" else cleaned
