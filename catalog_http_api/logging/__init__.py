# catalog_http_api/logging/__init__.py

"""
Logging helpers for the Catalog HTTP API.

API code does:

    from catalog_http_api.logging import get_logger

    logger = get_logger(__name__)
    logger.info("product_created", product_id=42)

and stays decoupled from how structlog is configured (see
``catalog_http_api.logging.config``).
"""

from __future__ import annotations

from typing import Any, Optional

import structlog


DEFAULT_LOGGER_NAME = "catalog_http_api"


def get_logger(name: Optional[str] = None) -> Any:
    """
    Get a structlog logger for the Catalog HTTP API.

    If ``name`` is omitted, the service-level default name is used.
    """
    return structlog.get_logger(name or DEFAULT_LOGGER_NAME)


__all__ = ["get_logger", "DEFAULT_LOGGER_NAME"]
