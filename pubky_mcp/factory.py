"""
Server wiring shared by the stdio and HTTP entry points.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from .config import CONTENT_ROOTS, DATA_ROOT
from .content import ContentResolver
from .dispatcher import ProtocolDispatcher
from .handlers import PromptRegistry, ResourceRegistry, ToolRegistry

logger = logging.getLogger(__name__)


def create_resolver(roots: Optional[Mapping[str, Union[str, Path]]] = None) -> ContentResolver:
    """Build the content resolver over the bundled roots (or the given ones)."""
    return ContentResolver(CONTENT_ROOTS if roots is None else roots)


def create_dispatcher(resolver: Optional[ContentResolver] = None) -> ProtocolDispatcher:
    """Build the registries once and wire them into a dispatcher."""
    resolver = resolver or create_resolver()
    return ProtocolDispatcher(
        resources=ResourceRegistry(resolver),
        tools=ToolRegistry(resolver),
        prompts=PromptRegistry(),
    )


def verify_bundled_resources(resolver: ContentResolver) -> bool:
    """
    Check the bundled content once at startup.

    Missing content is never fatal: the server keeps serving listings and
    whatever content is resolvable.
    """
    available = resolver.verify()

    if available:
        logger.info("Bundled resources found")
    else:
        logger.warning(f"Bundled resources incomplete at {DATA_ROOT}; serving in degraded mode")
        logger.warning("Populate the data directory with the fetch-resources step")
    return available
