"""
MCP Resource Endpoint Handlers

Handles resource listing and reading for MCP protocol.
Exposes resources: bundled docs and specs for Pubky Core, Pkarr, Pkdns and Nexus
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..content import ContentResolver
from ..errors import NotFoundError
from ..models import ResourceContents, ResourceDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceEntry:
    """Catalog entry: descriptor plus the (root, path) address of its content."""
    uri: str
    name: str
    root: str
    path: str
    description: Optional[str] = None
    mimeType: str = "text/markdown"

    def definition(self) -> ResourceDefinition:
        return ResourceDefinition(
            uri=self.uri,
            name=self.name,
            description=self.description,
            mimeType=self.mimeType,
        )


def _doc(root: str, slug: str, path: str, name: str, description: str, mime_type: str = "text/markdown") -> ResourceEntry:
    return ResourceEntry(
        uri=f"doc://{root}/{slug}",
        name=name,
        root=root,
        path=path,
        description=description,
        mimeType=mime_type,
    )


# Resource catalog
DEFAULT_RESOURCES: List[ResourceEntry] = [
    # Pubky Core
    _doc("core", "readme", "README.md", "Pubky Core Overview",
         "Introduction to Pubky Core: homeservers, sessions and the pubky:// storage model"),
    _doc("core", "changelog", "CHANGELOG.md", "Pubky Core Changelog",
         "Release history of the Pubky Core crates and client libraries"),
    _doc("core", "client-readme", "pubky-client/README.md", "Pubky Client",
         "Client library usage: signup, signin, public storage reads and writes"),
    _doc("core", "homeserver-readme", "pubky-homeserver/README.md", "Pubky Homeserver",
         "Running and configuring a homeserver"),
    _doc("core", "homeserver-config", "pubky-homeserver/config.sample.toml", "Homeserver Sample Config",
         "Annotated sample homeserver configuration", "application/toml"),
    # Pkarr
    _doc("pkarr", "readme", "README.md", "Pkarr Overview",
         "Public-key addressable resource records published on the Mainline DHT"),
    _doc("pkarr", "design", "design/base.md", "Pkarr Design",
         "Signed packet format, relays and DHT publishing"),
    # Pkdns
    _doc("pkdns", "readme", "README.md", "Pkdns Overview",
         "DNS server resolving Pkarr domains"),
    # Nexus
    _doc("nexus", "readme", "README.md", "Pubky Nexus Overview",
         "Social graph indexer aggregating data from all homeservers"),
    _doc("nexus", "api", "docs/api.md", "Nexus API",
         "REST API for reading aggregated social data"),
    _doc("nexus", "openapi", "docs/openapi.json", "Nexus OpenAPI Spec",
         "OpenAPI description of the Nexus REST API", "application/json"),
]


class ResourceRegistry:
    """Static resource catalog backed by a content resolver."""

    def __init__(self, resolver: ContentResolver, entries: Iterable[ResourceEntry] = DEFAULT_RESOURCES):
        self._resolver = resolver
        self._entries: Dict[str, ResourceEntry] = {}
        for entry in entries:
            if entry.uri in self._entries:
                raise ValueError(f"Duplicate resource uri: {entry.uri}")
            self._entries[entry.uri] = entry

    def list(self) -> List[ResourceDefinition]:
        """
        List all registered resources.

        Catalog metadata never touches the filesystem, so this succeeds even
        when the content roots are missing.
        """
        return [entry.definition() for entry in self._entries.values()]

    async def get(self, uri: str) -> ResourceContents:
        """
        Read a resource by URI.

        Args:
            uri: Exact resource URI (e.g., "doc://core/readme")

        Returns:
            ResourceContents with the full file text

        Raises:
            NotFoundError: If the URI is unregistered or its file is absent
            ContentAccessError: If the file is not UTF-8 text
        """
        entry = self._entries.get(uri)
        if entry is None:
            raise NotFoundError(f"Resource '{uri}' not found")

        text = await asyncio.to_thread(self._resolver.read, entry.root, entry.path)
        return ResourceContents(uri=entry.uri, mimeType=entry.mimeType, text=text)
