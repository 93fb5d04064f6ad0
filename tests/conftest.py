"""
Shared fixtures: a small on-disk content bundle, a dispatcher wired over it,
and an MCP client session connected to that dispatcher in memory.
"""

import asyncio
from contextlib import asynccontextmanager

import anyio
import pytest
from mcp import ClientSession

from pubky_mcp.content import ContentResolver
from pubky_mcp.dispatcher import ProtocolDispatcher
from pubky_mcp.handlers import PromptRegistry, ResourceRegistry, ToolRegistry
from pubky_mcp.transport import StdioTransport

CORE_README = "# Pubky Core\n\nA homeserver stores public data for a user.\nSign up with a keypair.\n"
PKARR_README = "# Pkarr\n\nPublish signed DNS packets to the Mainline DHT.\nFind a homeserver from a public key.\n"


@pytest.fixture
def data_root(tmp_path):
    """Bundle with the core and pkarr roots populated; pkdns and nexus missing."""
    core = tmp_path / "pubky-core"
    core.mkdir()
    (core / "README.md").write_text(CORE_README)
    (core / "pubky-client").mkdir()
    (core / "pubky-client" / "README.md").write_text("# Client\n\nsignup and signin\n")

    pkarr = tmp_path / "pkarr"
    pkarr.mkdir()
    (pkarr / "README.md").write_text(PKARR_README)

    (tmp_path / "secret.txt").write_text("outside every root")
    return tmp_path


@pytest.fixture
def resolver(data_root):
    return ContentResolver({
        "core": data_root / "pubky-core",
        "pkarr": data_root / "pkarr",
        "pkdns": data_root / "pkdns",
        "nexus": data_root / "pubky-nexus",
    })


@pytest.fixture
def dispatcher(resolver):
    return ProtocolDispatcher(
        resources=ResourceRegistry(resolver),
        tools=ToolRegistry(resolver),
        prompts=PromptRegistry(),
    )


@pytest.fixture
def connect():
    """
    Open an initialized ClientSession to a dispatcher.

    The server side runs on a StdioTransport over in-memory streams, the same
    path the stdio entry point takes with the process pipes.
    """
    @asynccontextmanager
    async def _connect(dispatcher):
        transport = StdioTransport(dispatcher)
        client_send, server_receive = anyio.create_memory_object_stream(16)
        server_send, client_receive = anyio.create_memory_object_stream(16)
        task = asyncio.ensure_future(transport.serve(server_receive, server_send))
        try:
            async with ClientSession(client_receive, client_send) as session:
                session.initialize_result = await session.initialize()
                yield session
        finally:
            # Closing the client end is EOF for the server
            await client_send.aclose()
            await asyncio.wait_for(task, timeout=5)

    return _connect
