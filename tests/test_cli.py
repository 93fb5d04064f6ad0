"""
Tests for configuration helpers, the command-line parser and the stdio entry point
"""

import asyncio
import os
import signal
from contextlib import asynccontextmanager

import anyio
import pytest

from pubky_mcp import cli
from pubky_mcp.config import DEFAULT_PORT, get_host, get_port


def test_get_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8123")
    assert get_port() == 8123


def test_get_port_falls_back_on_garbage(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    assert get_port() == DEFAULT_PORT

    monkeypatch.delenv("PORT")
    assert get_port() == DEFAULT_PORT


def test_get_host(monkeypatch):
    monkeypatch.setenv("HOST", "127.0.0.1")
    assert get_host() == "127.0.0.1"


def test_parser_defaults_to_stdio():
    args = cli.build_parser().parse_args([])
    assert args.transport is None

    args = cli.build_parser().parse_args(["http", "--port", "4000"])
    assert args.transport == "http"
    assert args.port == 4000
    assert args.host is None


def test_main_selects_transport(monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "run_stdio", lambda: calls.append("stdio"))
    monkeypatch.setattr(cli, "run_http", lambda host, port: calls.append(("http", host, port)))
    monkeypatch.setenv("HOST", "127.0.0.1")

    assert cli.main([]) == 0
    assert cli.main(["http", "--port", "4000"]) == 0
    assert calls == ["stdio", ("http", "127.0.0.1", 4000)]


def test_main_reports_fatal_errors(monkeypatch):
    def broken():
        raise RuntimeError("no stdin")

    monkeypatch.setattr(cli, "run_stdio", broken)
    assert cli.main(["stdio"]) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
async def test_signal_closes_stdio_channel(monkeypatch, dispatcher, sig):
    """A signal closes the channel while the client is still connected."""
    opened = asyncio.Event()
    client_send, server_receive = anyio.create_memory_object_stream(16)
    server_send, client_receive = anyio.create_memory_object_stream(16)

    @asynccontextmanager
    async def fake_stdio_server():
        opened.set()
        yield server_receive, server_send

    monkeypatch.setattr(cli, "stdio_server", fake_stdio_server)

    task = asyncio.ensure_future(cli._serve_stdio(dispatcher))
    await asyncio.wait_for(opened.wait(), timeout=5)
    # Let the server task start reading before the signal arrives
    await asyncio.sleep(0.05)
    os.kill(os.getpid(), sig)

    transport = await asyncio.wait_for(task, timeout=5)
    assert transport.closed is True

    await client_send.aclose()
    await client_receive.aclose()
