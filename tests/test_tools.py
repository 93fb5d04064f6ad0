# Unit tests for the tool registry and each developer tool

# region imports
import json

import pytest

from pubky_mcp.handlers.tools import DEFAULT_TOOLS, ToolEntry, ToolRegistry
from pubky_mcp.models import TextContent
# endregion

VALID_KEY = "o1gg96ewuojmopcjbz8895478wdtxtzzber7aezq6ror5a91j7dy"


# region registry
def test_list_tools_exposes_descriptors_only(resolver):
    registry = ToolRegistry(resolver)
    tools = registry.list()
    assert [t.name for t in tools] == [t.name for t in DEFAULT_TOOLS]
    for tool in tools:
        assert set(tool.model_dump()) == {"name", "description", "inputSchema"}


@pytest.mark.asyncio
async def test_unknown_tool_returns_error_content(resolver):
    result = await ToolRegistry(resolver).call("invalid_tool", {})
    assert result.isError is True
    assert result.content[0].text.startswith("Error: Unknown tool 'invalid_tool'")


@pytest.mark.asyncio
async def test_missing_required_argument_returns_error_content(resolver):
    result = await ToolRegistry(resolver).call("validate_public_key", {})
    assert result.isError is True
    assert "public_key" in result.content[0].text


@pytest.mark.asyncio
async def test_schema_violation_returns_error_content(resolver):
    result = await ToolRegistry(resolver).call("search_docs", {"query": "pkarr", "limit": 500})
    assert result.isError is True
    assert "$.limit" in result.content[0].text


@pytest.mark.asyncio
async def test_handler_failure_returns_error_content(resolver):
    def broken(arguments, resolver):
        raise RuntimeError("boom")

    registry = ToolRegistry(resolver, [ToolEntry("broken", "Always fails", {"type": "object"}, broken)])
    result = await registry.call("broken", {})
    assert result.isError is True
    assert "boom" in result.content[0].text


@pytest.mark.asyncio
async def test_async_handler_and_content_blocks(resolver):
    async def echo(arguments, resolver):
        return [TextContent(text=arguments["word"])]

    schema = {"type": "object", "properties": {"word": {"type": "string"}}, "required": ["word"]}
    registry = ToolRegistry(resolver, [ToolEntry("echo", "Echo a word", schema, echo)])
    result = await registry.call("echo", {"word": "pubky"})
    assert result.isError is False
    assert result.content[0].text == "pubky"


def test_duplicate_tool_names_rejected(resolver):
    tool = DEFAULT_TOOLS[0]
    with pytest.raises(ValueError, match="Duplicate"):
        ToolRegistry(resolver, [tool, tool])
# endregion


# region tools
@pytest.mark.asyncio
async def test_search_docs_across_roots(resolver):
    result = await ToolRegistry(resolver).call("search_docs", {"query": "homeserver"})
    assert result.isError is False
    text = result.content[0].text
    assert "core/README.md:3:" in text
    assert "pkarr/README.md:4:" in text


@pytest.mark.asyncio
async def test_search_docs_single_root_and_no_match(resolver):
    registry = ToolRegistry(resolver)
    result = await registry.call("search_docs", {"query": "homeserver", "root": "pkarr"})
    assert "core/" not in result.content[0].text

    result = await registry.call("search_docs", {"query": "zzz-not-there"})
    assert result.isError is False
    assert result.content[0].text == "No matches for 'zzz-not-there'"


@pytest.mark.asyncio
async def test_search_docs_skips_non_utf8_files(resolver, data_root):
    (data_root / "pkarr" / "binary.md").write_bytes(b"\xff\xfe homeserver")
    result = await ToolRegistry(resolver).call("search_docs", {"query": "homeserver"})
    assert result.isError is False
    text = result.content[0].text
    assert "core/README.md:3:" in text
    assert "pkarr/README.md:4:" in text
    assert "binary.md" not in text


@pytest.mark.asyncio
async def test_read_doc(resolver):
    registry = ToolRegistry(resolver)
    result = await registry.call("read_doc", {"root": "core", "path": "pubky-client/README.md"})
    assert result.isError is False
    assert result.content[0].text.startswith("# Client")

    result = await registry.call("read_doc", {"root": "core", "path": "../secret.txt"})
    assert result.isError is True
    assert "escapes content root" in result.content[0].text


@pytest.mark.asyncio
async def test_list_content_roots(resolver):
    result = await ToolRegistry(resolver).call("list_content_roots", {})
    roots = {item["root"]: item["available"] for item in json.loads(result.content[0].text)}
    assert roots == {"core": True, "pkarr": True, "pkdns": False, "nexus": False}


@pytest.mark.asyncio
async def test_validate_public_key(resolver):
    registry = ToolRegistry(resolver)
    result = await registry.call("validate_public_key", {"public_key": f"pk:{VALID_KEY}"})
    assert json.loads(result.content[0].text) == {"valid": True, "public_key": VALID_KEY}

    result = await registry.call("validate_public_key", {"public_key": "not-a-key"})
    data = json.loads(result.content[0].text)
    assert data["valid"] is False
    assert "52 characters" in data["reason"]


@pytest.mark.asyncio
async def test_format_pubky_uri(resolver):
    registry = ToolRegistry(resolver)
    result = await registry.call(
        "format_pubky_uri",
        {"public_key": VALID_KEY, "app": "pubky.app", "path": "/posts/0001"},
    )
    assert result.content[0].text == f"pubky://{VALID_KEY}/pub/pubky.app/posts/0001"

    result = await registry.call("format_pubky_uri", {"public_key": "bad", "app": "pubky.app"})
    assert result.isError is True
    assert "Invalid public key" in result.content[0].text


@pytest.mark.asyncio
async def test_generate_code_example(resolver):
    registry = ToolRegistry(resolver)
    result = await registry.call("generate_code_example", {"language": "rust", "operation": "signup"})
    text = result.content[0].text
    assert text.startswith("```rust")
    assert "client.signup(&keypair, &homeserver, None)" in text

    result = await registry.call(
        "generate_code_example",
        {"language": "javascript", "operation": "put", "url": "pubky://abc/pub/app/x.json"},
    )
    assert 'const url = "pubky://abc/pub/app/x.json";' in result.content[0].text

    result = await registry.call("generate_code_example", {"language": "cobol", "operation": "put"})
    assert result.isError is True
# endregion
