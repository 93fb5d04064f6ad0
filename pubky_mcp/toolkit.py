"""
Developer Tool Implementations

Handlers behind the MCP tools. Each takes the validated arguments and the
content resolver, and returns text. Handlers read bundled content but never
modify it.
"""

import json
import logging
from typing import Any, Dict, List

from .content import ContentResolver
from .errors import McpError, ValidationError

logger = logging.getLogger(__name__)

# z-base-32 alphabet used for Pubky public keys
Z32_ALPHABET = "ybndrfg8ejkmcpqxot1uwisza345h769"
PUBLIC_KEY_LENGTH = 52

LANGUAGES = ["javascript", "rust"]
OPERATIONS = ["signup", "signin", "put", "get", "list", "delete"]


# ============================================================================
# Documentation tools
# ============================================================================

def search_docs(arguments: Dict[str, Any], resolver: ContentResolver) -> str:
    """Case-insensitive line search across bundled markdown."""
    query = arguments["query"].strip().lower()
    limit = arguments.get("limit", 10)
    roots = [arguments["root"]] if arguments.get("root") else [root.name for root in resolver.roots]

    matches: List[str] = []
    for root in roots:
        for path in resolver.list_files(root):
            try:
                text = resolver.read(root, path)
            except McpError as e:
                # Unreadable or non-UTF-8 files never fail the whole search
                logger.debug(f"Skipping {root}/{path}: {e.message}")
                continue
            for lineno, line in enumerate(text.splitlines(), start=1):
                if query in line.lower():
                    matches.append(f"{root}/{path}:{lineno}: {line.strip()}")
                    if len(matches) >= limit:
                        return "\n".join(matches)

    if not matches:
        return f"No matches for '{arguments['query']}'"
    return "\n".join(matches)


def read_doc(arguments: Dict[str, Any], resolver: ContentResolver) -> str:
    """Read any file inside a content root."""
    return resolver.read(arguments["root"], arguments["path"])


def list_content_roots(arguments: Dict[str, Any], resolver: ContentResolver) -> str:
    """Report which content roots are available."""
    availability = resolver.availability()
    return json.dumps(
        [{"root": name, "available": available} for name, available in availability.items()],
        indent=2,
    )


# ============================================================================
# Key and URI tools
# ============================================================================

def _normalize_public_key(raw: str) -> str:
    key = raw.strip()
    for prefix in ("pubky://", "pk:"):
        if key.startswith(prefix):
            key = key[len(prefix):]
    return key.split("/", 1)[0].lower()


def _key_problem(key: str) -> str:
    if len(key) != PUBLIC_KEY_LENGTH:
        return f"expected {PUBLIC_KEY_LENGTH} characters, got {len(key)}"
    invalid = sorted({char for char in key if char not in Z32_ALPHABET})
    if invalid:
        return f"characters outside the z-base-32 alphabet: {''.join(invalid)}"
    return ""


def validate_public_key(arguments: Dict[str, Any], resolver: ContentResolver) -> str:
    """Check that a string is a z-base-32 encoded Ed25519 public key."""
    key = _normalize_public_key(arguments["public_key"])
    problem = _key_problem(key)
    result: Dict[str, Any] = {"valid": not problem, "public_key": key}
    if problem:
        result["reason"] = problem
    return json.dumps(result, indent=2)


def format_pubky_uri(arguments: Dict[str, Any], resolver: ContentResolver) -> str:
    """Build a pubky:// URI for an app path on a user's homeserver."""
    key = _normalize_public_key(arguments["public_key"])
    problem = _key_problem(key)
    if problem:
        raise ValidationError(f"Invalid public key: {problem}")

    app = arguments["app"].strip("/")
    path = arguments.get("path", "").strip("/")
    uri = f"pubky://{key}/pub/{app}/"
    return uri + path if path else uri


# ============================================================================
# Code examples
# ============================================================================

_JS_EXAMPLES = {
    "signup": """import {{ Client, Keypair, PublicKey }} from "@synonymdev/pubky";

const client = new Client();
const keypair = Keypair.random();
const homeserver = PublicKey.from("{homeserver}");
await client.signup(keypair, homeserver);""",
    "signin": """await client.signin(keypair);
const session = await client.session(keypair.publicKey());""",
    "put": """const url = "{url}";
await client.fetch(url, {{
  method: "PUT",
  body: JSON.stringify({{ hello: "pubky" }}),
  credentials: "include",
}});""",
    "get": """const response = await client.fetch("{url}");
const data = await response.json();""",
    "list": """const urls = await client.list("{url}");""",
    "delete": """await client.fetch("{url}", {{ method: "DELETE", credentials: "include" }});""",
}

_RUST_EXAMPLES = {
    "signup": """use pubky::{{Client, Keypair, PublicKey}};

let client = Client::builder().build()?;
let keypair = Keypair::random();
let homeserver = PublicKey::try_from("{homeserver}")?;
client.signup(&keypair, &homeserver, None).await?;""",
    "signin": """client.signin(&keypair).await?;""",
    "put": """client.put("{url}").body(r#"{{"hello":"pubky"}}"#).send().await?;""",
    "get": """let response = client.get("{url}").send().await?;
let body = response.bytes().await?;""",
    "list": """let urls = client.list("{url}")?.send().await?;""",
    "delete": """client.delete("{url}").send().await?;""",
}


def generate_code_example(arguments: Dict[str, Any], resolver: ContentResolver) -> str:
    """Produce a client snippet for a homeserver operation."""
    language = arguments["language"]
    operation = arguments["operation"]
    examples = _JS_EXAMPLES if language == "javascript" else _RUST_EXAMPLES
    snippet = examples[operation].format(
        homeserver=arguments.get("homeserver", "<homeserver-public-key>"),
        url=arguments.get("url", "pubky://<public-key>/pub/example.com/data.json"),
    )
    fence = "javascript" if language == "javascript" else "rust"
    return f"```{fence}\n{snippet}\n```"
