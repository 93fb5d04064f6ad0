"""
MCP Prompt Endpoint Handlers

Handles prompt listing and retrieval for MCP protocol.
Exposes prompts: interactive guides for building on Pubky
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from ..errors import NotFoundError, ValidationError
from ..models import (
    PromptArgument,
    PromptDefinition,
    PromptGetResponse,
    PromptMessage,
    TextContent,
)

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class PromptEntry:
    """Prompt descriptor plus its message template."""
    name: str
    description: str
    template: str
    arguments: List[PromptArgument] = field(default_factory=list)

    def definition(self) -> PromptDefinition:
        return PromptDefinition(name=self.name, description=self.description, arguments=self.arguments)

    def render(self, arguments: Mapping[str, str]) -> str:
        # Single pass so substituted values are never re-expanded
        declared = {arg.name for arg in self.arguments}
        return _PLACEHOLDER.sub(
            lambda m: str(arguments.get(m.group(1), "")) if m.group(1) in declared else m.group(0),
            self.template,
        )


# Prompt catalog
DEFAULT_PROMPTS: List[PromptEntry] = [
    PromptEntry(
        name="explain_concept",
        description="Explain a Pubky concept using the bundled documentation",
        arguments=[
            PromptArgument(name="topic", description="Concept to explain (e.g., 'homeserver', 'pkarr')"),
            PromptArgument(name="depth", description="'overview' or 'deep-dive'", required=False),
        ],
        template=(
            "Explain the Pubky concept \"{topic}\".\n\n"
            "Requested depth: {depth}\n\n"
            "Ground the explanation in the bundled resources (doc://core/readme, doc://pkarr/readme, "
            "doc://nexus/readme). Cover what {topic} is, which layer of the stack it belongs to "
            "(Pkarr discovery, Pubky Core storage, app specs, Nexus indexing) and how an application "
            "interacts with it."
        ),
    ),
    PromptEntry(
        name="build_app",
        description="Plan a new application on top of Pubky",
        arguments=[
            PromptArgument(name="app_type", description="Kind of application (e.g., 'bookmarks', 'social feed')"),
            PromptArgument(name="features", description="Comma-separated feature list", required=False),
        ],
        template=(
            "I want to build a {app_type} application on Pubky.\n\n"
            "Features: {features}\n\n"
            "Walk me through: resolving the user's homeserver with Pkarr, signing up and signing in, "
            "the /pub/<app>/ data layout to write, and reading aggregated data back through the Nexus API. "
            "Use generate_code_example for client snippets."
        ),
    ),
    PromptEntry(
        name="debug_issue",
        description="Diagnose an error from a Pubky client, homeserver or Nexus",
        arguments=[
            PromptArgument(name="error", description="Error message or symptom"),
            PromptArgument(name="context", description="What was being attempted", required=False),
        ],
        template=(
            "I hit this error while working with Pubky:\n\n{error}\n\n"
            "Context: {context}\n\n"
            "Identify which layer is failing (DNS/Pkarr resolution, homeserver session, storage path, "
            "Nexus indexing), list the likely causes and the checks that tell them apart."
        ),
    ),
    PromptEntry(
        name="review_integration",
        description="Review client code that talks to a homeserver",
        arguments=[
            PromptArgument(name="code", description="Code to review"),
            PromptArgument(name="layer", description="Stack layer the code targets", required=False),
        ],
        template=(
            "Review this Pubky integration code ({layer}):\n\n{code}\n\n"
            "Check session handling, pubky:// URL construction, error handling on network calls and "
            "whether writes stay inside the app's /pub/ namespace."
        ),
    ),
]


class PromptRegistry:
    """Static prompt catalog with deterministic template rendering."""

    def __init__(self, prompts: Iterable[PromptEntry] = DEFAULT_PROMPTS):
        self._prompts: Dict[str, PromptEntry] = {}
        for prompt in prompts:
            if prompt.name in self._prompts:
                raise ValueError(f"Duplicate prompt name: {prompt.name}")
            self._prompts[prompt.name] = prompt

    def list(self) -> List[PromptDefinition]:
        """List all available prompts."""
        return [prompt.definition() for prompt in self._prompts.values()]

    def get(self, name: str, arguments: Optional[Mapping[str, str]] = None) -> PromptGetResponse:
        """
        Render a prompt template with arguments substituted.

        Unknown argument names are ignored; optional arguments default to
        an empty string.

        Args:
            name: Prompt name
            arguments: Prompt arguments

        Returns:
            PromptGetResponse with the rendered messages

        Raises:
            NotFoundError: If prompt name is not found
            ValidationError: If a required argument is missing
        """
        prompt = self._prompts.get(name)
        if prompt is None:
            raise NotFoundError(f"Prompt '{name}' not found. Available prompts: {list(self._prompts)}")

        arguments = arguments or {}
        missing = [
            arg.name for arg in prompt.arguments
            if arg.required and not arguments.get(arg.name)
        ]
        if missing:
            raise ValidationError(f"Missing required arguments for prompt '{name}': {', '.join(missing)}")

        text = prompt.render(arguments)
        return PromptGetResponse(
            description=prompt.description,
            messages=[PromptMessage(role="user", content=TextContent(text=text))],
        )
