"""
Tests for the prompt registry
"""

import pytest

from pubky_mcp.errors import NotFoundError, ValidationError
from pubky_mcp.handlers.prompts import PromptEntry, PromptRegistry
from pubky_mcp.models import PromptArgument


def test_list_prompts():
    prompts = {p.name: p for p in PromptRegistry().list()}
    assert {"explain_concept", "build_app", "debug_issue", "review_integration"} <= set(prompts)
    args = {a.name: a.required for a in prompts["explain_concept"].arguments}
    assert args == {"topic": True, "depth": False}


def test_missing_required_argument_raises():
    with pytest.raises(ValidationError, match="topic"):
        PromptRegistry().get("explain_concept", {})


def test_unknown_prompt_raises():
    with pytest.raises(NotFoundError, match="nonexistent_prompt"):
        PromptRegistry().get("nonexistent_prompt", {"topic": "x"})


def test_render_is_deterministic():
    registry = PromptRegistry()
    first = registry.get("explain_concept", {"topic": "homeserver"})
    second = registry.get("explain_concept", {"topic": "homeserver"})
    assert first == second
    assert len(first.messages) == 1
    message = first.messages[0]
    assert message.role == "user"
    assert 'Explain the Pubky concept "homeserver"' in message.content.text
    # Optional argument left out renders empty
    assert "{depth}" not in message.content.text


def test_unknown_arguments_are_ignored():
    registry = PromptRegistry()
    plain = registry.get("explain_concept", {"topic": "pkarr"})
    extra = registry.get("explain_concept", {"topic": "pkarr", "colour": "blue"})
    assert plain == extra


def test_substituted_values_are_not_re_expanded():
    entry = PromptEntry(
        name="echo",
        description="Echo",
        template="{a}|{b}|{undeclared}",
        arguments=[PromptArgument(name="a"), PromptArgument(name="b", required=False)],
    )
    response = PromptRegistry([entry]).get("echo", {"a": "{b}", "b": "B"})
    assert response.messages[0].content.text == "{b}|B|{undeclared}"
