"""Tests for chat message assembly."""

from __future__ import annotations

import pytest

from copilot_providers.base.models import ChatMessage
from copilot_providers.chat import CodeSelection, StaticWorkspaceContext, build_chat_messages
from copilot_providers.chat.request_build import build_chat_request


def _history(n):
    out = []
    for i in range(n):
        out.append(ChatMessage("user", f"q{i}"))
        out.append(ChatMessage("assistant", f"a{i}"))
    return out


def test_minimal_turn_has_system_and_user():
    messages = build_chat_messages("explain this")

    assert [m.role for m in messages] == ["system", "user"]
    assert messages[0].content == (
        "You are Copilot, a code assistant in your editor.\n"
        "- Be concise and accurate\n"
        "- Use markdown code blocks with language tags\n"
        "- When suggesting code, make it ready to insert\n"
        "- Command: general chat"
    )
    assert messages[1].content == "User: explain this"


def test_command_and_assistant_name_in_system_prompt():
    (system, _) = build_chat_messages("x", command="fix", assistant_name="Helper")
    assert system.content.startswith("You are Helper,")
    assert system.content.endswith("- Command: fix")


def test_history_is_truncated_to_most_recent_turns():
    history = [ChatMessage("system", "old persona")] + _history(4)
    messages = build_chat_messages("next", history=history, max_history=3)

    assert [m.content for m in messages[1:-1]] == ["a2", "q3", "a3"]
    assert all(m.role != "system" for m in messages[1:])


@pytest.mark.parametrize("max_history", [0, -1])
def test_non_positive_history_limit_sends_no_history(max_history):
    messages = build_chat_messages("next", history=_history(2), max_history=max_history)
    assert [m.role for m in messages] == ["system", "user"]


def test_context_sections_precede_prompt():
    messages = build_chat_messages(
        "what does this do?",
        selection=CodeSelection("print(1)", "python"),
        file_context="import os",
        workspace_tree="src/\n  app.py",
    )
    assert messages[-1].content == (
        "## Selected Code (python):\n```python\nprint(1)\n```\n\n"
        "## File Context:\nimport os\n\n"
        "## Workspace Structure:\nsrc/\n  app.py\n\n"
        "User: what does this do?"
    )


def test_empty_selection_is_omitted():
    messages = build_chat_messages("hi", selection=CodeSelection("", "python"))
    assert messages[-1].content == "User: hi"


def test_chat_request_is_streamed():
    request = build_chat_request(build_chat_messages("hi"), max_tokens=100, temperature=0.3)
    payload = request.to_payload("m")
    assert payload["stream"] is True
    assert payload["messages"][-1] == {"role": "user", "content": "User: hi"}


@pytest.mark.anyio
async def test_static_workspace_reads_files_with_limits(tmp_path):
    (tmp_path / "small.py").write_text("\n".join(f"l{i}" for i in range(80)), encoding="utf-8")
    (tmp_path / "big.txt").write_text("x" * (31 * 1024), encoding="utf-8")
    workspace = StaticWorkspaceContext({"inline.py": "a\nb"}, tree="src/", root=str(tmp_path))

    small = await workspace.get_file_context("small.py")
    assert small.splitlines() == [f"l{i}" for i in range(50)]
    assert (await workspace.get_file_context("big.txt")).startswith("// File too large: big.txt (31.0KB)")
    assert (await workspace.get_file_context("missing.py")).startswith("// File not found or inaccessible: missing.py")
    assert await workspace.get_file_context("inline.py") == "a\nb"
    assert await workspace.get_workspace_tree() == "src/"


def test_invalid_role_is_rejected():
    with pytest.raises(ValueError):
        ChatMessage("tool", "x")
