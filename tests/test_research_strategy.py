import asyncio
from pathlib import Path

import pytest
from mcp.server.fastmcp import FastMCP

import research_strategy
from research_strategy import (
    TODO_PREAMBLE,
    TODO_TRAILER,
    ResearchSession,
    default_step_text,
    get_research_strategy,
    lookup_step,
    point_directories_at,
)


def _step_count(research_type: str, depth: int) -> int:
    return len(research_strategy._STRATEGY_TABLE.get(research_type, {}).get(depth, {}))


def test_known_step_is_returned_verbatim() -> None:
    step = lookup_step("market", 1, 5)

    assert step.text == "Synthesize findings into executive summary with key insights and recommendations."
    assert (step.research_type, step.depth, step.step_number) == ("market", 1, 5)


def test_missing_step_falls_back_to_default_text() -> None:
    step = lookup_step("market", 2, 999)

    assert step.text.startswith("Market Research (medium) - Step 999: ")
    assert step.text.endswith("Continue with domain-specific investigation following established patterns.")


@pytest.mark.parametrize(
    ("depth", "label"),
    [(1, "shallow"), (2, "medium"), (3, "deep"), (7, "deep")],
)
def test_depth_labels_in_default_text(depth: int, label: str) -> None:
    assert f"Academia Research ({label}) - Step 50:" in default_step_text("academia", depth, 50)


def test_unknown_type_and_depth_never_fail() -> None:
    assert lookup_step("astrology", 9, 1).text.startswith("Astrology Research (deep) - Step 1:")


def test_every_dimension_has_dense_steps_at_every_depth() -> None:
    for research_type in research_strategy._STRATEGY_TABLE:
        for depth in (1, 2, 3):
            count = _step_count(research_type, depth)
            assert count > 0
            steps = research_strategy._STRATEGY_TABLE[research_type][depth]
            assert sorted(steps) == list(range(1, count + 1))


def test_directory_resolution_is_sticky() -> None:
    session = ResearchSession(default_directory=Path("/fallback"))

    first = session.resolve_directory("/a/b")
    second = session.resolve_directory(None)
    third = session.resolve_directory("/c/d")

    assert [first, second, third] == [Path("/a/b"), Path("/a/b"), Path("/c/d")]


def test_directory_defaults_before_any_override(tmp_path: Path) -> None:
    session = ResearchSession(default_directory=tmp_path / "research")

    assert session.resolve_directory() == tmp_path / "research"
    assert session.directory == tmp_path / "research"


def test_relative_directory_is_made_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    resolved = ResearchSession().resolve_directory("notes")

    assert resolved == tmp_path / "notes"


def test_directory_phrase_is_rewritten() -> None:
    text = "Infrastructure setup: Create risk-inventory, failure-modes directories in research folder. Next."

    rewritten = point_directories_at(text, Path("/work/r"))

    assert rewritten == "Infrastructure setup: Create these directories in /work/r: risk-inventory, failure-modes. Next."


def test_and_joined_directory_phrase_is_left_alone() -> None:
    text = lookup_step("persona", 3, 1).text

    assert point_directories_at(text, Path("/work/r")) == text
    assert "persona-findings and synthesis directories in research folder" in text


def test_get_research_strategy_wraps_step_in_todo_envelope(tmp_path: Path) -> None:
    session = ResearchSession()

    output = get_research_strategy(session, "risk", 3, 1, str(tmp_path))

    assert output.startswith(TODO_PREAMBLE + "Infrastructure setup: Create these directories in ")
    assert f"in {tmp_path}: risk-inventory, failure-modes, cascade-effects, mitigation-strategies." in output
    assert output.endswith("\n\n" + TODO_TRAILER)


def test_session_carries_directory_between_tool_calls(tmp_path: Path) -> None:
    session = ResearchSession()
    get_research_strategy(session, "market", 1, 1, str(tmp_path))

    output = get_research_strategy(session, "market", 3, 1)

    assert f"Create these directories in {tmp_path}: competitor-profiles" in output


def test_register_adds_strategy_tool() -> None:
    server = FastMCP("test")
    research_strategy.register(server, ResearchSession())

    tools = asyncio.run(server.list_tools())

    assert [tool.name for tool in tools] == ["get-research-strategy"]
    schema = tools[0].inputSchema
    assert schema["required"] == ["research_type", "depth", "step_number"]
    assert schema["properties"]["depth"]["maximum"] == 3
