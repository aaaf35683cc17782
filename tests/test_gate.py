"""Tests for the confirmation gate."""

from __future__ import annotations

import pytest

from thisismy.watch import ConfirmationGate, Decision, interpret_response


class _Script:
    """Scripted operator input; records how many lines were read."""

    def __init__(self, *lines: str | None) -> None:
        self.lines = list(lines)
        self.reads = 0

    def __call__(self) -> str | None:
        self.reads += 1
        return self.lines.pop(0)


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("y\n", Decision.rerun),
        ("Y", Decision.rerun),
        ("yes", Decision.rerun),
        ("  YES \n", Decision.rerun),
        ("x\n", Decision.exit),
        ("X", Decision.exit),
        ("exit", Decision.exit),
        ("n", Decision.skip),
        ("", Decision.skip),
        ("maybe", Decision.skip),
        (None, Decision.skip),
    ],
)
def test_interpret_response(line: str | None, expected: Decision):
    assert interpret_response(line) is expected


def test_empty_change_list_skips_without_prompting():
    script = _Script()
    written: list[str] = []
    gate = ConfirmationGate(read_line=script, write=written.append)
    assert gate.confirm([]) is Decision.skip
    assert script.reads == 0
    assert written == []


def test_prompt_lists_changed_resources():
    written: list[str] = []
    gate = ConfirmationGate(read_line=_Script("y"), write=written.append)
    assert gate.confirm(["a.txt", "https://example.com"]) is Decision.rerun
    assert len(written) == 1
    assert "a.txt" in written[0]
    assert "https://example.com" in written[0]
    assert "[y" in written[0]


def test_silent_mode_still_reads_input():
    script = _Script("x")
    written: list[str] = []
    gate = ConfirmationGate(read_line=script, write=written.append, silent=True)
    assert gate.confirm(["a.txt"]) is Decision.exit
    assert script.reads == 1
    assert written == []


def test_end_of_input_skips():
    gate = ConfirmationGate(read_line=_Script(None), write=lambda _: None)
    assert gate.confirm(["a.txt"]) is Decision.skip


def test_one_read_per_confirmation():
    script = _Script("n", "y", "x")
    gate = ConfirmationGate(read_line=script, write=lambda _: None)
    decisions = [gate.confirm([f"{i}.txt"]) for i in range(3)]
    assert decisions == [Decision.skip, Decision.rerun, Decision.exit]
    assert script.reads == 3
