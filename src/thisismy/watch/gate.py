"""
Confirmation gate: asks the operator whether to re-run after a change.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from enum import Enum

log = logging.getLogger(__name__)

AFFIRMATIVE_RESPONSES = frozenset({"y", "yes"})
EXIT_RESPONSES = frozenset({"x", "exit"})

PROMPT = "Do you want to re-run? [y = re-run / n = skip / x = exit]"


class Decision(Enum):
    rerun = "rerun"
    skip = "skip"
    exit = "exit"


def interpret_response(line: str | None) -> Decision:
    """Classify one line of operator input. `None` (end of input) counts as skip."""
    if line is None:
        return Decision.skip
    answer = line.strip().lower()
    if answer in AFFIRMATIVE_RESPONSES:
        return Decision.rerun
    if answer in EXIT_RESPONSES:
        return Decision.exit
    return Decision.skip


def _read_stdin_line() -> str | None:
    line = sys.stdin.readline()
    return line if line else None


class ConfirmationGate:
    """
    Prompts for one line of input per confirmation.

    `silent` only suppresses the prompt text; the read always happens, since
    answers may be piped in.
    """

    def __init__(
        self,
        read_line: Callable[[], str | None] = _read_stdin_line,
        write: Callable[[str], None] = print,
        silent: bool = False,
    ) -> None:
        self._read_line: Callable[[], str | None] = read_line
        self._write: Callable[[str], None] = write
        self.silent: bool = silent

    def confirm(self, changed: Sequence[str]) -> Decision:
        if not changed:
            return Decision.skip

        if not self.silent:
            lines = ["", "These resources were changed:"]
            lines.extend(f"  {identifier}" for identifier in changed)
            lines.append(PROMPT)
            self._write("\n".join(lines))

        line = self._read_line()
        if line is None:
            log.debug("End of input while waiting for confirmation")
        decision = interpret_response(line)
        log.debug("Confirmation for %d resource(s): %s", len(changed), decision.value)
        return decision
