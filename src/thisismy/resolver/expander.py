"""
Pattern expansion: turns one token into concrete file paths or a single URL.
"""

from __future__ import annotations

import glob
import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path

from thisismy.resolver.types import ResolverConfig, has_glob_chars, is_url

log = logging.getLogger(__name__)

RECURSIVE_MARKER = "**"


def rewrite_recursive(token: str) -> str:
    """
    Rewrite a pattern so it searches all subdirectories.

    `*.js` becomes `**/*.js` and `./*.js` becomes `./**/*.js` (never `**/./`).
    Absolute patterns get the marker before their last component, so the search
    stays under the named directory. Tokens that already contain `**` are
    returned unchanged.
    """
    if RECURSIVE_MARKER in token:
        return token
    if token.startswith("./"):
        return f"./{RECURSIVE_MARKER}/{token[2:]}"
    if os.path.isabs(token):
        head, tail = os.path.split(token)
        return os.path.join(head, RECURSIVE_MARKER, tail)
    return f"{RECURSIVE_MARKER}/{token}"


@dataclass(frozen=True)
class Expansion:
    """Outcome of expanding one token."""

    token: str
    paths: list[str] = field(default_factory=list)
    url: str | None = None
    exact: bool = False


class PatternExpander:
    """
    Expands tokens relative to `config.root`. Globs include dotfiles; dotfile
    exclusion is left to the ignore policy. Only regular files survive.
    """

    def __init__(self, config: ResolverConfig) -> None:
        self._config: ResolverConfig = config

    @property
    def root(self) -> Path:
        return self._config.root

    def is_exact_reference(self, token: str, token_count: int) -> bool:
        """A lone, wildcard-free, non-URL token with recursion off names one exact file."""
        return (
            token_count == 1
            and not is_url(token)
            and not has_glob_chars(token)
            and not self._config.recursive
        )

    def expand(self, token: str, exact: bool = False) -> Expansion:
        if is_url(token):
            return Expansion(token=token, url=token)

        if exact:
            path = self._existing_file(token)
            return Expansion(token=token, paths=[path] if path else [], exact=True)

        pattern = rewrite_recursive(token) if self._config.recursive else token
        if pattern != token:
            log.debug("Recursive search: %r -> %r", token, pattern)

        try:
            matches = glob.glob(
                pattern, root_dir=self.root, recursive=True, include_hidden=True
            )
        except (OSError, ValueError) as e:
            log.warning("Could not expand pattern %r: %s", token, e)
            return Expansion(token=token)

        if not matches:
            log.debug("No matches for pattern %r", token)

        paths: list[str] = []
        for match in sorted(matches):
            path = self._existing_file(match)
            if path is not None:
                paths.append(path)
        return Expansion(token=token, paths=paths)

    def normalize(self, path: str) -> str:
        """Normalize a matched path to a string relative to the root."""
        if os.path.isabs(path):
            return os.path.relpath(path, self.root)
        return os.path.normpath(path)

    def _existing_file(self, path: str) -> str | None:
        """Return the normalized path if it names a regular file, otherwise `None`."""
        full = Path(path) if os.path.isabs(path) else self.root / path
        try:
            st = full.stat()
        except OSError as e:
            log.debug("Skipping %s: %s", path, e)
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        return self.normalize(path)
