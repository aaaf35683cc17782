"""Configuration and result types for resource resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from thisismy.resolver.defaults import (
    DEFAULT_BINARY_EXTENSIONS,
    DEPENDENCY_IGNORES,
    DOTFILE_IGNORES,
    extension_patterns,
)

# Token prefixes that mark a remote resource.
URL_SCHEMES: tuple[str, ...] = ("http://", "https://")

# Characters that indicate a token is a glob pattern rather than a literal path.
GLOB_CHARS = frozenset("*?[")

DEFAULT_MAX_SIZE = 1_048_576  # 1 MiB


def is_url(token: str) -> bool:
    return token.lower().startswith(URL_SCHEMES)


def has_glob_chars(token: str) -> bool:
    return any(c in token for c in GLOB_CHARS)


@dataclass
class ResolverConfig:
    """
    Options shared by the ignore policy, the pattern expander and the selector.

    Built once per run and passed explicitly. `max_size=None` disables the size
    ceiling; `max_size=0` excludes every non-empty file. `greedy` turns off all
    ignore filtering. `force_filter` applies ignore rules even to an exact reference.
    `binary_extensions` replaces the default extension table; `extend_ignore` adds
    gitignore-style patterns on top of the defaults.
    """

    root: Path = field(default_factory=Path.cwd)
    recursive: bool = False
    greedy: bool = False
    force_filter: bool = False
    use_defaults: bool = True
    max_size: int | None = DEFAULT_MAX_SIZE
    binary_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_BINARY_EXTENSIONS))
    extend_ignore: list[str] = field(default_factory=list)

    @property
    def default_ignores(self) -> list[str]:
        """Default rules: dotfiles, dependency dirs, binary extensions, then `extend_ignore`."""
        return (
            list(DOTFILE_IGNORES)
            + list(DEPENDENCY_IGNORES)
            + extension_patterns(self.binary_extensions)
            + self.extend_ignore
        )


class RuleSource(Enum):
    """Where a set of ignore rules came from."""

    default = "default"
    thisismyignore_file = "thisismyignore-file"
    gitignore_file = "gitignore-file"


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ordered gitignore-style rules plus their provenance."""

    source: RuleSource
    rules: tuple[str, ...]
    path: Path | None = None

    def __len__(self) -> int:
        return len(self.rules)


class ResourceKind(Enum):
    file = "file"
    url = "url"


@dataclass(frozen=True, order=True)
class ResolvedResource:
    """
    A concrete unit of content: a regular file (path relative to the working
    directory) or a URL passed through unchanged.
    """

    identifier: str
    kind: ResourceKind = field(compare=False)

    @property
    def is_url(self) -> bool:
        return self.kind is ResourceKind.url

    def __str__(self) -> str:
        return self.identifier


@dataclass
class Selection:
    """Result of resource selection, plus what was filtered out and why."""

    resources: list[ResolvedResource] = field(default_factory=list)
    ignored_by_rule: list[str] = field(default_factory=list)
    ignored_by_size: list[tuple[str, int]] = field(default_factory=list)
    directories_touched: list[str] = field(default_factory=list)

    @property
    def identifiers(self) -> list[str]:
        return [r.identifier for r in self.resources]

    @property
    def urls(self) -> list[ResolvedResource]:
        return [r for r in self.resources if r.is_url]

    @property
    def files(self) -> list[ResolvedResource]:
        return [r for r in self.resources if not r.is_url]

    def __bool__(self) -> bool:
        return bool(self.resources)
