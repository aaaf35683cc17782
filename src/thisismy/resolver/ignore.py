"""
Ignore policy: default rules, repository ignore file, and greedy override,
combined into one gitignore-semantics predicate using pathspec.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePath

import pathspec

from thisismy.resolver.defaults import IGNORE_FILENAMES
from thisismy.resolver.types import IgnoreRuleSet, ResolverConfig, RuleSource

log = logging.getLogger(__name__)

_SOURCES_BY_FILENAME: dict[str, RuleSource] = {
    ".thisismyignore": RuleSource.thisismyignore_file,
    ".gitignore": RuleSource.gitignore_file,
}


def _clean_lines(lines: Iterable[str]) -> list[str]:
    return [line.rstrip("\r") for line in lines if line.strip() and not line.strip().startswith("#")]


def _read_ignore_file(path: Path) -> list[str] | None:
    """
    Read an ignore file and return its meaningful lines, or `None` if the file
    is missing, unreadable, or not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if path.exists():
            log.warning("Could not read ignore file %s: %s", path, e)
        return None
    return _clean_lines(text.splitlines())


def load_repo_ignore(root: Path) -> IgnoreRuleSet | None:
    """
    Look for `.thisismyignore`, then `.gitignore`, in `root`. The first file
    found wins, even if it turns out to be empty. Returns `None` if neither exists.
    """
    for filename in IGNORE_FILENAMES:
        candidate = root / filename
        if not candidate.is_file():
            continue
        lines = _read_ignore_file(candidate)
        if lines is None:
            continue
        log.debug("Using ignore file %s (%d rules)", candidate, len(lines))
        return IgnoreRuleSet(
            source=_SOURCES_BY_FILENAME.get(filename, RuleSource.gitignore_file),
            rules=tuple(lines),
            path=candidate,
        )
    return None


def _match_key(path: str | PurePath) -> str:
    """
    Normalize a path for matching: POSIX separators, with leading `.` and `..`
    components dropped so that paths outside the root aren't taken for dotfiles.
    """
    parts = list(PurePath(path).parts)
    if parts and PurePath(path).is_absolute():
        parts = parts[1:]
    while parts and parts[0] in (".", ".."):
        parts.pop(0)
    return "/".join(parts)


class IgnorePolicy:
    """
    Combined exclusion predicate. Rule sets are evaluated in order, so a negated
    (`!pattern`) rule in a later set can re-include a path excluded by an earlier one.
    A greedy policy never ignores anything.
    """

    def __init__(self, rule_sets: Sequence[IgnoreRuleSet] = (), greedy: bool = False) -> None:
        self.rule_sets: tuple[IgnoreRuleSet, ...] = tuple(rule_sets)
        self.greedy: bool = greedy
        lines = [rule for rule_set in self.rule_sets for rule in rule_set.rules]
        self._spec: pathspec.GitIgnoreSpec = pathspec.GitIgnoreSpec.from_lines(lines)

    @classmethod
    def build(
        cls,
        use_defaults: bool,
        repo_ignore_text: str | None = None,
        greedy: bool = False,
        default_rules: Sequence[str] | None = None,
        repo_source: RuleSource = RuleSource.thisismyignore_file,
    ) -> IgnorePolicy:
        """
        Build a policy from explicit inputs. `default_rules=None` uses the
        defaults of a plain `ResolverConfig`.
        """
        rule_sets: list[IgnoreRuleSet] = []
        if use_defaults:
            if default_rules is None:
                default_rules = ResolverConfig().default_ignores
            rule_sets.append(IgnoreRuleSet(RuleSource.default, tuple(default_rules)))
        if repo_ignore_text is not None:
            rules = tuple(_clean_lines(repo_ignore_text.splitlines()))
            rule_sets.append(IgnoreRuleSet(repo_source, rules))
        return cls(rule_sets, greedy=greedy)

    @classmethod
    def for_config(cls, config: ResolverConfig) -> IgnorePolicy:
        """Build the policy for a run: defaults plus the repository ignore file under `config.root`."""
        if config.greedy:
            return cls(greedy=True)
        rule_sets: list[IgnoreRuleSet] = []
        if config.use_defaults:
            rule_sets.append(IgnoreRuleSet(RuleSource.default, tuple(config.default_ignores)))
        repo_rules = load_repo_ignore(config.root)
        if repo_rules is not None:
            rule_sets.append(repo_rules)
        return cls(rule_sets)

    @property
    def sources(self) -> list[RuleSource]:
        return [rule_set.source for rule_set in self.rule_sets]

    def is_ignored(self, path: str | PurePath) -> bool:
        """True if `path` (relative to the root) is excluded by the combined rules."""
        if self.greedy:
            return False
        key = _match_key(path)
        if not key:
            return False
        return self._spec.match_file(key)

    def is_ignored_dir(self, path: str | PurePath) -> bool:
        """Like `is_ignored`, for a directory, so `name/` rules apply."""
        if self.greedy:
            return False
        key = _match_key(path)
        if not key:
            return False
        return self._spec.match_file(f"{key}/")

    __call__ = is_ignored

    def __repr__(self) -> str:
        sources = ", ".join(f"{s.source.value}:{len(s)}" for s in self.rule_sets)
        return f"IgnorePolicy(greedy={self.greedy}, rule_sets=[{sources}])"
