"""
ResourceSelector: main entry point for resource resolution.

Resolves a mix of URLs, exact paths and glob patterns into a deduplicated,
ordered list of resources, applying the ignore policy and size ceiling and
recording everything that was filtered out.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import PurePath

from thisismy.errors import ResolutionError
from thisismy.resolver.expander import PatternExpander
from thisismy.resolver.ignore import IgnorePolicy
from thisismy.resolver.types import (
    ResolvedResource,
    ResolverConfig,
    ResourceKind,
    Selection,
    is_url,
)

log = logging.getLogger(__name__)


class ResourceSelector:
    """
    Combines pattern expansion, the ignore policy and the size ceiling into one
    decision per resource.

    Two conditions independently bypass ignore rules: greedy mode, and an exact
    reference (a single wildcard-free token) when `force_filter` is off. Nothing
    bypasses the size ceiling except URLs, which are never filtered at all.
    """

    def __init__(self, config: ResolverConfig, policy: IgnorePolicy | None = None) -> None:
        self._config: ResolverConfig = config
        self._expander: PatternExpander = PatternExpander(config)
        self._policy: IgnorePolicy = policy if policy is not None else IgnorePolicy.for_config(config)

    @property
    def policy(self) -> IgnorePolicy:
        return self._policy

    def select(self, tokens: Sequence[str]) -> Selection:
        self._check_root()
        selection = Selection()

        urls: list[str] = []
        matched: dict[str, bool] = {}  # path -> came from an exact reference
        for token in tokens:
            if is_url(token):
                if token not in urls:
                    urls.append(token)
                continue
            exact = self._expander.is_exact_reference(token, len(tokens))
            expansion = self._expander.expand(token, exact=exact)
            for path in expansion.paths:
                matched[path] = matched.get(path, False) or expansion.exact

        kept: list[str] = []
        for path in sorted(matched):
            bypass = self._config.greedy or (matched[path] and not self._config.force_filter)
            if not bypass and self._policy.is_ignored(path):
                selection.ignored_by_rule.append(path)
                continue
            kept.append(path)

        if self._config.max_size is not None:
            kept = self._apply_size_ceiling(kept, self._config.max_size, selection)

        selection.resources = [ResolvedResource(url, ResourceKind.url) for url in urls] + [
            ResolvedResource(path, ResourceKind.file) for path in kept
        ]
        selection.directories_touched = sorted({os.path.dirname(path) or "." for path in kept})

        log.debug(
            "Selected %d resource(s); %d ignored by rule, %d ignored by size",
            len(selection.resources),
            len(selection.ignored_by_rule),
            len(selection.ignored_by_size),
        )
        return selection

    def subdirectories(self) -> list[str]:
        """
        Directories under the root that the ignore policy keeps, as sorted POSIX
        paths ending in `/`. Ignored directories are not descended into.
        """
        root = self._config.root
        found: list[str] = []
        for current, dirnames, _filenames in os.walk(root):
            base = PurePath(os.path.relpath(current, root))
            kept: list[str] = []
            for name in sorted(dirnames):
                rel = (base / name).as_posix()
                if self._policy.is_ignored_dir(rel):
                    continue
                kept.append(name)
                found.append(f"{rel}/")
            dirnames[:] = kept
        return sorted(found)

    def _apply_size_ceiling(self, paths: list[str], max_size: int, selection: Selection) -> list[str]:
        """Drop files strictly larger than `max_size` bytes."""
        result: list[str] = []
        for path in paths:
            try:
                size = (self._config.root / path).stat().st_size
            except OSError as e:
                log.debug("Skipping %s: %s", path, e)
                continue
            if size > max_size:
                selection.ignored_by_size.append((path, size))
            else:
                result.append(path)
        return result

    def _check_root(self) -> None:
        try:
            os.listdir(self._config.root)
        except OSError as e:
            raise ResolutionError(f"Cannot read working directory {self._config.root}: {e}") from e


def select_resources(tokens: Sequence[str], config: ResolverConfig) -> Selection:
    """Convenience wrapper: build a selector for `config` and resolve `tokens`."""
    return ResourceSelector(config).select(tokens)
