"""
Resource resolution: turns user tokens (paths, glob patterns, URLs) into a
deduplicated, filtered, ordered list of resources.

Usage::

    from thisismy.resolver import ResolverConfig, ResourceSelector

    config = ResolverConfig(recursive=True, max_size=100_000)
    selection = ResourceSelector(config).select(["*.py", "https://example.com"])
    for resource in selection.resources:
        print(resource.identifier)
"""

from thisismy.resolver.defaults import DEFAULT_BINARY_EXTENSIONS, IGNORE_FILENAMES
from thisismy.resolver.expander import PatternExpander, rewrite_recursive
from thisismy.resolver.ignore import IgnorePolicy, load_repo_ignore
from thisismy.resolver.selector import ResourceSelector, select_resources
from thisismy.resolver.types import (
    DEFAULT_MAX_SIZE,
    IgnoreRuleSet,
    ResolvedResource,
    ResolverConfig,
    ResourceKind,
    RuleSource,
    Selection,
    is_url,
)

__all__ = [
    "DEFAULT_BINARY_EXTENSIONS",
    "DEFAULT_MAX_SIZE",
    "IGNORE_FILENAMES",
    "IgnorePolicy",
    "IgnoreRuleSet",
    "PatternExpander",
    "ResolvedResource",
    "ResolverConfig",
    "ResourceKind",
    "ResourceSelector",
    "RuleSource",
    "Selection",
    "is_url",
    "load_repo_ignore",
    "rewrite_recursive",
    "select_resources",
]
