"""
Rendering of fetched content into the final aggregated text: prefix, per-resource
header and footer, optional whitespace collapsing, and a tree view of local files.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from thisismy.console import CONTENT_STYLE, HEADER_STYLE, PREFIX_STYLE, TITLE_STYLE, TREE_STYLE, styled
from thisismy.errors import FetchError
from thisismy.fetch import Fetcher
from thisismy.resolver.types import ResolvedResource

log = logging.getLogger(__name__)

TREE_TITLE = "\n--- Tree View of Processed Files ---\n"

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class RenderOptions:
    prefix: str = ""
    tiny: bool = False
    tree: bool = False
    silent: bool = False


def load_prefix(prefix: str | None) -> str:
    """A prefix naming an existing file is replaced by that file's content."""
    if not prefix:
        return ""
    path = Path(prefix)
    try:
        if path.is_file():
            return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.warning("Could not read prefix file %s: %s", prefix, e)
    return prefix


def format_timestamp(now: datetime) -> str:
    return now.strftime("%d.%m.%Y %H:%M:%S")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _resource_parts(
    content: str,
    resource: ResolvedResource,
    options: RenderOptions,
    now: datetime | None = None,
) -> tuple[str, str, str, str]:
    stamp = format_timestamp(now or datetime.now())
    owner = "current" if resource.is_url else "my current"
    header = f"\n\nThis is the {owner} {resource.identifier} at {stamp}\n\n"
    footer = f"\n\nThis is the end of {resource.identifier}\n\n"
    if options.tiny:
        content = collapse_whitespace(content)
    return options.prefix, header, content, footer


def render_resource(
    content: str,
    resource: ResolvedResource,
    options: RenderOptions,
    now: datetime | None = None,
) -> str:
    """Wrap one resource's content in its prefix, header and footer."""
    return "".join(_resource_parts(content, resource, options, now))


def _build_tree(paths: Sequence[str]) -> dict[str, dict]:
    root: dict[str, dict] = {}
    for path in paths:
        node = root
        for part in Path(path).parts:
            node = node.setdefault(part, {})
    return root


def _tree_lines(node: dict[str, dict], prefix: str, out: list[str]) -> None:
    keys = sorted(node)
    for index, key in enumerate(keys):
        last = index == len(keys) - 1
        out.append(f"{prefix}{'└── ' if last else '├── '}{key}")
        _tree_lines(node[key], prefix + ("    " if last else "│   "), out)


def _tree_body(resources: Sequence[ResolvedResource], root: Path | None) -> str:
    base = root if root is not None else Path.cwd()
    paths = [os.path.abspath(base / r.identifier) for r in resources if not r.is_url]
    lines: list[str] = []
    _tree_lines(_build_tree(paths), "", lines)
    return "".join(f"{line}\n" for line in lines) + "\n"


def render_tree(resources: Sequence[ResolvedResource], root: Path | None = None) -> str:
    """Tree view of the local resources (absolute paths). URLs are left out."""
    return TREE_TITLE + _tree_body(resources, root)


def aggregate(
    resources: Sequence[ResolvedResource],
    fetcher: Fetcher,
    options: RenderOptions,
    echo: Callable[[Any], None] = print,
    root: Path | None = None,
) -> str:
    """
    Fetch and render every resource in order and join the results. Resources
    that fail to fetch contribute empty content. Each block (and the tree, if
    requested) is echoed as styled text unless silent.
    """
    blocks: list[str] = []
    for resource in resources:
        try:
            content = fetcher.fetch(resource.identifier)
        except FetchError as e:
            log.warning("%s", e)
            content = ""
        prefix, header, body, footer = _resource_parts(content, resource, options)
        blocks.append(prefix + header + body + footer)
        if not options.silent:
            echo(
                styled(
                    (prefix, PREFIX_STYLE),
                    (header, HEADER_STYLE),
                    (body, CONTENT_STYLE),
                    (footer, HEADER_STYLE),
                )
            )

    output = "".join(blocks)
    if options.tree:
        tree = _tree_body(resources, root)
        output += TREE_TITLE + tree
        if not options.silent:
            echo(styled((TREE_TITLE, TITLE_STYLE), (tree, TREE_STYLE)))
    return output
