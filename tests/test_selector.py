"""Tests for resource selection."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from thisismy.errors import ResolutionError
from thisismy.resolver import (
    IgnorePolicy,
    ResolverConfig,
    ResourceKind,
    ResourceSelector,
    select_resources,
)


def _touch(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def test_exact_reference_bypasses_ignore_rules(tmp_path: Path):
    _touch(tmp_path / "README.md", "# Hello")
    (tmp_path / ".gitignore").write_text("*.md\n")

    selection = select_resources(["README.md"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == ["README.md"]
    assert selection.ignored_by_rule == []


def test_exact_reference_does_not_bypass_size_ceiling(tmp_path: Path):
    _touch(tmp_path / "README.md", "x" * 2048)
    (tmp_path / ".gitignore").write_text("*.md\n")

    selection = select_resources(["README.md"], ResolverConfig(root=tmp_path, max_size=1024))
    assert selection.identifiers == []
    assert selection.ignored_by_size == [("README.md", 2048)]


def test_exact_reference_filtered_when_forced(tmp_path: Path):
    _touch(tmp_path / "README.md")
    (tmp_path / ".gitignore").write_text("*.md\n")

    selection = select_resources(["README.md"], ResolverConfig(root=tmp_path, force_filter=True))
    assert selection.identifiers == []
    assert selection.ignored_by_rule == ["README.md"]


def test_exact_reference_to_dotfile(tmp_path: Path):
    _touch(tmp_path / ".env", "SECRET=1")
    selection = select_resources([".env"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == [".env"]


def test_sibling_tokens_are_filtered(tmp_path: Path):
    _touch(tmp_path / "README.md")
    _touch(tmp_path / "notes.txt")
    (tmp_path / ".gitignore").write_text("*.md\n")

    selection = select_resources(["README.md", "notes.txt"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == ["notes.txt"]
    assert selection.ignored_by_rule == ["README.md"]


def test_deduplication(tmp_path: Path):
    _touch(tmp_path / "a.txt")
    selection = select_resources(["a.txt", "a.txt", "*.txt"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == ["a.txt"]


def test_deduplication_across_path_spellings(tmp_path: Path):
    _touch(tmp_path / "src" / "a.py")
    selection = select_resources(
        ["src/a.py", "./src/a.py", str(tmp_path / "src" / "a.py")], ResolverConfig(root=tmp_path)
    )
    assert selection.identifiers == [os.path.join("src", "a.py")]


def test_negation_in_ignore_file(tmp_path: Path):
    _touch(tmp_path / "debug.log")
    _touch(tmp_path / "important.log")
    (tmp_path / ".gitignore").write_text("*.log\n!important.log\n")

    selection = select_resources(["*.log"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == ["important.log"]
    assert selection.ignored_by_rule == ["debug.log"]


def test_urls_first_then_sorted_paths(tmp_path: Path):
    for name in ["c.txt", "a.txt", "b.txt"]:
        _touch(tmp_path / name)

    selection = select_resources(
        ["c.txt", "https://b.example.com", "*.txt", "http://a.example.com", "https://b.example.com"],
        ResolverConfig(root=tmp_path),
    )
    assert selection.identifiers == [
        "https://b.example.com",
        "http://a.example.com",
        "a.txt",
        "b.txt",
        "c.txt",
    ]
    assert [r.kind for r in selection.resources[:2]] == [ResourceKind.url, ResourceKind.url]
    assert [r.identifier for r in selection.urls] == ["https://b.example.com", "http://a.example.com"]
    assert len(selection.files) == 3


def test_urls_never_filtered(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*\n")
    selection = select_resources(
        ["https://example.com/logo.png"], ResolverConfig(root=tmp_path, max_size=0)
    )
    assert selection.identifiers == ["https://example.com/logo.png"]


def test_url_scheme_must_be_complete(tmp_path: Path):
    _touch(tmp_path / "httpd.conf")
    selection = select_resources(["httpd.conf"], ResolverConfig(root=tmp_path))
    assert selection.files[0].identifier == "httpd.conf"


def test_size_ceiling_is_inclusive(tmp_path: Path):
    _touch(tmp_path / "exact.txt", "x" * 100)
    _touch(tmp_path / "over.txt", "x" * 101)

    selection = select_resources(["*.txt"], ResolverConfig(root=tmp_path, max_size=100))
    assert selection.identifiers == ["exact.txt"]
    assert selection.ignored_by_size == [("over.txt", 101)]


def test_no_limit_keeps_everything(tmp_path: Path):
    _touch(tmp_path / "big.txt", "x" * 2_000_000)
    selection = select_resources(["*.txt"], ResolverConfig(root=tmp_path, max_size=None))
    assert selection.identifiers == ["big.txt"]
    assert selection.ignored_by_size == []


def test_zero_limit_excludes_non_empty_files(tmp_path: Path):
    _touch(tmp_path / "empty.txt", "")
    _touch(tmp_path / "full.txt", "x")
    selection = select_resources(["*.txt"], ResolverConfig(root=tmp_path, max_size=0))
    assert selection.identifiers == ["empty.txt"]
    assert selection.ignored_by_size == [("full.txt", 1)]


def test_default_rules_filter_glob_matches(tmp_path: Path):
    _touch(tmp_path / "main.py")
    _touch(tmp_path / ".env")
    _touch(tmp_path / "logo.png")
    _touch(tmp_path / "package-lock.json")

    selection = select_resources(["*"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == ["main.py"]
    assert selection.ignored_by_rule == [".env", "logo.png", "package-lock.json"]


def test_greedy_keeps_everything(tmp_path: Path):
    _touch(tmp_path / "main.py")
    _touch(tmp_path / ".env")
    _touch(tmp_path / "logo.png")
    (tmp_path / ".gitignore").write_text("*.py\n")

    selection = select_resources(["*"], ResolverConfig(root=tmp_path, greedy=True))
    assert selection.identifiers == [".env", ".gitignore", "logo.png", "main.py"]
    assert selection.ignored_by_rule == []


def test_greedy_does_not_bypass_size_ceiling(tmp_path: Path):
    _touch(tmp_path / "big.txt", "x" * 10)
    selection = select_resources(["*"], ResolverConfig(root=tmp_path, greedy=True, max_size=5))
    assert selection.identifiers == []


def test_recursive_selection_skips_dependency_dirs(tmp_path: Path):
    _touch(tmp_path / "src" / "deep" / "file.js")
    _touch(tmp_path / "node_modules" / "pkg" / "index.js")
    _touch(tmp_path / ".cache" / "x.js")

    selection = select_resources(["*.js"], ResolverConfig(root=tmp_path, recursive=True))
    assert selection.identifiers == [os.path.join("src", "deep", "file.js")]
    assert sorted(selection.ignored_by_rule) == sorted(
        [os.path.join(".cache", "x.js"), os.path.join("node_modules", "pkg", "index.js")]
    )


def test_directories_touched(tmp_path: Path):
    _touch(tmp_path / "top.md")
    _touch(tmp_path / "docs" / "a.md")
    _touch(tmp_path / "docs" / "b.md")
    _touch(tmp_path / "docs" / "api" / "c.md")

    selection = select_resources(["*.md"], ResolverConfig(root=tmp_path, recursive=True))
    assert selection.directories_touched == [".", "docs", os.path.join("docs", "api")]


def test_resolution_is_idempotent(tmp_path: Path):
    _touch(tmp_path / "b.py")
    _touch(tmp_path / "a.py")
    _touch(tmp_path / "pkg" / "c.py")
    (tmp_path / ".gitignore").write_text("pkg/\n")

    config = ResolverConfig(root=tmp_path, recursive=True)
    first = select_resources(["*.py", "https://example.com"], config)
    second = select_resources(["*.py", "https://example.com"], config)
    assert first.resources == second.resources
    assert first.ignored_by_rule == second.ignored_by_rule


def test_empty_selection_is_not_an_error(tmp_path: Path):
    selection = select_resources(["*.nothing"], ResolverConfig(root=tmp_path))
    assert not selection
    assert selection.resources == []


def test_missing_exact_reference_is_empty(tmp_path: Path):
    selection = select_resources(["missing.md"], ResolverConfig(root=tmp_path))
    assert selection.identifiers == []


def test_explicit_policy_is_used(tmp_path: Path):
    _touch(tmp_path / "keep.txt")
    _touch(tmp_path / "drop.txt")
    policy = IgnorePolicy.build(use_defaults=False, repo_ignore_text="drop.txt\n")
    selector = ResourceSelector(ResolverConfig(root=tmp_path), policy=policy)
    assert selector.policy is policy
    assert selector.select(["*.txt"]).identifiers == ["keep.txt"]


def test_unreadable_root_raises(tmp_path: Path):
    with pytest.raises(ResolutionError):
        select_resources(["*"], ResolverConfig(root=tmp_path / "does-not-exist"))


def test_subdirectories_skip_ignored_trees(tmp_path: Path):
    _touch(tmp_path / "src" / "pkg" / "mod.py")
    _touch(tmp_path / "docs" / "index.md")
    _touch(tmp_path / "node_modules" / "lib" / "index.js")
    _touch(tmp_path / ".git" / "objects" / "ab")
    _touch(tmp_path / "build" / "out.txt")
    (tmp_path / ".gitignore").write_text("build/\n")

    selector = ResourceSelector(ResolverConfig(root=tmp_path))
    assert selector.subdirectories() == ["docs/", "src/", "src/pkg/"]


def test_subdirectories_greedy_lists_everything(tmp_path: Path):
    _touch(tmp_path / "node_modules" / "lib" / "index.js")
    _touch(tmp_path / ".git" / "HEAD")

    selector = ResourceSelector(ResolverConfig(root=tmp_path, greedy=True))
    assert selector.subdirectories() == [".git/", "node_modules/", "node_modules/lib/"]
