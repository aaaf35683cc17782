#!/usr/bin/env python3
"""
thisismy: Aggregate files and URLs into one text stream

Common usage:
  thisismy README.md
  thisismy -c "src/*.py"
  thisismy -r -y "*.md" https://example.com/page
  thisismy -rw -o context.txt "*.js"
  thisismy --list-files -r "*.py"
  thisismy -n -o context.txt src/main.py

Respects `.thisismyignore` (or else `.gitignore`) plus default rules for
dotfiles, binaries and dependency directories, unless `-g` is used. A single
file named without wildcards is always included. With `-w`, changed files and
URLs prompt for a re-run: answer `y` to re-run, `n` to skip, `x` to exit.
Run with no arguments to copy everything under the current directory.
Console output is colored unless `-n` is given or stdout is not a terminal.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from thisismy.config import (
    DEFAULT_SIZE_LIMIT,
    load_defaults,
    merge_cli_with_config,
    normalize_interval,
    parse_size_limit,
    save_backup,
)
from thisismy.console import IGNORED_STYLE, NOTICE_STYLE, TITLE_STYLE, make_console
from thisismy.errors import ResolutionError
from thisismy.fetch import ContentFetcher
from thisismy.output import copy_to_clipboard, write_output_file
from thisismy.render import RenderOptions, aggregate, load_prefix
from thisismy.resolver import ResolverConfig, ResourceSelector, Selection
from thisismy.watch import ConfirmationGate, LineReader, WatchSession

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the thisismy tool."""

    files: list[str] = field(default_factory=list)
    copy: bool = False
    tiny: bool = False
    prefix: str | None = None
    output: str | None = None
    silent: bool = False
    debug: bool = False
    version: bool = False
    backup: bool = False
    watch: bool = False
    interval: int | None = None
    greedy: bool = False
    recursive: bool = False
    tree: bool = False
    limit: str = DEFAULT_SIZE_LIMIT
    force_filter: bool = False
    no_color: bool = False
    license: bool = False
    list_files: bool = False


# Options that can come from the defaults file, so explicit CLI use must be tracked.
_TRACKED_FLAGS = frozenset(
    {
        "files",
        "copy",
        "tiny",
        "prefix",
        "output",
        "silent",
        "debug",
        "watch",
        "interval",
        "greedy",
        "recursive",
        "tree",
        "limit",
        "force_filter",
        "no_color",
    }
)

# What a bare `thisismy` with no arguments does.
_BARE_DEFAULTS: dict[str, object] = {
    "copy": True,
    "recursive": True,
    "tree": True,
    "files": ["*"],
}


def _build_parser() -> argparse.ArgumentParser:
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    # Unset options are left off the namespace, which is how explicit flags are detected.
    parser = argparse.ArgumentParser(
        prog="thisismy",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        argument_default=argparse.SUPPRESS,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=str,
        help="Files, glob patterns or URLs to read",
    )
    parser.add_argument("-c", "--copy", action="store_true", help="Copy output to the clipboard")
    parser.add_argument(
        "-t",
        "--tiny",
        action="store_true",
        help="Collapse whitespace runs to a single space and trim",
    )
    parser.add_argument(
        "-p", "--prefix", type=str, help="Prefix for each resource: a literal string or a file path"
    )
    parser.add_argument("-o", "--output", type=str, help="Write output to a file")
    parser.add_argument(
        "-s", "--silent", action="store_true", help="No console output except errors"
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")
    parser.add_argument(
        "-V", "--version", action="store_true", help="Show version information and exit"
    )
    parser.add_argument("--license", action="store_true", help="Show license information and exit")
    parser.add_argument(
        "-n", "--no-color", action="store_true", dest="no_color", help="Disable colored console output"
    )
    parser.add_argument(
        "-b",
        "--backup",
        action="store_true",
        help="Save the current options to thisismy.json as defaults for later runs",
    )
    parser.add_argument(
        "-w", "--watch", action="store_true", help="Watch resources and offer to re-run on change"
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=int,
        metavar="MINUTES",
        help="Minutes between URL re-checks in watch mode (default: 5)",
    )
    parser.add_argument(
        "-g",
        "--greedy",
        action="store_true",
        help="Disable all ignore rules and include every matched file",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Search subdirectories when matching patterns",
    )
    parser.add_argument(
        "-y", "--tree", action="store_true", help="Append a tree view of processed files"
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=str,
        metavar="SIZE",
        help=f"Skip files larger than SIZE, e.g. 500kb or 2mb, or 'no' for no limit "
        f"(default: {DEFAULT_SIZE_LIMIT})",
    )
    parser.add_argument(
        "--force-filter",
        action="store_true",
        dest="force_filter",
        help="Apply ignore rules even to a single file named without wildcards",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print resolved files and URLs without reading them",
    )
    return parser


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)` where `explicit_flags` names the options
    the user actually passed (for defaults-file merge precedence). With no
    arguments at all, the bare defaults apply and count as explicit.
    """
    argv = sys.argv[1:] if args is None else args
    parsed = vars(_build_parser().parse_args(argv))
    if parsed.get("files") == []:
        del parsed["files"]

    if not argv:
        parsed = dict(_BARE_DEFAULTS)

    explicit_flags = set(parsed) & _TRACKED_FLAGS
    return Options(**parsed), explicit_flags


def _setup_logging(options: Options) -> None:
    if options.debug:
        level = logging.DEBUG
    elif options.silent:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", force=True)


def _say(console: Console, options: Options, message: str, style: str = NOTICE_STYLE) -> None:
    if not options.silent:
        console.print(message, style=style)


def _list_subdirectories(console: Console, selector: ResourceSelector) -> None:
    console.print("Listing all subdirectories from the current folder:")
    for directory in selector.subdirectories():
        console.print(f"  {directory}")
    console.print("--- End of subdirectory listing ---")


def _report_selection(console: Console, options: Options, selection: Selection) -> None:
    if options.silent:
        return
    if selection.ignored_by_rule:
        console.print("Ignored files:", style=IGNORED_STYLE)
        for path in selection.ignored_by_rule:
            console.print(f"  {path}", style=IGNORED_STYLE)
    if selection.ignored_by_size:
        console.print(f"Files over the size limit ({options.limit}):", style=IGNORED_STYLE)
        for path, size in selection.ignored_by_size:
            console.print(f"  {path} ({size} bytes)", style=IGNORED_STYLE)
    if options.recursive and selection:
        console.print("Recursive search enabled. Directories scanned:")
        for directory in selection.directories_touched:
            console.print(f"  {directory}")
        console.print(f"Found {len(selection.resources)} file(s)/URL(s) in total.")


class _Runner:
    """One pass of downstream processing: fetch, render, write, copy."""

    def __init__(
        self, options: Options, selection: Selection, fetcher: ContentFetcher, console: Console
    ) -> None:
        self.options = options
        self.selection = selection
        self.fetcher = fetcher
        self.console = console
        self.render_options = RenderOptions(
            prefix=load_prefix(options.prefix),
            tiny=options.tiny,
            tree=options.tree,
            silent=options.silent,
        )

    def __call__(self) -> str:
        output = aggregate(
            self.selection.resources,
            self.fetcher,
            self.render_options,
            echo=self.console.print,
            root=self.fetcher.root,
        )
        if self.options.output:
            write_output_file(self.options.output, output)
            _say(self.console, self.options, f"Output written to {self.options.output}")
        if self.options.copy and copy_to_clipboard(output):
            _say(self.console, self.options, "Output copied to clipboard")
        return output

    def rerun(self) -> None:
        """Run again from watch mode. A failed run is reported and watching continues."""
        try:
            self()
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            log.debug("Re-run failed", exc_info=True)


def _watch(options: Options, selection: Selection, fetcher: ContentFetcher, runner: _Runner) -> int:
    reader = LineReader(sys.stdin)
    reader.start()
    gate = ConfirmationGate(read_line=reader.read_line, silent=options.silent)
    session = WatchSession(
        selection.resources,
        fetcher,
        gate,
        on_rerun=runner.rerun,
        interval_minutes=normalize_interval(options.interval),
        root=fetcher.root,
    )
    try:
        with session:
            session.start()
            _say(runner.console, options, 'Watch mode enabled. Enter "x" at any time to exit watch mode.')
            session.run(idle_input=reader.poll)
    except KeyboardInterrupt:
        return 130
    _say(runner.console, options, "Exiting watch mode...")
    return 0


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the thisismy CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)
    cwd = Path.cwd()

    if options.backup:
        path = save_backup(cwd, options)
        if not options.silent:
            print(f"Saved options to {path}")

    defaults = load_defaults(cwd)
    loaded = defaults.as_dict()
    merge_cli_with_config(options, defaults, explicit_flags)
    _setup_logging(options)
    console = make_console(color=not options.no_color)
    if loaded:
        _say(console, options, f"Using defaults from thisismy.json:\n{json.dumps(loaded, indent=2)}", TITLE_STYLE)

    # Display version information if requested
    if options.version:
        try:
            version = importlib.metadata.version("thisismy")
            print(f"thisismy {version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.license:
        print("MIT License")
        return 0

    if not options.files:
        if options.recursive:
            options.files = ["*"]
        else:
            print(
                "Error: No input specified. Provide files, patterns or URLs"
                " (or use -r to search the current directory). Use --help for more options.",
                file=sys.stderr,
            )
            return 1

    log.debug("Options: %s", options)

    config = ResolverConfig(
        root=cwd,
        recursive=options.recursive,
        greedy=options.greedy,
        force_filter=options.force_filter,
        max_size=parse_size_limit(options.limit),
    )
    selector = ResourceSelector(config)
    if options.recursive and not options.silent:
        _list_subdirectories(console, selector)
    try:
        selection = selector.select(options.files)
    except ResolutionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _report_selection(console, options, selection)

    if not selection:
        _say(console, options, "No files/URLs found after applying rules.")
        return 0

    if options.list_files:
        for identifier in selection.identifiers:
            print(identifier)
        return 0

    fetcher = ContentFetcher(root=cwd)
    runner = _Runner(options, selection, fetcher, console)
    try:
        runner()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if options.watch:
        return _watch(options, selection, fetcher, runner)
    return 0


if __name__ == "__main__":
    sys.exit(main())
