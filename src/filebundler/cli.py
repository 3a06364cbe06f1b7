"""
CLI entrypoint for filebundler package.
"""
import argparse
import shlex
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from colorama import Fore, just_fix_windows_console

from . import __version__
from .core import (
    BundleRequest,
    BundlerError,
    ConfigFileError,
    DirectoryNotFoundError,
    SortOrder,
    current_directory,
    execute,
    load_extra_patterns,
    parse_languages,
    say,
)
from .rsp import create


class _ResponseFileParser(argparse.ArgumentParser):
    """Reads ``@file`` arguments as shell-quoted lines."""

    def convert_arg_line_to_args(self, arg_line: str) -> List[str]:
        return shlex.split(arg_line)


def _languages(text: str) -> Tuple[str, ...]:
    try:
        return parse_languages(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = _ResponseFileParser(
        prog="filebundler",
        description="Bundle code files from a directory tree into a single file.",
        fromfile_prefix_chars="@",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    b = sub.add_parser("bundle", help="Bundle code files to a single file")
    b.add_argument("--output", "-o", type=Path, required=True, help="File path and name")
    b.add_argument(
        "--languages",
        "-l",
        type=_languages,
        required=True,
        help="Comma-separated extensions to include, or 'all'",
    )
    b.add_argument(
        "--note",
        "-n",
        action="store_true",
        help="Include source file paths as comments in the bundle file",
    )
    b.add_argument(
        "--sort",
        "-s",
        default="name",
        metavar="SORT-ORDER",
        help="Sort files by 'name' (default) or 'type' (file extension)",
    )
    b.add_argument(
        "--remove-empty-lines",
        "-r",
        action="store_true",
        help="Remove empty lines from the source files",
    )
    b.add_argument("--author", "-a", help="Author name to write as a comment at the top")
    b.add_argument("--root", type=Path, help="Directory to scan (default: current directory)")
    b.add_argument(
        "--exclude",
        "-x",
        action="append",
        default=[],
        metavar="PATTERN",
        help="gitignore-style pattern to leave out (repeatable)",
    )
    b.add_argument(
        "--ignore-file",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    b.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    c = sub.add_parser("create-rsp", help="Create a response file for the bundle command")
    c.add_argument(
        "--rsp-file",
        "-r",
        type=Path,
        required=True,
        help="Path to the response file to be created",
    )
    return p.parse_args(argv)


def _fail(e: Exception, prefix: str = "Error") -> None:
    print(f"{prefix}: {e}", file=sys.stderr)
    sys.exit(1)


def _run_bundle(ns: argparse.Namespace) -> None:
    exclude = list(ns.exclude)
    if ns.ignore_file:
        try:
            exclude.extend(load_extra_patterns(ns.ignore_file.resolve()))
        except ConfigFileError as e:
            _fail(e)
        if ns.verbose:
            say(f"[filebundler] Loaded extra patterns from {ns.ignore_file}")

    sort = SortOrder.parse(ns.sort)
    if ns.verbose and ns.sort.strip().lower() != sort.value:
        say(
            f"[filebundler] Unknown sort order '{ns.sort}', sorting by name.",
            Fore.YELLOW,
        )

    try:
        request = BundleRequest(
            output=ns.output,
            languages=ns.languages,
            sort=sort,
            note=ns.note,
            remove_empty_lines=ns.remove_empty_lines,
            author=ns.author,
            root=ns.root if ns.root is not None else current_directory(),
            exclude=tuple(exclude),
        )
        execute(request, verbose=ns.verbose)
    except DirectoryNotFoundError as e:
        _fail(e, prefix="File path is invalid")
    except BundlerError as e:
        _fail(e)


def _run_create_rsp(ns: argparse.Namespace) -> None:
    try:
        create(ns.rsp_file)
    except BundlerError as e:
        _fail(e)


def main(argv: Optional[Sequence[str]] = None) -> None:
    just_fix_windows_console()
    try:
        ns = _parse_args(argv)
        if ns.command == "bundle":
            _run_bundle(ns)
        else:
            _run_create_rsp(ns)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
