"""
Core logic for filebundler package.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

import pathspec
from colorama import Fore, Style

# Exceptions
class BundlerError(Exception): ...
class DirectoryNotFoundError(BundlerError): ...
class ConfigFileError(BundlerError): ...
class FileReadError(BundlerError): ...
class OutputError(BundlerError): ...
class ResponseFileError(BundlerError): ...

# Defaults & helpers
ALL_LANGUAGES = "all"
AUTHOR_PREFIX = "// Author: "
SOURCE_PREFIX = "// Source: "


def say(msg: str, colour: str = "") -> None:
    if colour:
        print(colour + msg + Style.RESET_ALL)
    else:
        print(msg)


def file_extension(path: Path) -> str:
    """Return the last dot-suffix of *path*'s name, dot included.

    Unlike :attr:`Path.suffix`, a dotfile such as ``.gitignore`` counts as
    having the extension ``.gitignore``. A name ending in a dot has none.
    """
    name = path.name
    idx = name.rfind(".")
    if idx == -1 or idx == len(name) - 1:
        return ""
    return name[idx:]


def current_directory() -> Path:
    try:
        return Path.cwd()
    except OSError as e:
        raise DirectoryNotFoundError(f"Could not resolve current directory: {e}")


def parse_languages(text: str) -> Tuple[str, ...]:
    """Split a comma-separated language list, dropping blank items."""
    languages = tuple(lang.strip() for lang in text.split(",") if lang.strip())
    if not languages:
        raise ValueError("at least one language is required (or 'all')")
    return languages


class SortOrder(enum.Enum):
    NAME = "name"
    TYPE = "type"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOrder":
        """Unknown or empty values fall back to :attr:`NAME`."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NAME


@dataclass(frozen=True)
class BundleRequest:
    output: Path
    languages: Tuple[str, ...]
    sort: SortOrder = SortOrder.NAME
    note: bool = False
    remove_empty_lines: bool = False
    author: Optional[str] = None
    root: Path = field(default_factory=current_directory)
    exclude: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.languages:
            raise ValueError("at least one language is required (or 'all')")

    @property
    def includes_all(self) -> bool:
        return len(self.languages) == 1 and self.languages[0].lower() == ALL_LANGUAGES

    @property
    def extensions(self) -> FrozenSet[str]:
        return frozenset(f".{lang.lower()}" for lang in self.languages)


@dataclass(frozen=True)
class FileEntry:
    path: Path
    relative: str

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return file_extension(self.path)

    def read_lines(self) -> List[str]:
        try:
            with self.path.open("r", encoding="utf-8-sig", errors="replace") as fh:
                text = fh.read()
        except OSError as e:
            raise FileReadError(f"Could not read source file '{self.relative}': {e}")
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines


@dataclass
class BundleResult:
    output: Path
    files: List[FileEntry]
    lines_written: int


# Ignore-pattern utilities
def load_extra_patterns(config_path: Path) -> List[str]:
    if not config_path.exists():
        raise ConfigFileError(f"Ignore file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read ignore file '{config_path}': {e}")


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    return pathspec.GitIgnoreSpec.from_lines(patterns)


# File-scanning helpers
def scan_files(root: Path) -> List[Path]:
    try:
        root = root.resolve()
    except (OSError, RuntimeError) as e:
        raise DirectoryNotFoundError(f"Could not resolve root path '{root}': {e}")
    if not root.exists():
        raise DirectoryNotFoundError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise DirectoryNotFoundError(f"Root path '{root}' is not a directory")
    try:
        return sorted(p for p in root.rglob("*") if p.is_file())
    except OSError as e:
        raise DirectoryNotFoundError(f"Could not scan directory '{root}': {e}")


def select_files(paths: Sequence[Path], request: BundleRequest) -> List[FileEntry]:
    """Keep the files *request* asks for; the output file is never kept."""
    root = request.root.resolve()
    try:
        out_path = request.output.resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{request.output}': {e}")
    exclude_spec = compile_patterns(request.exclude) if request.exclude else None
    extensions = request.extensions

    kept: List[FileEntry] = []
    for p in paths:
        if p == out_path:
            continue
        try:
            rel = p.relative_to(root).as_posix()
        except ValueError:
            rel = p.as_posix()
        if exclude_spec is not None and exclude_spec.match_file(rel):
            continue
        if not request.includes_all and file_extension(p).lower() not in extensions:
            continue
        kept.append(FileEntry(path=p, relative=rel))
    return kept


def sort_files(entries: Iterable[FileEntry], order: SortOrder) -> List[FileEntry]:
    if order is SortOrder.TYPE:
        return sorted(
            entries, key=lambda e: (e.extension.lstrip(".").lower(), e.name.lower())
        )
    return sorted(entries, key=lambda e: e.name.lower())


# Main writer
def _prepare_output(out_path: Path) -> Path:
    try:
        out_path = out_path.resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")

    if not out_path.parent.exists():
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create directory '{out_path.parent}': {e}")
    return out_path


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError:
        pass


def write_bundle(
    entries: Sequence[FileEntry],
    request: BundleRequest,
    verbose: bool = False,
) -> int:
    """Write *entries* to ``request.output`` and return the number of lines written.

    Each file's lines are followed by one blank separator line. A partially
    written output is removed if reading a source or writing fails.
    """
    out_path = _prepare_output(request.output)
    lines_written = 0
    opened = False

    try:
        with out_path.open(
            "w", encoding="utf-8", errors="surrogateescape", newline="\n"
        ) as out_fh:
            opened = True
            if request.author and request.author.strip():
                out_fh.write(f"{AUTHOR_PREFIX}{request.author}\n")
                lines_written += 1

            for entry in entries:
                if request.note:
                    out_fh.write(f"{SOURCE_PREFIX}{entry.relative}\n")
                    lines_written += 1

                content = entry.read_lines()
                if request.remove_empty_lines:
                    content = [line for line in content if line.strip()]

                for line in content:
                    out_fh.write(line + "\n")
                out_fh.write("\n")
                lines_written += len(content) + 1

                if verbose:
                    say(f"[filebundler] + {entry.relative} ({len(content)} lines)")
    except FileReadError:
        if opened:
            _discard(out_path)
        raise
    except (OSError, UnicodeError) as e:
        if opened:
            _discard(out_path)
        raise OutputError(f"Could not write to output file '{out_path}': {e}")

    return lines_written


def execute(request: BundleRequest, verbose: bool = False) -> BundleResult:
    """Scan → select → sort → write, reporting progress on stdout."""
    if verbose:
        say(f"[filebundler] Scanning {request.root} …")
    all_files = scan_files(request.root)

    if request.includes_all:
        say("Including all files...")
    else:
        say("Including files for languages: " + ", ".join(request.languages))

    selected = sort_files(select_files(all_files, request), request.sort)
    if verbose:
        say(
            f"[filebundler] {len(all_files)} files found, "
            f"{len(selected)} selected, sorted by {request.sort.value}."
        )

    lines_written = write_bundle(selected, request, verbose=verbose)
    say("File was created")
    if verbose:
        say(
            f"[filebundler] Done → {request.output.resolve()}. "
            f"{len(selected)} files, {lines_written} lines written.",
            Fore.GREEN,
        )
    return BundleResult(
        output=request.output.resolve(), files=selected, lines_written=lines_written
    )
