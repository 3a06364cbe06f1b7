"""
Interactive generation of response files for the ``bundle`` command.

A response file holds one line, a ready-to-run ``bundle`` invocation, which
``filebundler @<file>`` replays later.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .core import ResponseFileError, say

Prompt = Callable[[str], str]

PROMPT_OUTPUT = "Enter output file path (--output): "
PROMPT_LANGUAGES = (
    "Enter programming languages (--languages, comma-separated, e.g., 'cs,txt'): "
)
PROMPT_NOTE = "Include source file paths as comments (--note)? (yes/no): "
PROMPT_SORT = "Sort files by (--sort: name/type, default is 'name'): "
PROMPT_REMOVE_EMPTY = "Remove empty lines (--remove-empty-lines)? (yes/no): "
PROMPT_AUTHOR = "Enter author name (--author, optional): "


@dataclass
class ResponseFileSpec:
    output: str = ""
    languages: str = ""
    note: bool = False
    sort: str = ""
    remove_empty_lines: bool = False
    author: str = ""


def _ask(ask: Prompt, prompt: str) -> str:
    try:
        answer = ask(prompt)
    except EOFError:
        return ""
    return answer or ""


def _yes(answer: str) -> bool:
    return answer.strip().lower() == "yes"


def collect(ask: Optional[Prompt] = None) -> ResponseFileSpec:
    """Prompt for every ``bundle`` option in turn.

    Answers are kept verbatim; only the yes/no questions are interpreted.
    """
    ask = ask or input
    return ResponseFileSpec(
        output=_ask(ask, PROMPT_OUTPUT),
        languages=_ask(ask, PROMPT_LANGUAGES),
        note=_yes(_ask(ask, PROMPT_NOTE)),
        sort=_ask(ask, PROMPT_SORT),
        remove_empty_lines=_yes(_ask(ask, PROMPT_REMOVE_EMPTY)),
        author=_ask(ask, PROMPT_AUTHOR),
    )


def _quote(value: str) -> str:
    """Double-quote *value* so that ``shlex.split`` gives it back unchanged."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_command(spec: ResponseFileSpec) -> str:
    args: List[str] = [
        f"--output {_quote(spec.output)}",
        f"--languages {_quote(spec.languages)}",
    ]
    if spec.note:
        args.append("--note")
    if spec.sort.strip():
        args.append(f"--sort {spec.sort}")
    if spec.remove_empty_lines:
        args.append("--remove-empty-lines")
    if spec.author.strip():
        args.append(f"--author {_quote(spec.author)}")
    return "bundle " + " ".join(args)


def write_response_file(rsp_path: Path, spec: ResponseFileSpec) -> Path:
    """Overwrite *rsp_path* with the command for *spec*; return its resolved path."""
    try:
        rsp_path = rsp_path.resolve()
    except (OSError, RuntimeError) as e:
        raise ResponseFileError(f"Could not resolve response file path '{rsp_path}': {e}")
    try:
        rsp_path.write_text(build_command(spec), encoding="utf-8")
    except OSError as e:
        raise ResponseFileError(f"Could not write response file '{rsp_path}': {e}")
    return rsp_path


def create(rsp_path: Path, ask: Optional[Prompt] = None) -> ResponseFileSpec:
    say("Creating a response file for the 'bundle' command...")
    spec = collect(ask)
    written = write_response_file(rsp_path, spec)
    say(f"Response file created at: {written}")
    say(f"Command in file: {build_command(spec)}")
    return spec
