"""Join rendered statements into a script and write it out."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def _ensure_parent(path: Path) -> None:
    """Create parent directories if they do not exist."""
    path.parent.mkdir(parents=True, exist_ok=True)


def render_script(statements: Iterable[str], terminator: str = ";") -> str:
    """Terminate each non-empty statement and separate them by a blank line.

    A statement that is entirely commented out (every line starts with
    ``--``) is left without a terminator.  When its last line may hold a
    ``--`` or ``#`` comment, the terminator goes on a line of its own.

    Args:
        statements: Rendered statements.
        terminator: Text appended to each live statement.

    Returns:
        The script text ending in a newline, or ``""`` with no statements.
    """
    parts = []
    for statement in statements:
        if not statement:
            continue
        lines = statement.split("\n")
        if all(line.startswith("--") for line in lines):
            parts.append(statement)
        elif terminator and ("--" in lines[-1] or "#" in lines[-1]):
            parts.append(f"{statement}\n{terminator}")
        else:
            parts.append(statement + terminator)
    if not parts:
        return ""
    return "\n\n".join(parts) + "\n"


def write_script(path: Path, script: str) -> None:
    """Write a DDL script to *path*.

    Args:
        path: Target ``.sql`` file path.
        script: Script text.
    """
    _ensure_parent(path)
    path.write_text(script, encoding="utf-8")
