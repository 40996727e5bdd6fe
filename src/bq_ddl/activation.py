"""Render deactivated schema elements as comments."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


def comment_if_deactivated(
    text: str,
    is_activated: bool,
    is_part_of_line: bool = False,
) -> str:
    """Wrap *text* in comment syntax when it is deactivated.

    Args:
        text: Rendered statement or fragment.
        is_activated: When ``True`` the text is returned unchanged.
        is_part_of_line: Use the inline ``/* ... */`` form, for fragments
            embedded in the middle of a statement.  A ``*/`` inside
            *text* is broken up as ``* /`` since block comments do not
            nest.  Otherwise every line is prefixed with ``-- `` so the
            comment nests safely around inline comments already present
            in *text*.

    Returns:
        The text, commented out when deactivated.  Empty text stays empty.
    """
    if is_activated or not text:
        return text
    if is_part_of_line:
        return f"/* {text.replace('*/', '* /')} */"
    return "\n".join(f"-- {line}" for line in text.split("\n"))


@dataclass(frozen=True)
class Fragment:
    """Rendered text carried together with its activation flag."""

    text: str
    active: bool = True

    def render(self, is_part_of_line: bool = False) -> str:
        return comment_if_deactivated(self.text, self.active, is_part_of_line)


def order_by_activation(fragments: Iterable[Fragment]) -> list[Fragment]:
    """Move deactivated fragments after the activated ones.

    Relative order inside each group is preserved, so commented lines
    cluster at the end of a column list.
    """
    items = list(fragments)
    return [f for f in items if f.active] + [f for f in items if not f.active]


def join_fragments(fragments: Iterable[Fragment], separator: str) -> str:
    """Order, comment and join fragments for an inline list."""
    return separator.join(
        f.render(is_part_of_line=True) for f in order_by_activation(fragments)
    )
