"""Human-readable descriptions of configuration keys."""

from __future__ import annotations

import re
from dataclasses import dataclass

from fireworq import config

_TAGS = re.compile(r"<[a-zA-Z0-9'\" /._-]+>")
_LINKS = re.compile(r"\[([^\]]+)\](?:\[[^\]]*\]|\([^\)]*\))")


@dataclass(frozen=True)
class Item:
    """A configuration key together with its default value and description."""

    category: str = ""
    name: str = ""
    default_value: str = ""
    label: str = ""
    description: str = ""

    def argument(self) -> str:
        """Return the key as a command line option."""
        return "--" + self.name.replace("_", "-")

    def describe(self, indent: int, width: int) -> str:
        """Return the item as an indented, wrapped command line description."""
        argument = f"{' ' * indent}{self.argument()}={self.label}"
        default_value = f"{' ' * (indent * 2)}default: {self.default_value}"
        description = _indent_lines(
            indent * 2,
            _wrap_lines(width - indent * 2, _strip_markdown(self.description)),
        )

        parts = [argument + "\n"]
        if self.default_value:
            parts.append(default_value + "\n")
        parts.append(description)
        return "".join(parts)


def descriptions() -> list[Item]:
    """Return every configuration item, sorted by name."""
    items = config._snapshot()
    return [
        Item(
            category=item.category,
            name=name,
            default_value=item.default_value,
            label=item.label,
            description=item.description,
        )
        for name, item in sorted(items.items())
    ]


def _scan_lines(s: str) -> list[str]:
    if not s:
        return []
    lines = s.split("\n")
    if s.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _indent_lines(n: int, s: str) -> str:
    indent = " " * n
    return "".join(f"{indent}{line}\n" for line in _scan_lines(s))


def _wrap_lines(width: int, s: str) -> str:
    return "".join(_wrap_line(width, line) + "\n" for line in _scan_lines(s))


def _wrap_line(width: int, s: str) -> str:
    if len(s) <= width:
        return s

    out: list[str] = []
    length = 0
    for count, token in enumerate(s.split()):
        size = len(token)
        if length + 1 + size > width:
            out.append("\n")
            out.append(token)
            length = size
        else:
            if count > 0:
                out.append(" ")
            out.append(token)
            length += 1 + size
    return "".join(out)


def _strip_markdown(s: str) -> str:
    s = _TAGS.sub("", s)
    s = _LINKS.sub(r"\1", s)
    return s.replace("`", "")