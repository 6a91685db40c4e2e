from __future__ import annotations

import re
from typing import List

from .. import settings


def prefix_lines(text: str, prefix: str) -> str:
    """Prefix every line of ``text``; a trailing newline stays bare."""
    if text.endswith("\n"):
        return prefix + text[:-1].replace("\n", "\n" + prefix) + "\n"
    return prefix + text.replace("\n", "\n" + prefix)


_LEADING_BLANK = re.compile(r"^\s+\n")
_TRAILING_SPACE = re.compile(r"\n\s+$")
_LINE_END_SPACE = re.compile(r"[ \t]+\n")


def tidy(code: str) -> str:
    """Strip leading blank lines, trailing whitespace and line-end spaces."""
    code = _LEADING_BLANK.sub("", code, count=1)
    code = _TRAILING_SPACE.sub("\n", code, count=1)
    return _LINE_END_SPACE.sub("\n", code)


class CodeWriter:
    """Simple indented string accumulator."""

    def __init__(self, indent: int = 0, unit: str = settings.INDENT):
        self._lines: List[str] = []
        self._indent = indent
        self._unit = unit

    def writeln(self, line: str = "") -> "CodeWriter":
        if line:
            self._lines.append(self._unit * self._indent + line)
        else:
            self._lines.append("")
        return self

    def blank(self) -> "CodeWriter":
        return self.writeln()

    def push(self) -> "CodeWriter":
        self._indent += 1
        return self

    def pop(self) -> "CodeWriter":
        self._indent = max(0, self._indent - 1)
        return self

    def extend(self, lines: List[str]) -> "CodeWriter":
        for line in lines:
            self.writeln(line)
        return self

    def body(self, code: str) -> "CodeWriter":
        """Append already rendered statements, or ``pass`` when there are none."""
        lines = code.rstrip("\n").split("\n") if code.strip() else ["pass"]
        for line in lines:
            self._lines.append(self._unit * (self._indent + 1) + line if line else "")
        return self

    def lines(self) -> List[str]:
        return self._lines

    def result(self) -> str:
        return "\n".join(self._lines)
