"""Terminal colours, text styles and layout helpers for the download list."""

from __future__ import annotations

import dataclasses
import re
import unicodedata
from dataclasses import dataclass
from typing import Any

BASE = "#1e1e2e"
CRUST = "#11111b"
TEXT = "#cdd6f4"
SUBTEXT0 = "#a6adc8"
SURFACE0 = "#313244"

PINK = "#f5c2e7"
MAUVE = "#cba6f7"
RED = "#f38ba8"
PEACH = "#fab387"
YELLOW = "#f9e2af"
GREEN = "#a6e3a1"
TEAL = "#94e2d5"
SAPPHIRE = "#74c7ec"
BLUE = "#89b4fa"
LAVENDER = "#b4befe"

_RESET = "\x1b[0m"
_ANSI = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_HEX = re.compile(r"#([0-9A-Fa-f]{6})")
_HORIZONTAL = ("left", "center", "right")
_VERTICAL = ("top", "center", "bottom")
_ALL_SIDES = frozenset({"top", "right", "bottom", "left"})
_BORDERS = {
    "rounded": {"h": "─", "v": "│", "tl": "╭", "tr": "╮", "bl": "╰", "br": "╯"},
    "normal": {"h": "─", "v": "│", "tl": "┌", "tr": "┐", "bl": "└", "br": "┘"},
}


def _rgb(color: str) -> tuple[int, int, int]:
    match = _HEX.fullmatch(color)
    if match is None:
        raise ValueError(f"invalid colour {color!r}; expected #rrggbb")
    value = match.group(1)
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _char_width(char: str) -> int:
    if unicodedata.combining(char):
        return 0
    if unicodedata.east_asian_width(char) in ("W", "F"):
        return 2
    return 1


def visible_width(text: str) -> int:
    """Width in terminal cells of the widest line, ignoring escape codes."""
    plain = _ANSI.sub("", text)
    return max(
        (sum(_char_width(c) for c in line) for line in plain.split("\n")), default=0
    )


def _check(align: str, allowed: tuple[str, ...]) -> None:
    if align not in allowed:
        raise ValueError(f"invalid alignment {align!r}; expected one of {allowed}")


def _pad(line: str, width: int, align: str) -> str:
    gap = width - visible_width(line)
    if gap <= 0:
        return line
    if align == "right":
        return " " * gap + line
    if align == "center":
        left = gap // 2
        return " " * left + line + " " * (gap - left)
    return line + " " * gap


def _fill(lines: list[str], height: int, align: str, blank: str) -> list[str]:
    missing = height - len(lines)
    if missing <= 0:
        return lines
    if align == "bottom":
        return [blank] * missing + lines
    if align == "center":
        top = missing // 2
        return [blank] * top + lines + [blank] * (missing - top)
    return lines + [blank] * missing


@dataclass(frozen=True)
class Style:
    """How a block of text is coloured, padded, sized, aligned and framed."""

    foreground: str | None = None
    background: str | None = None
    bold: bool = False
    italic: bool = False
    faint: bool = False
    width: int | None = None
    height: int | None = None
    padding: tuple[int, int] = (0, 0)
    align: str = "left"
    border: str | None = None
    border_sides: frozenset[str] = _ALL_SIDES
    border_foreground: str | None = None

    def __post_init__(self) -> None:
        for color in (self.foreground, self.background, self.border_foreground):
            if color is not None:
                _rgb(color)
        _check(self.align, _HORIZONTAL)
        if self.border is not None and self.border not in _BORDERS:
            raise ValueError(f"unknown border {self.border!r}")
        unknown = set(self.border_sides) - _ALL_SIDES
        if unknown:
            raise ValueError(f"unknown border sides {sorted(unknown)}")

    def replace(self, **kwargs: Any) -> Style:
        """A copy of this style with the given attributes changed."""
        return dataclasses.replace(self, **kwargs)

    def render(self, text: str) -> str:
        """Apply the style to text and return the resulting block."""
        lines = str(text).split("\n")
        vpad, hpad = self.padding
        inner = max(visible_width(line) for line in lines)
        if self.width is not None:
            inner = max(inner, self.width - 2 * hpad)

        full = inner + 2 * hpad
        blank = " " * full
        body = [" " * hpad + _pad(line, inner, self.align) + " " * hpad for line in lines]
        body = [blank] * vpad + body + [blank] * vpad
        if self.height is not None:
            body = _fill(body, self.height, "top", blank)

        sgr = self._sgr()
        if sgr:
            body = [f"{sgr}{line}{_RESET}" for line in body]
        if self.border is not None:
            body = self._frame(body, full)
        return "\n".join(body)

    def _sgr(self) -> str:
        codes: list[str] = []
        if self.bold:
            codes.append("1")
        if self.faint:
            codes.append("2")
        if self.italic:
            codes.append("3")
        if self.foreground is not None:
            codes.append("38;2;{};{};{}".format(*_rgb(self.foreground)))
        if self.background is not None:
            codes.append("48;2;{};{};{}".format(*_rgb(self.background)))
        return f"\x1b[{';'.join(codes)}m" if codes else ""

    def _paint_border(self, text: str) -> str:
        if self.border_foreground is None or not text:
            return text
        return "\x1b[38;2;{};{};{}m".format(*_rgb(self.border_foreground)) + text + _RESET

    def _frame(self, body: list[str], width: int) -> list[str]:
        chars = _BORDERS[self.border or "normal"]
        sides = self.border_sides
        left = self._paint_border(chars["v"]) if "left" in sides else ""
        right = self._paint_border(chars["v"]) if "right" in sides else ""
        framed = [left + line + right for line in body]

        def edge(lc: str, rc: str) -> str:
            return self._paint_border(
                (lc if "left" in sides else "")
                + chars["h"] * width
                + (rc if "right" in sides else "")
            )

        if "top" in sides:
            framed.insert(0, edge(chars["tl"], chars["tr"]))
        if "bottom" in sides:
            framed.append(edge(chars["bl"], chars["br"]))
        return framed


def join_vertical(align: str, *blocks: str) -> str:
    """Stack blocks on top of each other, aligning lines to the widest."""
    _check(align, _HORIZONTAL)
    if not blocks:
        return ""
    lines = [line for block in blocks for line in block.split("\n")]
    width = max(visible_width(line) for line in lines)
    return "\n".join(_pad(line, width, align) for line in lines)


def join_horizontal(align: str, *blocks: str) -> str:
    """Place blocks side by side, aligning them vertically."""
    _check(align, _VERTICAL)
    if not blocks:
        return ""
    split = [block.split("\n") for block in blocks]
    height = max(len(lines) for lines in split)
    columns = []
    for lines in split:
        width = max(visible_width(line) for line in lines)
        padded = [_pad(line, width, "left") for line in lines]
        columns.append(_fill(padded, height, align, " " * width))
    return "\n".join("".join(column[row] for column in columns) for row in range(height))


def place(width: int, height: int, h_align: str, v_align: str, content: str) -> str:
    """Position content inside a box of at least the given size."""
    _check(h_align, _HORIZONTAL)
    _check(v_align, _VERTICAL)
    full = max(width, visible_width(content))
    lines = [_pad(line, full, h_align) for line in content.split("\n")]
    return "\n".join(_fill(lines, height, v_align, " " * full))


ERROR_STYLE = Style(
    foreground=BASE,
    background=RED,
    border="rounded",
    border_foreground=RED,
    padding=(0, 1),
    align="center",
)

LIST_ITEM_STYLE = Style(padding=(0, 1), foreground=TEXT)

SELECTED_ITEM_STYLE = Style(
    border="normal",
    border_sides=frozenset({"left"}),
    border_foreground=PINK,
    padding=(0, 1),
    foreground=TEXT,
)

PROGRESS_BAR_EMPTY_STYLE = Style(foreground=SURFACE0)

STATUS_ACTIVE = Style(foreground=TEAL, bold=True)
STATUS_QUEUED = Style(foreground=YELLOW, bold=True)
STATUS_PAUSED = Style(foreground=PEACH, bold=True)
STATUS_COMPLETED = Style(foreground=GREEN, bold=True)
STATUS_CANCELLED = Style(foreground=MAUVE, bold=True)
STATUS_FAILED = Style(foreground=RED, bold=True)

FOOTER_STYLE = Style(foreground=SUBTEXT0, padding=(0, 1), align="center")

SUCCESS_STYLE = Style(
    foreground=BASE,
    background=GREEN,
    border="rounded",
    border_foreground=GREEN,
    padding=(0, 1),
    align="center",
)