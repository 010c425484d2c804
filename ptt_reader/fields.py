"""
Positional field extraction.

PTT list pages expose every field of a row (class, name, title, rate, ...) as
its own flat run of nodes instead of nesting them per row. Records are rebuilt
by running one CSS query per field and zipping the results by position with
the entry-container query. The zip is validated: a field scan that returns a
different number of nodes raises ParseInconsistency.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from bs4 import BeautifulSoup, Tag

from ptt_reader.errors import ParseInconsistency

logger = logging.getLogger(__name__)

HOT_RATE = "爆"
HOT_RATE_SENTINEL = -1

# Marker class -> tier, checked in order; first marker with text wins.
BOARD_LEVELS = (("f1", 1), ("f2", 2), ("f3", 3))
BOARD_LEVEL_DEFAULT = 4

HOT_BOARD_LEVELS = (("f6", 1), ("f4", 2), ("f1", 3), ("f3", 5))
HOT_BOARD_LEVEL_DEFAULT = 4

_HOT_BOARD_HREF_RE = re.compile(r"^/bbs/(.+)/index\.html$")
_TRAILING_DIGITS_RE = re.compile(r"\d+$")
_DIGITS_RE = re.compile(r"\d+")
_POST_FILE_RE = re.compile(r"^(.+)\.html$")
_INTEGER_RE = re.compile(r"-?[0-9]+")


def scan(soup: BeautifulSoup | Tag, selector: str, extract: Callable[[Tag], Any]) -> list[Any]:
    """Run one CSS query and map every match, in document order."""
    return [extract(node) for node in soup.select(selector)]


def count_nodes(soup: BeautifulSoup | Tag, selector: str) -> int:
    return len(soup.select(selector))


def align(expected: int, **columns: list[Any]) -> list[dict[str, Any]]:
    """
    Zip field columns into per-entry dicts by position.

    Raises:
        ParseInconsistency: a column length differs from ``expected``
    """
    for name, values in columns.items():
        if len(values) != expected:
            logger.error(
                "Field scan out of alignment: field=%s expected=%s actual=%s",
                name,
                expected,
                len(values),
            )
            raise ParseInconsistency(name, expected, len(values))

    return [{name: values[i] for name, values in columns.items()} for i in range(expected)]


def text_of(node: Tag) -> str:
    return node.get_text()


def strip_decoration(text: str) -> str:
    """Board titles start with a one-character bullet (e.g. ``◎``)."""
    return text[1:]


def parse_rate(text: str) -> int:
    text = text.strip()
    if text == HOT_RATE:
        return HOT_RATE_SENTINEL
    if not _INTEGER_RE.fullmatch(text):
        return 0
    return int(text)


def _level(node: Tag, table: tuple[tuple[str, int], ...], default: int) -> int:
    for marker, level in table:
        found = node.find(class_=marker)
        if found is not None and found.get_text():
            return level
    return default


def board_level(node: Tag) -> int:
    return _level(node, BOARD_LEVELS, BOARD_LEVEL_DEFAULT)


def hot_board_level(node: Tag) -> int:
    return _level(node, HOT_BOARD_LEVELS, HOT_BOARD_LEVEL_DEFAULT)


def hot_board_path(href: Optional[str]) -> str:
    """``/bbs/Gossiping/index.html`` -> ``Gossiping``."""
    m = _HOT_BOARD_HREF_RE.match(href or "")
    return m.group(1) if m else ""


def group_board_path(href: Optional[str]) -> str:
    """``/cls/3655`` -> ``3655``."""
    m = _TRAILING_DIGITS_RE.search(href or "")
    return m.group(0) if m else ""


def post_path(href: Optional[str]) -> str:
    """``/bbs/Gossiping/M.1700000000.A.B5C.html`` -> ``Gossiping/M.1700000000.A.B5C``."""
    parts = (href or "").split("/")
    if len(parts) < 2:
        return ""
    m = _POST_FILE_RE.match("/".join(parts[-2:]))
    return m.group(1) if m else ""


def page_id(href: Optional[str]) -> str:
    """``/bbs/Gossiping/index39120.html`` -> ``39120``."""
    last = (href or "").split("/")[-1]
    m = _DIGITS_RE.search(last)
    return m.group(0) if m else ""


def archive_path(href: Optional[str], board: str) -> str:
    """``/man/Board/D8C7/M.1.A.1/index.html`` -> ``D8C7/M.1.A.1``."""
    m = re.search(rf"(?<={re.escape(board)}/)(.+)(?=/index\.html)", href or "")
    return m.group(1) if m else ""
