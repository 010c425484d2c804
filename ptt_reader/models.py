from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HotBoardEntry:
    """One row of /bbs/hotboards.html."""

    id: str
    board_class: str
    board_name: str
    board_title: str
    board_rate: int
    board_level: int
    board_href: str


@dataclass(frozen=True)
class GroupBoardEntry:
    """One row of a /cls/<group> page."""

    id: str
    board_class: str
    board_name: str
    board_title: str
    board_href: str


@dataclass(frozen=True)
class BoardItem:
    """Lightweight post reference parsed from a board list page."""

    id: str
    title: str
    href: str
    author: str
    date: str
    rate: int
    level: int


@dataclass(frozen=True)
class BoardListing:
    need18up: bool
    data: tuple[BoardItem, ...]
    current_id: str
    board_name: str


@dataclass(frozen=True)
class SearchListing(BoardListing):
    query: str = ""


@dataclass(frozen=True)
class Comment:
    id: str
    tag: str
    user: str
    content: str
    time: str


@dataclass(frozen=True)
class Post:
    """Full post object parsed from a post detail page."""

    page: str
    need18up: bool
    author: str
    title: str
    time: int  # epoch millis, 0 if unparsable
    board: str
    article: str
    from_ip: str
    from_country: str
    edited: str
    comments: tuple[Comment, ...] = ()


@dataclass(frozen=True)
class ArchiveEntry:
    """One entry of a /man/ (archive) index page."""

    content: str
    href: str
