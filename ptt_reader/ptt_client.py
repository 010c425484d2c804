from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from urllib.parse import urlencode

from bs4 import BeautifulSoup, Tag

from ptt_reader import fields
from ptt_reader.http_client import GatedPage, HttpClient
from ptt_reader.models import (
    ArchiveEntry,
    BoardItem,
    BoardListing,
    Comment,
    GroupBoardEntry,
    HotBoardEntry,
    Post,
    SearchListing,
)

logger = logging.getLogger(__name__)

Document = Union[str, BeautifulSoup]


class PttClient:
    """
    Extraction client for www.ptt.cc pages.

    Scope:
    - Hot boards:   /bbs/hotboards.html
    - Board groups: /cls/<page>
    - Board list:   /bbs/<board>/index<id>.html
    - Post:         /bbs/<board>/<post>.html
    - Archive:      /man/<board>/<page>/index.html
    - Search:       /bbs/<board>/search?page=<page>&q=<keyword>

    Every fetch goes through HttpClient.fetch_gated, so age-restricted boards
    are read with the over18 cookie and report need18up=True.
    """

    POST_TIME_FORMAT = "%a %b %d %H:%M:%S %Y"
    SIGNATURE_SEPARATOR = "--"

    _IP_RE = re.compile(r"\d+\.\d+\.\d+\.\d+")
    _COUNTRY_RE = re.compile(r"\(([\u4E00-\u9FFF]+)\)")
    _EDITED_RE = re.compile(r"\d\d/\d\d/\d\d\d\d \d\d:\d\d:\d\d")

    def __init__(self, base_url: str, http: HttpClient, utc_offset_hours: float = 8.0):
        self.base_url = base_url.rstrip("/")
        self.http = http
        self._tz = timezone(timedelta(hours=utc_offset_hours))

    # -------------------------
    # Fetching
    # -------------------------

    def get_hot_boards(self) -> list[HotBoardEntry]:
        url = f"{self.base_url}/bbs/hotboards.html"
        logger.info("Fetching hot boards: url=%s", url)
        page = self.http.fetch_gated(url)
        return self._parse_hot_boards_html(page.soup)

    def get_group_boards(self, page: Union[int, str] = 1) -> list[GroupBoardEntry]:
        url = f"{self.base_url}/cls/{page}"
        logger.info("Fetching board group: url=%s", url)
        fetched = self.http.fetch_gated(url)
        return self._parse_group_boards_html(fetched.soup)

    def get_board(self, name: str = "Gossiping", page_id: str = "") -> BoardListing:
        """
        Fetch one page of a board listing. An empty page_id requests the
        newest page.

        Raises:
            FetchError: on HTTP failure
            ParseInconsistency: if row fields cannot be aligned
        """
        page = self.fetch_board_page(name, page_id)
        return self._parse_board_listing(page, name)

    def fetch_board_page(self, name: str = "Gossiping", page_id: str = "") -> GatedPage:
        """Fetch raw board list page (useful for debugging DOM changes)."""
        url = f"{self.base_url}/bbs/{name}/index{page_id}.html"
        logger.info("Fetching board list: url=%s", url)
        return self.http.fetch_gated(url)

    def search_posts(self, board_name: str, keyword: str, page: str = "1") -> SearchListing:
        query = urlencode({"page": page, "q": keyword})
        url = f"{self.base_url}/bbs/{board_name}/search?{query}"
        logger.info("Searching board: url=%s", url)
        fetched = self.http.fetch_gated(url)
        return SearchListing(
            need18up=fetched.age_gated,
            data=tuple(self._parse_board_items(fetched.soup)),
            current_id=page,
            board_name=board_name,
            query=keyword,
        )

    def get_post(self, path: str) -> Post:
        """
        Fetch and parse a post detail page.

        Args:
            path: ``<board>/<post id>``, as found in BoardItem.href
        """
        url = f"{self.base_url}/bbs/{path}.html"
        logger.info("Fetching post: url=%s", url)
        page = self.http.fetch_gated(url)
        return self._parse_post_html(page.soup, path, need18up=page.age_gated)

    def get_board_archive(self, board_name: str, page: str = "") -> list[ArchiveEntry]:
        segments = [self.base_url, "man", board_name]
        if page:
            segments.append(page.strip("/"))
        url = "/".join(segments) + "/index.html"
        logger.info("Fetching board archive: url=%s", url)
        fetched = self.http.fetch_gated(url)
        return self._parse_archive_html(fetched.soup, board_name)

    # -------------------------
    # Parsing (unit-test target)
    # -------------------------

    def _parse_hot_boards_html(self, doc: Document) -> list[HotBoardEntry]:
        soup = _soup(doc)
        rows = fields.align(
            fields.count_nodes(soup, ".b-ent"),
            board_class=fields.scan(soup, ".board-class", fields.text_of),
            board_name=fields.scan(soup, ".board-name", fields.text_of),
            board_title=fields.scan(
                soup, ".board-title", lambda n: fields.strip_decoration(n.get_text())
            ),
            board_rate=fields.scan(soup, ".board-nuser", lambda n: fields.parse_rate(n.get_text())),
            board_level=fields.scan(soup, ".board-nuser", fields.hot_board_level),
            board_href=fields.scan(
                soup, ".b-ent > .board", lambda n: fields.hot_board_path(n.get("href"))
            ),
        )
        return [HotBoardEntry(id=str(i), **row) for i, row in enumerate(rows)]

    def _parse_group_boards_html(self, doc: Document) -> list[GroupBoardEntry]:
        soup = _soup(doc)
        rows = fields.align(
            fields.count_nodes(soup, ".b-ent"),
            board_class=fields.scan(soup, ".board-class", fields.text_of),
            board_name=fields.scan(soup, ".board-name", fields.text_of),
            board_title=fields.scan(
                soup, ".board-title", lambda n: fields.strip_decoration(n.get_text())
            ),
            board_href=fields.scan(
                soup, ".b-ent > .board", lambda n: fields.group_board_path(n.get("href"))
            ),
        )
        return [GroupBoardEntry(id=str(i), **row) for i, row in enumerate(rows)]

    def _parse_board_items(self, doc: Document) -> list[BoardItem]:
        soup = _soup(doc)
        rows = fields.align(
            fields.count_nodes(soup, ".r-ent"),
            title=fields.scan(soup, ".title", lambda n: n.get_text(strip=True)),
            href=fields.scan(soup, ".title", _title_href),
            author=fields.scan(soup, ".author", lambda n: n.get_text(strip=True)),
            date=fields.scan(soup, ".date", lambda n: n.get_text(strip=True)),
            rate=fields.scan(soup, ".nrec", lambda n: fields.parse_rate(n.get_text())),
            level=fields.scan(soup, ".nrec", fields.board_level),
        )
        return [BoardItem(id=str(i), **row) for i, row in enumerate(rows)]

    def _parse_board_listing(self, page: GatedPage, name: str) -> BoardListing:
        return BoardListing(
            need18up=page.age_gated,
            data=tuple(self._parse_board_items(page.soup)),
            current_id=self._parse_current_id(page.soup),
            board_name=name,
        )

    def _parse_current_id(self, doc: Document) -> str:
        # Pager order: oldest, previous, next, newest.
        buttons = _soup(doc).select(".btn-group-paging > .btn")
        if len(buttons) < 2:
            return ""
        return fields.page_id(buttons[1].get("href"))

    def _parse_post_html(self, doc: Document, path: str, need18up: bool = False) -> Post:
        soup = _soup(doc)

        meta = [
            line.select_one(".article-meta-value")
            for line in soup.select(".article-metaline")
        ]
        meta_text = [node.get_text() if node is not None else "" for node in meta[:3]]
        meta_text += [""] * (3 - len(meta_text))
        author, title, time_text = meta_text

        board_node = soup.select_one(".article-metaline-right > .article-meta-value")

        main = soup.select_one("#main-content")
        from_ip, from_country, edited = self._extract_trailer(main)

        return Post(
            page=path,
            need18up=need18up,
            author=author,
            title=title,
            time=self._parse_time(time_text),
            board=board_node.get_text() if board_node is not None else "",
            article=self._extract_article(main.get_text() if main is not None else ""),
            from_ip=from_ip,
            from_country=from_country,
            edited=edited,
            comments=tuple(self._extract_comments(soup)),
        )

    def _parse_archive_html(self, doc: Document, board_name: str) -> list[ArchiveEntry]:
        out: list[ArchiveEntry] = []
        for entry in _soup(doc).select(".m-ent"):
            title = entry.select_one(".title")
            anchor = entry.select_one(".title > a")
            out.append(
                ArchiveEntry(
                    content=title.get_text() if title is not None else "",
                    href=fields.archive_path(
                        anchor.get("href") if anchor is not None else None, board_name
                    ),
                )
            )
        return out

    # -------------------------
    # Helpers
    # -------------------------

    def _parse_time(self, text: str) -> int:
        try:
            dt = datetime.strptime(text.strip(), self.POST_TIME_FORMAT)
        except ValueError:
            logger.debug("Unparsable post time: %r", text)
            return 0
        return int(dt.replace(tzinfo=self._tz).timestamp() * 1000)

    def _extract_article(self, text: str) -> str:
        # Everything after the last separator is the signature block; the
        # first line is the metadata header flattened into text.
        body = self.SIGNATURE_SEPARATOR.join(text.split(self.SIGNATURE_SEPARATOR)[:-1])
        return "\n".join(body.split("\n")[1:]).rstrip("\n")

    def _extract_trailer(self, main: Optional[Tag]) -> tuple[str, str, str]:
        from_ip = from_country = edited = ""
        if main is None:
            return from_ip, from_country, edited

        tail = main.decode_contents().split(self.SIGNATURE_SEPARATOR)[-1]
        for index, node in enumerate(BeautifulSoup(tail, "lxml").select(".f2")):
            text = node.get_text()
            if index == 0:
                m = self._IP_RE.search(text)
                from_ip = m.group(0) if m else ""
                m = self._COUNTRY_RE.search(text)
                from_country = m.group(1) if m else ""
            elif index == 2:
                m = self._EDITED_RE.search(text)
                edited = m.group(0) if m else ""
        return from_ip, from_country, edited

    def _extract_comments(self, soup: BeautifulSoup) -> list[Comment]:
        comments: list[Comment] = []
        for i, push in enumerate(soup.select(".push")):
            comments.append(
                Comment(
                    id=str(i),
                    tag=_child_text(push, ".push-tag").strip(),
                    user=_child_text(push, ".push-userid").strip(),
                    # content starts with ": "
                    content=_child_text(push, ".push-content")[2:].strip(),
                    time=_child_text(push, ".push-ipdatetime").strip(),
                )
            )
        return comments


def _soup(doc: Document) -> BeautifulSoup:
    if isinstance(doc, BeautifulSoup):
        return doc
    return BeautifulSoup(doc, "lxml")


def _child_text(node: Tag, selector: str) -> str:
    child = node.select_one(selector)
    return child.get_text() if child is not None else ""


def _title_href(title: Tag) -> str:
    # Deleted posts keep the row but lose the anchor.
    anchor = title.find("a")
    if anchor is None or not anchor.get_text():
        return ""
    return fields.post_path(anchor.get("href"))
