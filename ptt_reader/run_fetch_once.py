from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

from ptt_reader.errors import FetchError
from ptt_reader.http_client import HttpClient, HttpConfig
from ptt_reader.models import Post
from ptt_reader.ptt_client import PttClient
from ptt_reader.settings import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main() -> None:
    s = load_settings()

    http = HttpClient(
        HttpConfig(
            timeout_sec=s.request_timeout_sec,
            user_agent=s.user_agent,
        )
    )

    client = PttClient(
        base_url=s.ptt_base_url,
        http=http,
        utc_offset_hours=s.utc_offset_hours,
    )

    # Fetch the newest page once; the same HTML is dumped when parsing yields 0 entries
    page = client.fetch_board_page(s.board)
    listing = client._parse_board_listing(page, s.board)
    logger.info(
        "Fetched board: board=%s entries=%s current_id=%s need18up=%s",
        listing.board_name,
        len(listing.data),
        listing.current_id,
        listing.need18up,
    )

    if not listing.data and s.dump_html_on_empty:
        # Markup probably changed; keep the page for inspection.
        Path(s.dump_html_path).write_text(page.html, encoding="utf-8")
        logger.warning("No entries parsed. Dumped HTML to: %s", s.dump_html_path)

    posts: list[Post] = []
    for item in listing.data:
        if len(posts) >= s.max_posts_per_run:
            break
        if not item.href:
            continue
        try:
            posts.append(client.get_post(item.href))
        except FetchError as e:
            logger.warning("Skipping post due to error: href=%s err=%s", item.href, e)

    logger.info("Fetched posts: %s", len(posts))

    sample = [
        {
            **{k: v for k, v in asdict(p).items() if k not in ("article", "comments")},
            "article_preview": (p.article[:120] + "…") if len(p.article) > 120 else p.article,
            "comment_count": len(p.comments),
        }
        for p in posts
    ]
    print(json.dumps(sample, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
