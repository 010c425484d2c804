"""
Segment transformers for rendering post text.

Both functions cut plain text around URLs and interleave whatever the callback
returns for each URL, keeping every non-matching character in order.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Iterable, TypeVar, Union

T = TypeVar("T")

IMAGE_URL_RE = re.compile(
    r"https?://(?:[a-zA-Z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[a-fA-F0-9]{2})*"
    r"\.(?:jpg|jpeg|png|gif|bmp|svg|webp)"
)
URL_RE = re.compile(r"https?://\S+")


def transform_images(text: str, callback: Callable[[str, int], T]) -> list[Union[str, T]]:
    """
    Split ``text`` around image URLs.

    Returns ``[text, callback(url0, 0), text, callback(url1, 1), ..., text]``;
    text segments may be empty strings.
    """
    out: list[Union[str, T]] = []
    last = 0
    for index, m in enumerate(IMAGE_URL_RE.finditer(text)):
        out.append(text[last : m.start()])
        out.append(callback(m.group(0), index))
        last = m.end()
    out.append(text[last:])
    return out


def transform_urls(segments: Iterable[Any], callback: Callable[[str, int], T]) -> list[Any]:
    """
    Split every string segment around ``http(s)://`` URLs.

    Non-string segments (e.g. results of transform_images) pass through
    unchanged. The ordinal given to ``callback`` restarts at 0 for each
    segment. Text before a URL is always emitted, even when empty; a trailing
    remainder only when non-empty.
    """
    out: list[Any] = []
    for item in segments:
        if not isinstance(item, str):
            out.append(item)
            continue

        matches = list(URL_RE.finditer(item))
        if not matches:
            out.append(item)
            continue

        last = 0
        for index, m in enumerate(matches):
            out.append(item[last : m.start()])
            out.append(callback(m.group(0), index))
            last = m.end()
        if last < len(item):
            out.append(item[last:])
    return out
