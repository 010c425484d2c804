from __future__ import annotations

import logging
from dataclasses import dataclass
from http.cookiejar import DefaultCookiePolicy
from typing import Mapping, Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from ptt_reader.errors import FetchError

logger = logging.getLogger(__name__)

OVER18_COOKIE = {"over18": "1"}


@dataclass(frozen=True)
class HttpConfig:
    timeout_sec: Optional[float]
    user_agent: str


@dataclass(frozen=True)
class GatedPage:
    """Final page of a gated fetch, already parsed."""

    url: str
    html: str
    age_gated: bool
    soup: BeautifulSoup


def serialize_cookie(cookies: Mapping[str, str]) -> str:
    """Render cookies in Cookie header form: ``k=v; k2=v2``."""
    return "; ".join(f"{k}={quote(str(v), safe='')}" for k, v in cookies.items())


def has_over18_notice(soup: BeautifulSoup) -> bool:
    notice = soup.select_one(".over18-notice")
    return bool(notice and notice.get_text(strip=True))


class HttpClient:
    """
    Thin HTTP client wrapper:
    - Single GET per call, no retries, no rate limiting
    - Age gate: one retry with the over18 consent cookie
    - Non-2xx and network errors surface as FetchError

    Server-set cookies are refused, so calls never share state.
    """

    def __init__(self, config: HttpConfig, session: Optional[requests.Session] = None):
        self._cfg = config
        self._session = session or requests.Session()
        self._session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self._session.headers.update(
            {
                "User-Agent": self._cfg.user_agent,
            }
        )

    def get_text(self, url: str, cookies: Optional[Mapping[str, str]] = None) -> str:
        """
        GET an URL and return response body as text.

        Raises:
            FetchError: non-2xx response or network error
        """
        headers = {"Cookie": serialize_cookie(cookies)} if cookies else {}
        try:
            resp = self._session.get(url, headers=headers, timeout=self._cfg.timeout_sec)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error("HTTP GET failed: url=%s status=%s", url, status)
            raise FetchError(url, status=status, cause=e) from e
        except requests.RequestException as e:
            logger.error("HTTP GET failed: url=%s err=%s", url, e)
            raise FetchError(url, cause=e) from e

        resp.encoding = "utf-8"
        return resp.text

    def fetch_gated(self, url: str, cookies: Optional[Mapping[str, str]] = None) -> GatedPage:
        """
        GET an URL, re-requesting it once with ``over18=1`` if the age
        restriction notice is served instead of the page.

        Raises:
            FetchError: from either request
        """
        html = self.get_text(url, cookies)
        soup = BeautifulSoup(html, "lxml")
        if not has_over18_notice(soup):
            return GatedPage(url=url, html=html, age_gated=False, soup=soup)

        logger.info("Age gate detected, retrying with consent cookie: url=%s", url)
        html = self.get_text(url, {**(cookies or {}), **OVER18_COOKIE})
        soup = BeautifulSoup(html, "lxml")
        if has_over18_notice(soup):
            logger.warning("Still gated after consent retry: url=%s", url)
        return GatedPage(url=url, html=html, age_gated=True, soup=soup)
