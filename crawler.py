import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional
from urllib.parse import quote

import httpx

from dom import Document, id_from_href, parse_count, parse_document
from errors import TransportError
from models import AnimeDetails, EpisodeCounts, HomePage, ListingEntry, SearchPage, SpotlightEntry


DEFAULT_BASE_URL = "https://hianime.to"

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


logger = logging.getLogger(__name__)


def _timeout_from_env() -> Optional[float]:
    raw = os.environ.get("HIANIME_TIMEOUT", "").strip()
    # 不设置就不限时，由部署平台自己的超时兜底
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid HIANIME_TIMEOUT=%r, requests will not time out", raw)
        return None


# ------------------------
# 抓取
# ------------------------
class Fetcher:
    """
    向上游站点发 GET 请求，返回 HTML 文本。
    - 伪装成桌面浏览器（User-Agent / Accept / Accept-Language / Referer）
    - 非 2xx 或网络异常统一抛 TransportError，不重试
    - 如设置 HIANIME_COOKIE，则携带 Cookie
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        timeout: Optional[float] = None,
        cookie: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or os.environ.get("HIANIME_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout if timeout is not None else _timeout_from_env()
        self.cookie = cookie if cookie is not None else os.environ.get("HIANIME_COOKIE", "").strip()
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        headers = dict(BROWSER_HEADERS)
        headers["Referer"] = self.base_url
        if self.cookie:
            headers["Cookie"] = self.cookie
        return headers

    def fetch(self, path: str) -> str:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers=self.headers,
                transport=self._transport,
            ) as client:
                resp = client.get(url)
        except httpx.HTTPError as e:
            self.logger.error("Fetch error: GET %s failed: %s", url, e)
            raise TransportError(str(e) or type(e).__name__) from e

        if not resp.is_success:
            message = f"HTTP {resp.status_code}: {resp.reason_phrase}"
            self.logger.error("Fetch error: GET %s -> %s", url, message)
            raise TransportError(message, upstream_status=resp.status_code)

        return resp.text


# ------------------------
# 核心解析：专用 DOM 选择器
# ------------------------
def _parse_listing(doc: Document, item, with_episodes: bool) -> ListingEntry:
    entry = {
        "id": id_from_href(doc.attr(doc.query_first("a.film-poster", item), "href")),
        "title": doc.text(doc.query_first(".film-name", item)),
        "poster": doc.attr(doc.query_first(".film-poster-img", item), "data-src"),
        "type": doc.text(doc.query_first(".fdi-item", item)),
        "duration": doc.text(doc.query_first(".fdi-duration", item)),
    }
    if with_episodes:
        entry["episode_counts"] = EpisodeCounts(
            sub=parse_count(doc.text(doc.query_first(".tick-sub", item))),
            dub=parse_count(doc.text(doc.query_first(".tick-dub", item))),
        )
    return ListingEntry(**entry)


def _labeled_value(doc: Document, label: str) -> str:
    """
    详情页的信息行是 <span class="item-title">Type:</span><span>TV</span>，
    找到含 label 的标题，再读它后面的兄弟节点。
    """
    title = doc.query_first(f'.item-title:-soup-contains("{label}")')
    return doc.text(doc.next_sibling(title))


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_home(doc: Document) -> HomePage:
    spotlight: List[SpotlightEntry] = []
    for rank, slide in enumerate(doc.query_all(".deslide-item"), start=1):
        spotlight.append(
            SpotlightEntry(
                id=id_from_href(doc.attr(doc.query_first("a", slide), "href")),
                title=doc.text(doc.query_first(".deslide-item-content h2", slide)),
                description=doc.text(doc.query_first(".deslide-item-content .sc-desc", slide)),
                poster=doc.attr(doc.query_first(".deslide-cover img", slide), "src"),
                rank=rank,
            )
        )

    trending = [
        _parse_listing(doc, item, with_episodes=False)
        for item in doc.query_all("#trending-home .film_list-wrap .flw-item")
    ]

    return HomePage(spotlight=spotlight, trending=trending, timestamp=_utc_timestamp())


def parse_search(doc: Document, query: str, page: int = 1) -> SearchPage:
    results = [_parse_listing(doc, item, with_episodes=True) for item in doc.query_all(".flw-item")]
    return SearchPage(results=results, current_page=page, query=query)


def parse_details(doc: Document, anime_id: str) -> AnimeDetails:
    return AnimeDetails(
        id=anime_id,
        title=doc.text(doc.query_first(".film-name")),
        poster=doc.attr(doc.query_first(".film-poster-img"), "src"),
        description=doc.text(doc.query_first(".film-description")),
        type=_labeled_value(doc, "Type:"),
        status=_labeled_value(doc, "Status:"),
        genres=[doc.text(a) for a in doc.query_all(".item-list a")],
        episode_counts=EpisodeCounts(
            sub=parse_count(doc.text(doc.query_first(".tick-sub"))),
            dub=parse_count(doc.text(doc.query_first(".tick-dub"))),
        ),
    )


# ------------------------
# 抓取入口
# ------------------------
def get_home_page(fetcher: Fetcher) -> HomePage:
    html = fetcher.fetch("/home")
    return parse_home(parse_document(html))


def search_anime(fetcher: Fetcher, query: str, page: int = 1) -> SearchPage:
    html = fetcher.fetch(f"/search?keyword={quote(query, safe='')}&page={page}")
    return parse_search(parse_document(html), query=query, page=page)


def get_anime_details(fetcher: Fetcher, anime_id: str) -> AnimeDetails:
    html = fetcher.fetch(f"/{quote(anime_id, safe='')}")
    return parse_details(parse_document(html), anime_id)
