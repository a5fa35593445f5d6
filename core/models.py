import math
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple

from core.config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from core.errors import DataShapeError


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _source_name(raw: Any) -> str:
    # {"source": {"name": "..."}} or {"source": "..."}
    if isinstance(raw, Mapping):
        return _str(raw.get("name")).strip()
    return _str(raw).strip()


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    # json accepts NaN and Infinity
    return number if math.isfinite(number) else None


def _count(value: Any, floor: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return floor
    return max(floor, n)


@dataclass(frozen=True)
class Article:
    title: str
    url: str
    description: str = ""
    content: str = ""
    source: str = ""
    published_at: str = ""  # timestamp brut du serveur
    image_url: str = ""
    id: Optional[str] = None

    @property
    def source_name(self) -> str:
        return self.source or "Unknown Source"

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Article":
        if not isinstance(data, Mapping):
            raise DataShapeError("Invalid article received from server")
        raw_id = data.get("id")
        return cls(
            id=None if raw_id in (None, "") else str(raw_id),
            title=_str(data.get("title")),
            url=_str(data.get("URL") or data.get("url")),
            description=_str(data.get("description")),
            content=_str(data.get("content")),
            source=_source_name(data.get("source")),
            published_at=_str(data.get("publishedAt")),
            image_url=_str(data.get("imageURL") or data.get("urlToImage")),
        )


def resolve_article_url(entity: Any) -> str:
    """Return the article URL from either the `URL` or `url` field, or ""."""
    if entity is None:
        return ""
    for key in ("URL", "url"):
        if isinstance(entity, Mapping):
            value = entity.get(key)
        else:
            value = getattr(entity, key, None)
        if value:
            return str(value)
    return ""


@dataclass(frozen=True)
class QueryState:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    search: str = ""

    def with_search(self, search: str) -> "QueryState":
        return replace(self, search=search, page=DEFAULT_PAGE)

    def with_page(self, page: int) -> "QueryState":
        return replace(self, page=page)

    def with_page_size(self, page_size: int) -> "QueryState":
        return replace(self, page_size=page_size, page=DEFAULT_PAGE)

    def request_params(self) -> dict:
        params = {"page": str(self.page), "pageSize": str(self.page_size)}
        term = self.search.strip()
        if term:
            params["search"] = term
        return params


@dataclass(frozen=True)
class ListResult:
    articles: Tuple[Article, ...] = ()
    total_pages: int = 1
    total_count: int = 0
    current_page: Optional[int] = None

    @classmethod
    def from_payload(cls, data: Any) -> "ListResult":
        if not isinstance(data, Mapping):
            raise DataShapeError("Invalid data format received from server")
        raw_articles = data.get("articles")
        if raw_articles is None:
            raw_articles = []
        if not isinstance(raw_articles, list):
            raise DataShapeError("Invalid data format received from server")
        current = data.get("currentPage")
        return cls(
            articles=tuple(Article.from_payload(a) for a in raw_articles),
            total_pages=_count(data.get("totalPages"), 1),
            total_count=_count(data.get("totalCount"), 0),
            current_page=current if isinstance(current, int) and not isinstance(current, bool) else None,
        )


@dataclass(frozen=True)
class MarketIndex:
    symbol: str
    name: str = ""
    price: Optional[float] = None
    change: float = 0.0
    change_perc: float = 0.0
    is_delayed: bool = False
    is_historical: bool = False
    updated_at: str = ""

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "MarketIndex":
        if not isinstance(data, Mapping):
            raise DataShapeError("Invalid or empty data received")
        perc = data.get("changePerc")
        if _number(perc) is None:
            perc = data.get("changePercentage")
        delayed = bool(data.get("isDelayed") or False)
        return cls(
            symbol=_str(data.get("symbol")),
            name=_str(data.get("name")),
            price=_number(data.get("price")),
            change=_number(data.get("change")) or 0.0,
            change_perc=_number(perc) or 0.0,
            is_delayed=delayed,
            is_historical=delayed,
            updated_at=_str(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class SummaryResult:
    text: str


@dataclass(frozen=True)
class NavigationHandoff:
    """Article plus the list state it was opened from, passed out-of-band."""
    article: Article
    origin: QueryState
