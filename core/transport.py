import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.config import (
    NEWSDESK_API_URL, NEWS_LIST_PATH, MARKET_INDICES_PATH, SUMMARIZE_PATH, REQUEST_TIMEOUT,
)
from core.errors import TRANSPORT_MESSAGE, DataShapeError, FetchError, ServerError, TransportError
from core.models import ListResult, QueryState, SummaryResult

log = logging.getLogger("newsdesk.transport")


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class NewsApiClient:
    """aiohttp client for the news service. Every failure leaves as a FetchError."""

    def __init__(self, base_url: str = NEWSDESK_API_URL, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(self, method: str, path: str, *,
                       params: Optional[Dict[str, str]] = None,
                       json_body: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> Any:
        url = self.build_url(path)
        sess = await self._ensure_session()
        req_headers = {"Accept": "application/json"}
        req_headers.update(headers or {})
        try:
            async with sess.request(method, url, params=params, json=json_body,
                                    headers=req_headers,
                                    timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                try:
                    text = await resp.text()
                except UnicodeDecodeError:
                    log.warning("%s %s -> %d: corps non decodable", method, url, resp.status)
                    text = None
                if not 200 <= resp.status < 300:
                    log.warning("%s %s -> %d body=%s", method, url, resp.status, (text or "")[:300])
                    body = _parse_body(text) if text is not None else None
                    raise ServerError(resp.status, body, message=resp.reason or "")
                if text is None:
                    raise DataShapeError("Invalid data format received from server")
        except FetchError:
            raise
        except asyncio.TimeoutError as e:
            log.warning("%s %s: timeout apres %.1fs", method, url, self.timeout)
            raise TransportError(TRANSPORT_MESSAGE) from e
        except aiohttp.ClientError as e:
            log.warning("%s %s: erreur reseau: %s", method, url, e)
            raise TransportError(TRANSPORT_MESSAGE) from e

        try:
            return json.loads(text) if text else None
        except ValueError as e:
            raise DataShapeError("Invalid data format received from server") from e

    async def fetch_news_page(self, state: QueryState) -> ListResult:
        params = state.request_params()
        log.debug("News list: page=%s pageSize=%s search=%r",
                  state.page, state.page_size, params.get("search", ""))
        payload = await self._request("GET", NEWS_LIST_PATH, params=params)
        result = ListResult.from_payload(payload)
        log.debug("News list: %d article(s) (page %s/%s, total %s)",
                  len(result.articles), state.page, result.total_pages, result.total_count)
        return result

    async def fetch_market_indices(self) -> Any:
        """Raw payload; shape validation belongs to the polling panel."""
        return await self._request(
            "GET", MARKET_INDICES_PATH,
            headers={"Cache-Control": "no-cache", "X-Requested-With": "XMLHttpRequest"},
        )

    async def summarize(self, url: str) -> SummaryResult:
        payload = await self._request("POST", SUMMARIZE_PATH, json_body={"url": url})
        summary = payload.get("summary") if isinstance(payload, dict) else None
        if not isinstance(summary, str):
            raise DataShapeError("Invalid summary received from server")
        return SummaryResult(text=summary)
