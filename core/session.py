"""One mounted view: the list surface, the indices panel, and at most one
open article. A Discord channel owns exactly one session."""

import logging
from typing import Callable, List, Optional

from core.config import SEARCH_DEBOUNCE_SECONDS, STRICT_PAGE_SIZE
from core.detail import DetailViewGateway
from core.location import Location, decode_query_state
from core.models import Article
from core.monitoring import HealthMonitor
from core.orchestrator import FetchOrchestrator, ListViewState
from core.polling import PollingPanel
from core.query_state import QueryStateController

log = logging.getLogger("newsdesk.session")


class ChannelSession:
    def __init__(self, client, location: str = "/", monitor: Optional[HealthMonitor] = None,
                 debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
                 strict_page_size: bool = STRICT_PAGE_SIZE):
        self.client = client
        self.monitor = monitor
        self.debounce_seconds = debounce_seconds
        self.strict_page_size = strict_page_size
        self.location = Location(location)
        self.orchestrator = FetchOrchestrator(client, debounce_seconds, monitor=monitor)
        self.controller = QueryStateController(self.orchestrator, self.location, strict_page_size)
        self.panel = PollingPanel(client, monitor=monitor)
        self.detail: Optional[DetailViewGateway] = None
        self._list_listeners: List[Callable[[ListViewState], None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def add_list_listener(self, callback: Callable[[ListViewState], None]) -> None:
        """Registered on the current orchestrator and on any remounted one."""
        self._list_listeners.append(callback)
        self.orchestrator.add_listener(callback)

    async def mount(self) -> None:
        """Read the location, schedule the list fetch and poll the indices once."""
        self.controller.initialize()
        await self.panel.mount()

    def article_at(self, position: int) -> Optional[Article]:
        """1-based position in the currently displayed page."""
        articles = self.orchestrator.view.articles
        if 1 <= position <= len(articles):
            return articles[position - 1]
        return None

    def open_article(self, article: Article) -> DetailViewGateway:
        if self.detail is not None:
            self.detail.close()
        handoff = self.controller.handoff(article)
        self.detail = DetailViewGateway.from_handoff(self.client, handoff, monitor=self.monitor)
        log.debug("Article ouvert: %s", article.title[:60])
        return self.detail

    def back(self) -> str:
        """Leave the article and remount the list at the origin location."""
        if self.detail is None:
            return self.location.read()
        target = self.detail.back_location()
        self.detail.close()
        self.detail = None
        # The origin is restored from the handoff, never from the location.
        if decode_query_state(target, self.strict_page_size) != self.controller.state:
            self.orchestrator.close()
            self.location = Location(target)
            self.orchestrator = FetchOrchestrator(self.client, self.debounce_seconds, monitor=self.monitor)
            for cb in self._list_listeners:
                self.orchestrator.add_listener(cb)
            self.controller = QueryStateController(self.orchestrator, self.location, self.strict_page_size)
            self.controller.initialize()
        return target

    async def settle(self) -> None:
        await self.orchestrator.settle()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.orchestrator.close()
        self.panel.close()
        if self.detail is not None:
            self.detail.close()
        log.info("Session fermee (%s).", self.location.read())
