import logging
from typing import Optional

from core.config import PAGE_SIZE_CHOICES, STRICT_PAGE_SIZE
from core.location import Location, decode_query_state, encode_query_state
from core.models import Article, NavigationHandoff, QueryState
from core.orchestrator import FetchOrchestrator

log = logging.getLogger("newsdesk.query_state")


class QueryStateController:
    """Owns {page, page_size, search} for the list surface.

    The location is read once by initialize(); afterwards every mutation
    writes the minimal encoding back and schedules a debounced fetch.
    """

    def __init__(self, orchestrator: FetchOrchestrator, location: Location,
                 strict_page_size: bool = STRICT_PAGE_SIZE):
        self.orchestrator = orchestrator
        self.location = location
        self.strict_page_size = strict_page_size
        self._state: Optional[QueryState] = None

    @property
    def state(self) -> QueryState:
        if self._state is None:
            raise RuntimeError("QueryStateController.initialize() non appele")
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def initialize(self) -> QueryState:
        if self._state is not None:
            return self._state
        self._state = decode_query_state(self.location.read(), self.strict_page_size)
        log.info("Vue liste montee: page=%s pageSize=%s search=%r",
                 self._state.page, self._state.page_size, self._state.search)
        self._write_location()
        self.orchestrator.schedule(self._state)
        return self._state

    def set_search(self, query: str) -> QueryState:
        return self._commit(self.state.with_search(query or ""))

    def set_page(self, page: int) -> QueryState:
        if page < 1:
            raise ValueError(f"page invalide: {page}")
        return self._commit(self.state.with_page(page))

    def set_page_size(self, page_size: int) -> QueryState:
        if page_size not in PAGE_SIZE_CHOICES:
            raise ValueError(f"pageSize invalide: {page_size} (choix: {PAGE_SIZE_CHOICES})")
        return self._commit(self.state.with_page_size(page_size))

    def handoff(self, article: Article) -> NavigationHandoff:
        return NavigationHandoff(article=article, origin=self.state)

    def _write_location(self) -> None:
        self.location.replace_query(encode_query_state(self.state))

    def _commit(self, new_state: QueryState) -> QueryState:
        if new_state == self.state:
            return new_state
        log.debug("Etat liste: %s -> %s", self._state, new_state)
        self._state = new_state
        self._write_location()
        self.orchestrator.schedule(new_state)
        return new_state
