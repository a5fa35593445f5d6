"""Debounced, generation-guarded requests to the news list endpoint.

Only the response to the most recently issued request may touch the visible
list. Responses to superseded requests are dropped without a trace, whether
they succeeded or failed, and regardless of the order in which they arrive.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple

from core.config import SEARCH_DEBOUNCE_SECONDS
from core.errors import FetchError, classify_error
from core.models import Article, ListResult, QueryState
from core.monitoring import HealthMonitor
from core.scheduling import DelayedTask

log = logging.getLogger("newsdesk.orchestrator")

SURFACE = "news-list"


@dataclass
class ListViewState:
    articles: Tuple[Article, ...] = ()
    total_pages: int = 1
    total_count: int = 0
    loading: bool = False
    error: Optional[str] = None
    last_state: Optional[QueryState] = None

    def apply_result(self, state: QueryState, result: ListResult) -> None:
        self.articles = result.articles
        self.total_pages = result.total_pages
        self.total_count = result.total_count
        self.error = None
        self.last_state = state

    def apply_failure(self, state: QueryState, message: str) -> None:
        # Clear-on-error: nothing from the previous result survives.
        self.articles = ()
        self.total_pages = 1
        self.total_count = 0
        self.error = message
        self.last_state = state


class FetchOrchestrator:
    def __init__(self, client, debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
                 monitor: Optional[HealthMonitor] = None):
        self.client = client
        self.debounce_seconds = debounce_seconds
        self.monitor = monitor
        self.view = ListViewState()
        self._generation = 0
        self._timer: Optional[DelayedTask] = None
        self._inflight: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[ListViewState], None]] = []
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def add_listener(self, callback: Callable[[ListViewState], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            try:
                cb(self.view)
            except Exception:
                log.exception("Listener en erreur.")

    # ── debounce ─────────────────────────────────────────────

    def schedule(self, state: QueryState) -> DelayedTask:
        """Coalesce rapid state changes; only the latest one is requested."""
        if self._closed:
            raise RuntimeError("orchestrator ferme")
        if self._timer is not None and self._timer.pending:
            self._timer.cancel()
        self._timer = DelayedTask(self.debounce_seconds, lambda: self._dispatch(state),
                                  name="news-list-debounce").start()
        return self._timer

    async def _dispatch(self, state: QueryState) -> None:
        task = asyncio.ensure_future(self.request_list(state))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def settle(self) -> None:
        """Wait until no debounce timer is pending and no request is in flight."""
        while True:
            if self._timer is not None and not self._timer.fired and not self._timer.cancelled:
                await self._timer.wait()
                continue
            if self._inflight:
                await asyncio.gather(*list(self._inflight), return_exceptions=True)
                continue
            return

    # ── requests ─────────────────────────────────────────────

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def request_list(self, state: QueryState) -> Optional[ListResult]:
        """Issue one list request now. Returns the result if it was applied."""
        if self._closed:
            return None
        self._generation += 1
        generation = self._generation
        self.view.loading = True
        self._notify()

        try:
            result = await self.client.fetch_news_page(state)
        except FetchError as e:
            return self._on_failure(generation, state, e)
        except Exception as e:
            log.exception("Erreur inattendue requete liste (gen=%d).", generation)
            return self._on_failure(generation, state, e)

        if not self._is_current(generation):
            log.debug("Reponse obsolete ignoree (gen=%d, courante=%d).", generation, self._generation)
            return None
        self.view.apply_result(state, result)
        self.view.loading = False
        if self.monitor:
            self.monitor.record_success(SURFACE)
        self._notify()
        return result

    def _on_failure(self, generation: int, state: QueryState, err: BaseException) -> None:
        if not self._is_current(generation):
            log.debug("Erreur obsolete ignoree (gen=%d): %s", generation, err)
            return None
        message = classify_error(err, fallback="Failed to load news articles.")
        self.view.apply_failure(state, message)
        self.view.loading = False
        if self.monitor:
            self.monitor.record_failure(SURFACE, message)
        self._notify()
        return None

    def close(self) -> None:
        """Teardown: pending timer cancelled, later responses discarded."""
        if self._closed:
            return
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
        self._generation += 1
        log.debug("Orchestrateur ferme (%d requete(s) en vol).", len(self._inflight))
