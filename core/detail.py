import logging
from dataclasses import dataclass
from typing import Any, Optional

from core.errors import FetchError, MissingResourceError, classify_error
from core.location import list_location
from core.models import Article, NavigationHandoff, QueryState, SummaryResult, resolve_article_url
from core.monitoring import HealthMonitor

log = logging.getLogger("newsdesk.detail")

SURFACE = "summarize"
NO_URL_MESSAGE = "No URL available for this article"


@dataclass
class DetailViewState:
    article: Article
    summary: Optional[SummaryResult] = None
    summary_open: bool = False
    loading: bool = False
    error: Optional[str] = None


class DetailViewGateway:
    """Summarization lifecycle for a single article.

    Failures are non-destructive: the article stays displayed, the error is
    shown inline and the user may simply try again.
    """

    def __init__(self, client, article: Article, origin: Optional[QueryState] = None,
                 monitor: Optional[HealthMonitor] = None):
        self.client = client
        self.origin = origin
        self.monitor = monitor
        self.view = DetailViewState(article=article)
        self._closed = False
        self.dispatched = 0

    @classmethod
    def from_handoff(cls, client, handoff: NavigationHandoff,
                     monitor: Optional[HealthMonitor] = None) -> "DetailViewGateway":
        return cls(client, handoff.article, origin=handoff.origin, monitor=monitor)

    @property
    def closed(self) -> bool:
        return self._closed

    async def summarize(self, entity: Any = None) -> Optional[SummaryResult]:
        if self._closed:
            return None
        if self.view.loading:
            log.debug("Resume deja en cours, appel ignore.")
            return None
        entity = self.view.article if entity is None else entity
        url = resolve_article_url(entity)
        if not url:
            self.view.error = NO_URL_MESSAGE
            raise MissingResourceError(NO_URL_MESSAGE)

        self.view.loading = True
        self.view.error = None
        self.view.summary = None
        self.view.summary_open = False
        self.dispatched += 1
        try:
            result = await self.client.summarize(url)
        except FetchError as e:
            self._on_failure(e)
            return None
        except Exception as e:
            log.exception("Erreur inattendue resume %s", url)
            self._on_failure(e)
            return None

        if self._closed:
            log.debug("Resume recu apres fermeture, ignore (%s).", url)
            return None
        self.view.summary = result
        self.view.summary_open = True
        self.view.loading = False
        if self.monitor:
            self.monitor.record_success(SURFACE)
        log.info("Resume genere (%d car.) pour %s", len(result.text), url)
        return result

    def _on_failure(self, err: BaseException) -> None:
        if self._closed:
            return
        message = classify_error(err, fallback="Failed to generate summary")
        self.view.error = message
        self.view.loading = False
        if self.monitor:
            self.monitor.record_failure(SURFACE, message)

    def dismiss_summary(self) -> None:
        self.view.summary_open = False
        self.view.summary = None

    def visit_url(self) -> Optional[str]:
        url = resolve_article_url(self.view.article)
        if not url:
            self.view.error = NO_URL_MESSAGE
            return None
        return url

    def back_location(self) -> str:
        return list_location(self.origin)

    def close(self) -> None:
        self._closed = True
