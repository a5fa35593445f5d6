import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from core.errors import DataShapeError, FetchError, classify_error
from core.models import MarketIndex
from core.monitoring import HealthMonitor

log = logging.getLogger("newsdesk.polling")

SURFACE = "market-indices"

SKELETON = "skeleton"
DIMMED = "dimmed"
READY = "ready"


def normalize_indices(payload: Any) -> List[MarketIndex]:
    """Validate a /market-indices payload and coerce every item."""
    if not isinstance(payload, list) or not payload:
        raise DataShapeError("Invalid or empty data received")
    return [MarketIndex.from_payload(item) for item in payload]


@dataclass
class PanelState:
    indices: List[MarketIndex] = field(default_factory=list)
    loading: bool = False
    refreshing: bool = False
    error: Optional[str] = None
    last_updated: Optional[datetime] = None

    @property
    def presentation(self) -> str:
        if self.loading and not self.indices:
            return SKELETON
        if self.loading or self.refreshing:
            return DIMMED
        return READY

    @property
    def busy(self) -> bool:
        return self.loading or self.refreshing


class PollingPanel:
    """Market indices fetched on mount and on manual refresh only.

    A failed fetch keeps whatever was displayed before; only the error
    banner changes.
    """

    def __init__(self, client, monitor: Optional[HealthMonitor] = None):
        self.client = client
        self.monitor = monitor
        self.view = PanelState()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def mount(self) -> bool:
        return await self.fetch_indices(is_manual_refresh=False)

    async def refresh(self) -> bool:
        if self.view.busy:
            log.debug("Rafraichissement ignore: requete deja en cours.")
            return False
        return await self.fetch_indices(is_manual_refresh=True)

    async def fetch_indices(self, is_manual_refresh: bool = False) -> bool:
        """Returns True if fresh data was applied."""
        if self._closed:
            return False
        if is_manual_refresh:
            self.view.refreshing = True
        else:
            self.view.loading = True

        try:
            payload = await self.client.fetch_market_indices()
            indices = normalize_indices(payload)
        except FetchError as e:
            self._on_failure(e)
            return False
        except Exception as e:
            log.exception("Erreur inattendue indices de marche.")
            self._on_failure(e)
            return False

        if self._closed:
            return False
        self.view.indices = indices
        self.view.error = None
        self.view.last_updated = datetime.now(timezone.utc)
        self._settle()
        if self.monitor:
            self.monitor.record_success(SURFACE)
        log.info("Indices de marche: %d entree(s).", len(indices))
        return True

    def _on_failure(self, err: BaseException) -> None:
        if self._closed:
            return
        # Retain-on-error: self.view.indices is left untouched.
        message = classify_error(err, fallback="Failed to fetch market data")
        self.view.error = message
        self._settle()
        if self.monitor:
            self.monitor.record_failure(SURFACE, message)

    def _settle(self) -> None:
        self.view.loading = False
        self.view.refreshing = False

    def close(self) -> None:
        self._closed = True
