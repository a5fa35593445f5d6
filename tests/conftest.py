import asyncio
from typing import Any, Callable, List, Optional

import pytest

from core.models import Article, ListResult, QueryState, SummaryResult


def make_article(**overrides) -> Article:
    defaults = dict(
        id="a-1",
        title="Sensex closes higher",
        url="https://example.com/markets/sensex",
        description="Benchmarks gained for a third session.",
        content="<p>Full <b>content</b> here.</p>",
        source="Economic Times",
        published_at="2025-06-01T12:00:00Z",
        image_url="https://example.com/img.jpg",
    )
    defaults.update(overrides)
    return Article(**defaults)


def make_result(tag: str, count: int = 2, total_pages: int = 3, total_count: int = 25) -> ListResult:
    articles = tuple(make_article(id=f"{tag}-{i}", title=f"{tag} #{i}") for i in range(count))
    return ListResult(articles=articles, total_pages=total_pages, total_count=total_count)


class FakeNewsClient:
    """In-memory stand-in for NewsApiClient.

    With `manual=True` every list request parks on a future that the test
    resolves explicitly, so completion order is under test control.
    """

    def __init__(self, manual: bool = False):
        self.manual = manual
        self.list_calls: List[QueryState] = []
        self.pending: List[asyncio.Future] = []
        self.list_responder: Callable[[QueryState], Any] = lambda s: make_result(f"p{s.page}")
        self.indices_payload: Any = []
        self.indices_error: Optional[BaseException] = None
        self.indices_calls = 0
        self.summary_calls: List[str] = []
        self.summary_text = "A short summary."
        self.summary_error: Optional[BaseException] = None
        self.summary_gate: Optional[asyncio.Event] = None

    async def fetch_news_page(self, state: QueryState) -> ListResult:
        self.list_calls.append(state)
        if self.manual:
            fut = asyncio.get_running_loop().create_future()
            self.pending.append(fut)
            return await fut
        outcome = self.list_responder(state)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def resolve(self, index: int, outcome: Any) -> None:
        fut = self.pending[index]
        if isinstance(outcome, BaseException):
            fut.set_exception(outcome)
        else:
            fut.set_result(outcome)

    async def fetch_market_indices(self) -> Any:
        self.indices_calls += 1
        if self.indices_error is not None:
            raise self.indices_error
        return self.indices_payload

    async def summarize(self, url: str) -> SummaryResult:
        self.summary_calls.append(url)
        if self.summary_gate is not None:
            await self.summary_gate.wait()
        if self.summary_error is not None:
            raise self.summary_error
        return SummaryResult(text=self.summary_text)


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def client():
    return FakeNewsClient()


@pytest.fixture
def manual_client():
    return FakeNewsClient(manual=True)


@pytest.fixture
def article():
    return make_article()


@pytest.fixture
def article_factory():
    return make_article


@pytest.fixture
def result_factory():
    return make_result


@pytest.fixture
def waiter():
    return wait_until
