import asyncio

import pytest

from core.location import Location
from core.models import QueryState
from core.orchestrator import FetchOrchestrator
from core.query_state import QueryStateController


def _controller(client, href="/", debounce=0.02, strict=False):
    orch = FetchOrchestrator(client, debounce_seconds=debounce)
    return QueryStateController(orch, Location(href), strict_page_size=strict)


# ── initialize ────────────────────────────────────────────────

class TestInitialize:
    def test_reads_location_once(self, client):
        async def scenario():
            ctrl = _controller(client, "/?page=3&pageSize=20&search=infosys")
            state = ctrl.initialize()
            await ctrl.orchestrator.settle()
            return ctrl, state

        ctrl, state = asyncio.run(scenario())
        assert state == QueryState(3, 20, "infosys")
        assert client.list_calls == [state]

    def test_defaults_on_garbage(self, client):
        async def scenario():
            ctrl = _controller(client, "/?page=x&pageSize=y")
            state = ctrl.initialize()
            await ctrl.orchestrator.settle()
            return ctrl, state

        ctrl, state = asyncio.run(scenario())
        assert state == QueryState()
        assert ctrl.location.read() == "/"

    def test_canonicalizes_location(self, client):
        async def scenario():
            ctrl = _controller(client, "/?page=1&pageSize=10&search=")
            ctrl.initialize()
            await ctrl.orchestrator.settle()
            return ctrl

        assert asyncio.run(scenario()).location.read() == "/"

    def test_location_not_reparsed_after_mount(self, client):
        async def scenario():
            ctrl = _controller(client, "/?page=2")
            ctrl.initialize()
            ctrl.location.href = "/?page=9"
            again = ctrl.initialize()
            await ctrl.orchestrator.settle()
            return again

        assert asyncio.run(scenario()).page == 2

    def test_state_before_initialize(self, client):
        with pytest.raises(RuntimeError):
            _controller(client).state


# ── mutations ─────────────────────────────────────────────────

class TestMutations:
    def test_search_burst_issues_one_request_on_page_one(self, client):
        async def scenario():
            ctrl = _controller(client, "/?page=4")
            ctrl.initialize()
            await ctrl.orchestrator.settle()
            client.list_calls.clear()
            for q in ("r", "re", "rel", "reliance"):
                ctrl.set_search(q)
            await ctrl.orchestrator.settle()
            return ctrl

        ctrl = asyncio.run(scenario())
        assert client.list_calls == [QueryState(page=1, page_size=10, search="reliance")]
        assert ctrl.state.page == 1
        assert ctrl.location.read() == "/?search=reliance"

    def test_page_size_change_resets_page(self, client):
        async def scenario():
            ctrl = _controller(client, "/?page=3&search=tcs")
            ctrl.initialize()
            await ctrl.orchestrator.settle()
            client.list_calls.clear()
            ctrl.set_page_size(20)
            await ctrl.orchestrator.settle()
            return ctrl

        ctrl = asyncio.run(scenario())
        assert client.list_calls == [QueryState(page=1, page_size=20, search="tcs")]
        assert ctrl.location.read() == "/?pageSize=20&search=tcs"

    def test_set_page_keeps_search_and_size(self, client):
        async def scenario():
            ctrl = _controller(client, "/?pageSize=50&search=gold")
            ctrl.initialize()
            ctrl.set_page(2)
            await ctrl.orchestrator.settle()
            return ctrl

        ctrl = asyncio.run(scenario())
        assert ctrl.state == QueryState(2, 50, "gold")
        assert ctrl.location.read() == "/?page=2&pageSize=50&search=gold"
        assert client.list_calls == [QueryState(2, 50, "gold")]

    def test_every_mutation_writes_location(self, client):
        async def scenario():
            ctrl = _controller(client)
            ctrl.initialize()
            ctrl.set_page(2)
            ctrl.set_page(3)
            ctrl.set_search("")
            await ctrl.orchestrator.settle()
            return ctrl

        ctrl = asyncio.run(scenario())
        # mount + three mutations
        assert ctrl.location.writes == 4
        assert ctrl.location.read() == "/"

    def test_unchanged_state_is_noop(self, client):
        async def scenario():
            ctrl = _controller(client)
            ctrl.initialize()
            await ctrl.orchestrator.settle()
            writes = ctrl.location.writes
            ctrl.set_page(1)
            ctrl.set_search("")
            await ctrl.orchestrator.settle()
            return ctrl, writes

        ctrl, writes = asyncio.run(scenario())
        assert ctrl.location.writes == writes
        assert len(client.list_calls) == 1

    def test_invalid_page_rejected(self, client):
        async def scenario():
            ctrl = _controller(client)
            ctrl.initialize()
            with pytest.raises(ValueError):
                ctrl.set_page(0)
            await ctrl.orchestrator.settle()

        asyncio.run(scenario())

    @pytest.mark.parametrize("size", [0, 25, 100])
    def test_page_size_outside_choices_rejected(self, client, size):
        async def scenario():
            ctrl = _controller(client)
            ctrl.initialize()
            await ctrl.orchestrator.settle()
            writes = ctrl.location.writes
            with pytest.raises(ValueError):
                ctrl.set_page_size(size)
            await ctrl.orchestrator.settle()
            return ctrl, writes

        ctrl, writes = asyncio.run(scenario())
        assert ctrl.state.page_size == 10
        assert ctrl.location.writes == writes
        assert len(client.list_calls) == 1

    def test_out_of_set_page_size_preserved_by_default(self, client):
        async def scenario():
            ctrl = _controller(client, "/?pageSize=25")
            state = ctrl.initialize()
            await ctrl.orchestrator.settle()
            return ctrl, state

        ctrl, state = asyncio.run(scenario())
        assert state.page_size == 25
        assert ctrl.location.read() == "/?pageSize=25"

    def test_out_of_set_page_size_clamped_when_strict(self, client):
        async def scenario():
            ctrl = _controller(client, "/?pageSize=25", strict=True)
            state = ctrl.initialize()
            await ctrl.orchestrator.settle()
            return state

        assert asyncio.run(scenario()).page_size == 10


# ── handoff ───────────────────────────────────────────────────

class TestHandoff:
    def test_handoff_carries_origin(self, client, article):
        async def scenario():
            ctrl = _controller(client, "/?page=2&search=itc")
            ctrl.initialize()
            await ctrl.orchestrator.settle()
            return ctrl.handoff(article)

        handoff = asyncio.run(scenario())
        assert handoff.article is article
        assert handoff.origin == QueryState(page=2, search="itc")
