"""QueryState <-> addressable location.

The encoding is minimal: a field at its default is omitted, so the default
state encodes to "" and "" decodes to the default state.
"""

import logging
from typing import Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlparse

from core.config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, PAGE_SIZE_CHOICES
from core.models import QueryState

log = logging.getLogger("newsdesk.location")

LIST_PATH = "/"


def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def split_query(location: str) -> Dict[str, str]:
    """Accept "/?a=1", "?a=1", "a=1" or a full URL; last value wins."""
    location = (location or "").strip()
    if "?" in location:
        query = urlparse(location).query
    else:
        query = location if "=" in location else ""
    return dict(parse_qsl(query, keep_blank_values=True))


def decode_query_state(location: str, strict_page_size: bool = False) -> QueryState:
    params = split_query(location)
    page = _positive_int(params.get("page"), DEFAULT_PAGE)
    page_size = _positive_int(params.get("pageSize"), DEFAULT_PAGE_SIZE)
    if page_size not in PAGE_SIZE_CHOICES:
        if strict_page_size:
            log.info("pageSize=%s hors choix %s, retour a %s.", page_size, PAGE_SIZE_CHOICES, DEFAULT_PAGE_SIZE)
            page_size = DEFAULT_PAGE_SIZE
        else:
            log.debug("pageSize=%s hors choix %s, conserve tel quel.", page_size, PAGE_SIZE_CHOICES)
    return QueryState(page=page, page_size=page_size, search=params.get("search", ""))


def encode_query_state(state: QueryState) -> str:
    params = []
    if state.page != DEFAULT_PAGE:
        params.append(("page", str(state.page)))
    if state.page_size != DEFAULT_PAGE_SIZE:
        params.append(("pageSize", str(state.page_size)))
    if state.search:
        params.append(("search", state.search))
    return urlencode(params)


def list_location(state: Optional[QueryState]) -> str:
    """Full location of the list view for `state` ("/" for the default state)."""
    query = encode_query_state(state) if state is not None else ""
    return f"{LIST_PATH}?{query}" if query else LIST_PATH


class Location:
    """The mutable addressable location of one mounted view."""

    def __init__(self, href: str = LIST_PATH):
        self.href = href or LIST_PATH
        self.writes = 0

    def read(self) -> str:
        return self.href

    def replace_query(self, query: str) -> None:
        self.href = f"{LIST_PATH}?{query}" if query else LIST_PATH
        self.writes += 1
