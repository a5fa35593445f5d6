import re
import html
from datetime import datetime
from typing import Optional

from bs4 import BeautifulSoup


def truncate_text(text: str, limit: int) -> str:
    text = text or ""
    if len(text) > limit:
        return text[: max(0, limit - 3)] + "..."
    return text


def strip_html_to_text(raw_html: str) -> str:
    raw_html = raw_html or ""
    text = BeautifulSoup(raw_html, "html.parser").get_text("\n")
    text = html.unescape(text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def parse_timestamp(raw: str) -> Optional[datetime]:
    raw = (raw or "").strip()
    if not raw:
        return None
    # Go emits RFC 3339, possibly with nanoseconds and a trailing Z
    raw = re.sub(r"Z$", "+00:00", raw)
    raw = re.sub(r"(\.\d{6})\d+", r"\1", raw)
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def format_published_at(raw: str, fmt: str = "%d %b %Y %H:%M") -> str:
    dt = parse_timestamp(raw)
    if dt is None:
        return "No Date"
    return dt.strftime(fmt)


def format_indian_number(value: float) -> str:
    """Group digits the en-IN way: 12,34,567.89."""
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{frac}"


def format_price(price: Optional[float]) -> str:
    if price is None:
        return "N/A"
    return format_indian_number(price)


def format_signed(value: float, suffix: str = "") -> str:
    return f"{'+' if value >= 0 else ''}{value:.2f}{suffix}"
