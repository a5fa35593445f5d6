import discord

from core.config import EMBED_DESCRIPTION_MAX
from core.location import list_location
from core.models import QueryState
from core.orchestrator import ListViewState
from core.utils import format_published_at, strip_html_to_text, truncate_text
from views.base import View

EMPTY_MESSAGE = "No news articles available at the moment."


class NewsListView(View):
    name = "news-list"

    def __init__(self, title: str = "Indian Market News", description_max: int = 180):
        self.title = title
        self.description_max = description_max

    def _line(self, position: int, article) -> str:
        meta = f"{article.source_name} • {format_published_at(article.published_at)}"
        desc = truncate_text(strip_html_to_text(article.description) or "No description available",
                             self.description_max)
        return f"**{position}. {truncate_text(article.title or 'No Title', 200)}**\n*{meta}*\n{desc}"

    def render_body(self, view: ListViewState, query: QueryState) -> str:
        if view.loading:
            return "\n".join("▒▒▒▒▒▒▒▒▒▒▒▒" for _ in range(min(query.page_size, 5)))
        if not view.articles:
            return EMPTY_MESSAGE
        blocks = [self._line(i, a) for i, a in enumerate(view.articles, start=1)]
        return truncate_text("\n\n".join(blocks), EMBED_DESCRIPTION_MAX)

    def render(self, state) -> discord.Embed:
        view, query = state
        embed = self._embed(self.title, self.render_body(view, query))
        if query.search:
            embed.add_field(name="Search", value=truncate_text(query.search, 1024), inline=True)
        embed.add_field(name="Per page", value=str(query.page_size), inline=True)
        self._add_error(embed, view.error or "")
        if not view.loading:
            embed.set_footer(
                text=f"{view.total_count} articles found • page {query.page}/{view.total_pages}"
                     f" • {list_location(query)}"
            )
        return embed
