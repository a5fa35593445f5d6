import discord

from core.config import EMBED_DESCRIPTION_MAX
from core.detail import DetailViewState
from core.models import resolve_article_url
from core.utils import format_published_at, parse_timestamp, strip_html_to_text, truncate_text
from views.base import View


class ArticleView(View):
    name = "article"

    def render(self, state: DetailViewState) -> discord.Embed:
        article = state.article
        parts = []
        if article.description:
            parts.append(f"**{strip_html_to_text(article.description)}**")
        if article.content:
            parts.append(strip_html_to_text(article.content))
        body = truncate_text("\n\n".join(parts), EMBED_DESCRIPTION_MAX)

        embed = self._embed(article.title or "No Title", body, url=resolve_article_url(article))
        embed.add_field(name="Source", value=article.source_name, inline=True)
        embed.add_field(name="Published", value=format_published_at(article.published_at, "%A %d %B %Y %H:%M"),
                        inline=True)
        if article.image_url:
            embed.set_image(url=article.image_url)
        ts = parse_timestamp(article.published_at)
        if ts is not None:
            embed.timestamp = ts
        if state.loading:
            embed.set_footer(text="Generating summary...")
        self._add_error(embed, state.error or "")
        return embed


class SummaryView(View):
    name = "summary"

    def render(self, state: DetailViewState) -> discord.Embed:
        text = state.summary.text if state.summary else ""
        embed = self._embed("Article Summary", truncate_text(text, EMBED_DESCRIPTION_MAX))
        embed.set_footer(text=truncate_text(state.article.title, 200))
        return embed
