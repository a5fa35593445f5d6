import asyncio
import logging
from typing import Dict, Optional

import discord
from discord.ext import commands

from core.config import (
    COMMAND_PREFIX, DISCORD_TOKEN, FAILURE_ALERT_THRESHOLD, LOG_LEVEL, PAGE_SIZE_CHOICES,
    validate_required_env,
)
from core.errors import MissingResourceError
from core.monitoring import HealthMonitor
from core.orchestrator import ListViewState
from core.session import ChannelSession
from core.transport import NewsApiClient

# Views
from views.article import ArticleView, SummaryView
from views.market import MarketIndicesView
from views.news_list import NewsListView


logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
                    format="%(asctime)s %(levelname)s %(name)s %(message)s")
log = logging.getLogger("newsdesk-bot")


# =========================
# BOT INIT
# =========================

intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix=COMMAND_PREFIX, intents=intents)

api_client = NewsApiClient()
monitor = HealthMonitor(alert_threshold=FAILURE_ALERT_THRESHOLD)

news_view = NewsListView()
article_view = ArticleView()
summary_view = SummaryView()
market_view = MarketIndicesView()

# channel_id -> session
sessions: Dict[int, ChannelSession] = {}


# =========================
# SESSIONS
# =========================

def get_session(ctx: commands.Context) -> Optional[ChannelSession]:
    return sessions.get(ctx.channel.id)


async def require_session(ctx: commands.Context) -> Optional[ChannelSession]:
    session = get_session(ctx)
    if session is None:
        await ctx.send(f"ℹ️ No view open here. Use `{COMMAND_PREFIX}news`.")
    return session


async def _send_typing(channel: discord.abc.Messageable) -> None:
    try:
        await channel.typing()
    except discord.HTTPException as e:
        log.debug("Indicateur de saisie impossible: %s", e)


def typing_listener(channel: discord.abc.Messageable):
    """Show Discord's typing indicator while the list is loading."""
    def on_change(view: ListViewState) -> None:
        if view.loading:
            asyncio.ensure_future(_send_typing(channel))
    return on_change


async def mount_session(ctx: commands.Context, location: str) -> ChannelSession:
    old = sessions.pop(ctx.channel.id, None)
    if old is not None:
        old.close()
    session = ChannelSession(api_client, location=location or "/", monitor=monitor)
    session.add_list_listener(typing_listener(ctx.channel))
    sessions[ctx.channel.id] = session
    await session.mount()
    return session


async def send_list(ctx: commands.Context, session: ChannelSession) -> None:
    await session.settle()
    if session.closed:
        return
    view = session.orchestrator.view
    await ctx.send(embed=news_view.render((view, session.controller.state)))


# =========================
# LIST SURFACE
# =========================

@bot.command(name="news")
async def news(ctx: commands.Context, location: str = "/"):
    """Mount the list view, optionally at a location such as /?page=2&search=nifty."""
    session = await mount_session(ctx, location)
    await ctx.send(embed=market_view.render(session.panel.view))
    await send_list(ctx, session)


@bot.command(name="search")
async def search(ctx: commands.Context, *, query: str = ""):
    session = await require_session(ctx)
    if session is None:
        return
    session.controller.set_search(query)
    await send_list(ctx, session)


@bot.command(name="page")
async def page(ctx: commands.Context, number: int):
    session = await require_session(ctx)
    if session is None:
        return
    if number < 1 or number > max(1, session.orchestrator.view.total_pages):
        await ctx.send(f"⚠️ Page out of range (1-{session.orchestrator.view.total_pages}).")
        return
    session.controller.set_page(number)
    await send_list(ctx, session)


@bot.command(name="next")
async def next_page(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None:
        return
    state = session.controller.state
    if state.page >= session.orchestrator.view.total_pages:
        await ctx.send("ℹ️ Already on the last page.")
        return
    session.controller.set_page(state.page + 1)
    await send_list(ctx, session)


@bot.command(name="prev")
async def prev_page(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None:
        return
    state = session.controller.state
    if state.page <= 1:
        await ctx.send("ℹ️ Already on the first page.")
        return
    session.controller.set_page(state.page - 1)
    await send_list(ctx, session)


@bot.command(name="pagesize")
async def pagesize(ctx: commands.Context, size: int):
    session = await require_session(ctx)
    if session is None:
        return
    if size not in PAGE_SIZE_CHOICES:
        await ctx.send(f"⚠️ Page size must be one of: {', '.join(map(str, PAGE_SIZE_CHOICES))}.")
        return
    session.controller.set_page_size(size)
    await send_list(ctx, session)


@bot.command(name="where")
async def where(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None:
        return
    await ctx.send(f"📍 `{session.location.read()}`")


# =========================
# DETAIL SURFACE
# =========================

@bot.command(name="open")
async def open_article(ctx: commands.Context, position: int):
    session = await require_session(ctx)
    if session is None:
        return
    article = session.article_at(position)
    if article is None:
        await ctx.send("⚠️ No article at that position on the current page.")
        return
    detail = session.open_article(article)
    await ctx.send(embed=article_view.render(detail.view))


@bot.command(name="summarize")
async def summarize(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None or session.detail is None:
        await ctx.send(f"ℹ️ Open an article first with `{COMMAND_PREFIX}open <n>`.")
        return
    detail = session.detail
    if detail.view.loading:
        await ctx.send("⏳ A summary is already being generated.")
        return
    try:
        result = await detail.summarize()
    except MissingResourceError:
        await ctx.send(embed=article_view.render(detail.view))
        return
    if result is None:
        if not detail.closed:
            await ctx.send(embed=article_view.render(detail.view))
        return
    await ctx.send(embed=summary_view.render(detail.view))


@bot.command(name="dismiss")
async def dismiss(ctx: commands.Context):
    session = get_session(ctx)
    if session is not None and session.detail is not None:
        session.detail.dismiss_summary()
        await ctx.send("✅ Summary closed.")


@bot.command(name="visit")
async def visit(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None or session.detail is None:
        return
    url = session.detail.visit_url()
    if url:
        await ctx.send(f"🔗 {url}")
    else:
        await ctx.send(embed=article_view.render(session.detail.view))


@bot.command(name="back")
async def back(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None:
        return
    target = session.back()
    log.info("Retour liste: %s", target)
    await send_list(ctx, session)


# =========================
# MARKET PANEL
# =========================

@bot.command(name="markets")
async def markets(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None:
        return
    await ctx.send(embed=market_view.render(session.panel.view))


@bot.command(name="refresh")
async def refresh(ctx: commands.Context):
    session = await require_session(ctx)
    if session is None:
        return
    if session.panel.view.busy:
        await ctx.send("⏳ Market data is already refreshing.")
        return
    await session.panel.refresh()
    await ctx.send(embed=market_view.render(session.panel.view))


# =========================
# EVENTS / LIFECYCLE
# =========================

@bot.command(name="close")
async def close_view(ctx: commands.Context):
    session = sessions.pop(ctx.channel.id, None)
    if session is None:
        await ctx.send("ℹ️ No view open.")
        return
    session.close()
    await ctx.send("❌ View closed.")


@bot.command(name="health")
async def health(ctx: commands.Context):
    status = monitor.get_status()
    if not status:
        await ctx.send("✅ No calls recorded yet.")
        return
    lines = []
    for surface, count in sorted(status.items()):
        since = monitor.seconds_since_success(surface)
        last_ok = f"last success {since:.0f}s ago" if since is not None else "never succeeded"
        line = f"`{surface}`: {count} consecutive failure(s), {last_ok}"
        last_error = monitor.get_last_error(surface)
        if last_error:
            line += f"\n> {last_error}"
        lines.append(line)
    await ctx.send("\n".join(lines))


@bot.event
async def on_ready():
    log.info("Connecte: %s", bot.user)


@bot.event
async def on_command_error(ctx: commands.Context, error: commands.CommandError):
    if isinstance(error, (commands.BadArgument, commands.MissingRequiredArgument)):
        await ctx.send(f"⚠️ Invalid argument: {error}")
        return
    if isinstance(error, commands.CommandNotFound):
        return
    log.error("Commande %s en erreur: %s", ctx.command, error)


async def _shutdown():
    for session in sessions.values():
        session.close()
    sessions.clear()
    await api_client.close()


async def main():
    validate_required_env()
    try:
        async with bot:
            await bot.start(DISCORD_TOKEN)
    finally:
        await _shutdown()


if __name__ == "__main__":
    asyncio.run(main())
