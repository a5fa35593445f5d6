import discord

from core.models import MarketIndex
from core.polling import DIMMED, SKELETON, PanelState
from core.utils import format_price, format_signed
from views.base import View


class MarketIndicesView(View):
    name = "market-indices"

    @staticmethod
    def _value(index: MarketIndex) -> str:
        arrow = "📈" if index.change >= 0 else "📉"
        lines = [
            f"**{format_price(index.price)}**",
            f"{arrow} {format_signed(index.change)} ({format_signed(index.change_perc, '%')})",
        ]
        if index.is_historical:
            lines.append("*Last trading day's closing values*")
        return "\n".join(lines)

    def render(self, state: PanelState) -> discord.Embed:
        embed = self._embed("Market Indices")
        if state.presentation == SKELETON:
            embed.description = "▒▒▒▒▒▒▒▒\n▒▒▒▒▒▒▒▒"
            return embed

        self._add_error(embed, state.error or "", heading="Unable to load market data")
        for index in state.indices:
            name = index.name or "Unknown Index"
            if index.is_delayed:
                name = f"{name} (Delayed)"
            embed.add_field(name=name, value=self._value(index), inline=True)

        footer = []
        if state.last_updated:
            footer.append(f"Last updated: {state.last_updated.strftime('%H:%M:%S')} UTC (use refresh to update)")
        if state.presentation == DIMMED:
            footer.append("Updating...")
        if footer:
            embed.set_footer(text=" • ".join(footer))
        return embed
