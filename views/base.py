from abc import ABC, abstractmethod
from typing import Any

import discord

from core.config import EMBED_COLOR
from core.utils import truncate_text


class View(ABC):
    name: str

    @abstractmethod
    def render(self, state: Any) -> discord.Embed:
        ...

    @staticmethod
    def _embed(title: str, description: str = "", url: str = None) -> discord.Embed:
        return discord.Embed(
            title=truncate_text(title, 256),
            description=description or None,
            url=url or None,
            color=EMBED_COLOR,
        )

    @staticmethod
    def _add_error(embed: discord.Embed, error: str, heading: str = "Error") -> None:
        if error:
            embed.add_field(name=f"⚠️ {heading}", value=truncate_text(error, 1024), inline=False)
