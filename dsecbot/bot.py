"""
DSEC Bot
--------
Membership verification for the DSEC Discord server, plus a few general
slash commands.

Configuration is split across:
- config.json (non-secret settings)
- config.secrets.json (server-only secrets, not committed)
"""

from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from dsecbot.config import BotConfig
from dsecbot.embeds import panel_embed
from dsecbot.info_commands import InfoCog
from dsecbot.member_cache import MembershipCache
from dsecbot.supabase_client import MembershipStore
from dsecbot.verification import VerificationFlow
from dsecbot.views import VerifyPanelView
from dsecbot.weather_client import WeatherClient

log = logging.getLogger("dsec-bot")


class VerificationCog(commands.Cog):
    def __init__(self, bot: commands.Bot, flow: VerificationFlow):
        self.bot = bot
        self.flow = flow

    @app_commands.command(name="verify", description="Post the membership verification panel")
    @app_commands.default_permissions(manage_messages=True, manage_threads=True)
    @app_commands.guild_only()
    async def verify(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(embed=panel_embed(), view=VerifyPanelView(self.flow))
        log.info(f"[Panel] posted in #{getattr(interaction.channel, 'name', interaction.channel_id)} by {interaction.user}")


class DSECBot:
    """Owns the discord.py client and the process-wide verification state."""

    def __init__(self, config: BotConfig):
        self.config = config

        # Created empty at startup, shared by every verification for the process lifetime.
        self.cache = MembershipCache()
        self.store = MembershipStore(
            config.supabase_url,
            config.supabase_key,
            table=config.members_table,
            timeout_seconds=config.store_timeout_seconds,
        )
        self.flow = VerificationFlow(
            self.cache,
            self.store,
            guild_id=config.guild_id,
            verified_role_id=config.verified_role_id,
            modal_timeout=config.modal_timeout_seconds,
        )
        self.weather = (
            WeatherClient(config.weather_api_key, base_url=config.weather_base_url)
            if config.weather_api_key
            else None
        )

        intents = discord.Intents.default()
        intents.guilds = True

        self.bot = commands.Bot(command_prefix=commands.when_mentioned, intents=intents, help_command=None)
        self.bot.setup_hook = self._setup_hook  # type: ignore[method-assign]
        self._setup_events()

    async def _setup_hook(self) -> None:
        # Persistent view: the panel button keeps working after restarts.
        self.bot.add_view(VerifyPanelView(self.flow))
        await self.bot.add_cog(VerificationCog(self.bot, self.flow))
        await self.bot.add_cog(InfoCog(self.bot, weather=self.weather))

        synced = await self.bot.tree.sync()
        log.info(f"[Bot] Synced {len(synced)} slash command(s) globally")

    def _setup_events(self) -> None:
        @self.bot.event
        async def on_ready():
            log.info(f"[Bot] Logged in as {self.bot.user}")
            guild = self.bot.get_guild(self.config.guild_id)
            if guild is None:
                log.warning(f"[Bot] Not connected to configured guild {self.config.guild_id}")
                return
            role = guild.get_role(self.config.verified_role_id)
            if role is None:
                log.warning(f"[Bot] Verified role {self.config.verified_role_id} not found in {guild.name}")
            else:
                log.info(f"[Bot] Guild: {guild.name} | verified role: {role.name}")
            if self.weather is None:
                log.info("[Bot] weather.api_key not set; /weather is disabled")

    def run(self) -> None:
        """Start the bot (blocks until shutdown)."""
        try:
            self.bot.run(self.config.bot_token, log_handler=None)
        except KeyboardInterrupt:
            log.info("[Bot] Shutting down...")
