"""
General slash commands: /help, /ping, /userinfo, /serverinfo, /botinfo, /weather
and the moderator-only /embed builder.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from dsecbot.embeds import build_custom_embed
from dsecbot.weather_client import WeatherAPIError, WeatherClient, weather_embed

log = logging.getLogger("dsec-bot")

EMBED_COLOR = discord.Color.dark_grey()
_DT_FMT = "%d/%m/%Y %I:%M %p"


def _fmt_dt(dt) -> str:
    return dt.strftime(_DT_FMT) if dt else "N/A"


class InfoCog(commands.Cog):
    def __init__(self, bot: commands.Bot, weather: Optional[WeatherClient] = None):
        self.bot = bot
        self.weather = weather

    @app_commands.command(name="help", description="Show this help menu")
    async def help(self, interaction: discord.Interaction) -> None:
        lines = []
        for cmd in sorted(self.bot.tree.get_commands(), key=lambda c: c.name):
            desc = getattr(cmd, "description", "") or ""
            lines.append(f"`/{cmd.name}` - {desc}")
        e = discord.Embed(
            title="Commands",
            description="\n".join(lines) or "No commands registered.",
            color=EMBED_COLOR,
        )
        e.set_footer(text="DSEC Bot")
        await interaction.response.send_message(embed=e, ephemeral=True)

    @app_commands.command(name="ping", description="Ping the bot")
    async def ping(self, interaction: discord.Interaction) -> None:
        start = time.perf_counter()
        await interaction.response.send_message(embed=discord.Embed(title="Pinging...", color=EMBED_COLOR))
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        await interaction.edit_original_response(
            embed=discord.Embed(title="Pong!", description=f"{elapsed_ms} ms", color=EMBED_COLOR)
        )

    @app_commands.command(name="userinfo", description="Display user's information")
    @app_commands.describe(user="Specific user to show information about")
    @app_commands.guild_only()
    async def userinfo(self, interaction: discord.Interaction, user: Optional[discord.User] = None) -> None:
        target = user or interaction.user
        member = await interaction.guild.fetch_member(target.id)

        role_mentions = " ".join(r.mention for r in member.roles if not r.is_default()) or "None"
        color = member.color if member.color.value else EMBED_COLOR

        e = discord.Embed(
            title="User Info",
            color=color,
            description=(
                f"**ID**: {member.id}\n"
                f"**Display Name**: {member.display_name}\n"
                f"**Username**: {member.name}\n"
                f"**Created At**: {_fmt_dt(member.created_at)}\n"
                f"**Joined At**: {_fmt_dt(member.joined_at)}\n"
                f"**Roles**: {role_mentions}"
            ),
        )
        e.set_thumbnail(url=member.display_avatar.url)
        await interaction.response.send_message(embed=e)

    @app_commands.command(name="serverinfo", description="Display server's information")
    @app_commands.guild_only()
    async def serverinfo(self, interaction: discord.Interaction) -> None:
        guild = interaction.guild
        channels = await guild.fetch_channels()
        categories = sum(1 for c in channels if isinstance(c, discord.CategoryChannel))
        text = sum(1 for c in channels if isinstance(c, discord.TextChannel))
        voice = sum(1 for c in channels if isinstance(c, discord.VoiceChannel))

        e = discord.Embed(title=guild.name, color=EMBED_COLOR)
        if guild.icon:
            e.set_thumbnail(url=guild.icon.url)
        e.add_field(name="Owner", value=f"<@{guild.owner_id}>", inline=True)
        e.add_field(name="Rules", value=guild.rules_channel.mention if guild.rules_channel else "N/A", inline=True)
        e.add_field(name="Members", value=str(guild.member_count or 0), inline=True)
        e.add_field(name="Category Channels", value=str(categories), inline=True)
        e.add_field(name="Text Channels", value=str(text), inline=True)
        e.add_field(name="Voice Channels", value=str(voice), inline=True)
        e.add_field(name="Description", value=guild.description or "N/A", inline=False)
        e.set_footer(text=f"ID: {guild.id}")
        await interaction.response.send_message(embed=e)

    @app_commands.command(name="botinfo", description="Display the bot's information")
    async def botinfo(self, interaction: discord.Interaction) -> None:
        me = self.bot.user
        e = discord.Embed(title="Bot Info", color=EMBED_COLOR)
        if me:
            e.set_thumbnail(url=me.display_avatar.url)
            e.add_field(name="Name", value=str(me), inline=True)
            e.add_field(name="ID", value=str(me.id), inline=True)
        e.add_field(name="Servers", value=str(len(self.bot.guilds)), inline=True)
        e.add_field(name="Gateway Latency", value=f"{round(self.bot.latency * 1000)} ms", inline=True)
        e.add_field(name="Library", value=f"discord.py {discord.__version__}", inline=True)
        await interaction.response.send_message(embed=e)

    @app_commands.command(name="weather", description="Shows weather information")
    @app_commands.describe(location="Location (City or Country)")
    async def weather_cmd(self, interaction: discord.Interaction, location: str) -> None:
        if self.weather is None:
            await interaction.response.send_message("❌ Weather is not configured on this bot.", ephemeral=True)
            return

        await interaction.response.defer()
        try:
            data = await self.weather.current(location)
        except WeatherAPIError as e:
            log.warning(f"[Weather] lookup failed for {location!r}: {e}")
            await interaction.followup.send(f"❌ Couldn't get weather for **{location}**: {e}", ephemeral=True)
            return
        await interaction.followup.send(embed=weather_embed(data))

    @app_commands.command(name="embed", description="Create a message embed")
    @app_commands.describe(
        title="Title of embed",
        title_url="URL for Title",
        description="Description for Embed",
        footer="Footer text",
        colour="Embed colour (hex, e.g. #5865F2)",
        thumbnail_url="Image URL for thumbnail",
        image_url="Image URL",
        timestamp="Show timestamp",
    )
    @app_commands.default_permissions(manage_messages=True, manage_threads=True)
    @app_commands.guild_only()
    async def embed(
        self,
        interaction: discord.Interaction,
        title: Optional[str] = None,
        title_url: Optional[str] = None,
        description: Optional[str] = None,
        footer: Optional[str] = None,
        colour: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
        image_url: Optional[str] = None,
        timestamp: Optional[bool] = None,
    ) -> None:
        e = build_custom_embed(
            title=title,
            title_url=title_url,
            description=description,
            footer=footer,
            colour=colour,
            thumbnail_url=thumbnail_url,
            image_url=image_url,
            timestamp=bool(timestamp),
        )
        if len(e) == 0 and not (thumbnail_url or image_url):
            await interaction.response.send_message("❌ Give the embed at least a title or description.", ephemeral=True)
            return
        await interaction.response.send_message(embed=e)
