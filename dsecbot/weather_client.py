"""
WeatherAPI.com client for /weather.
"""

from __future__ import annotations

import logging
from typing import Dict

import aiohttp
import discord
from aiohttp import ContentTypeError

from dsecbot.config import DEFAULT_WEATHER_BASE_URL

log = logging.getLogger("dsec-bot")


class WeatherAPIError(Exception):
    """Raised for any failed weather lookup."""
    pass


class WeatherClient:
    def __init__(self, api_key: str, base_url: str = DEFAULT_WEATHER_BASE_URL, timeout_seconds: float = 10.0):
        if not api_key:
            raise ValueError("Weather API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def current(self, location: str) -> Dict:
        """Current conditions for a city or country (raw /current.json body)."""
        url = f"{self.base_url}/current.json"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    params={"key": self.api_key, "q": location},
                    timeout=self.timeout,
                ) as resp:
                    try:
                        data = await resp.json()
                    except ContentTypeError:
                        data = {"error": {"message": (await resp.text())[:500]}}

                    if resp.status >= 400:
                        # WeatherAPI error shape: {"error": {"code": 1006, "message": "..."}}
                        err = data.get("error") if isinstance(data, dict) else None
                        msg = err.get("message") if isinstance(err, dict) else None
                        raise WeatherAPIError(str(msg or f"API error: {resp.status}"))
                    if not isinstance(data, dict):
                        raise WeatherAPIError("Unexpected response shape")
                    log.debug(f"[Weather] {location!r} -> {resp.status}")
                    return data
        except aiohttp.ClientError as e:
            raise WeatherAPIError(f"Network error: {e}") from e


def weather_embed(data: Dict) -> discord.Embed:
    """Map a /current.json body onto the /weather embed."""
    loc = data.get("location") or {}
    cur = data.get("current") or {}
    cond = cur.get("condition") or {}

    e = discord.Embed(color=discord.Color.dark_grey())
    e.add_field(name="Name", value=str(loc.get("name", "N/A")), inline=True)
    e.add_field(name="Region", value=str(loc.get("region") or "N/A"), inline=True)
    e.add_field(name="Country", value=str(loc.get("country", "N/A")), inline=True)
    e.add_field(name="Condition", value=str(cond.get("text", "N/A")), inline=True)
    e.add_field(name="Temperature", value=f"{cur.get('temp_c', 'N/A')} °C", inline=True)
    e.add_field(name="Feels like", value=f"{cur.get('feelslike_c', 'N/A')} °C", inline=True)
    e.add_field(name="Wind", value=f"{cur.get('wind_kph', 'N/A')} kph", inline=True)
    e.add_field(name="Humidity", value=f"{cur.get('humidity', 'N/A')}%", inline=True)
    e.add_field(name="Cloud", value=f"{cur.get('cloud', 'N/A')}%", inline=True)

    icon = str(cond.get("icon") or "")
    if icon:
        # The API returns protocol-relative icon URLs ("//cdn.weatherapi.com/...").
        e.set_thumbnail(url=f"https:{icon}" if icon.startswith("//") else icon)
    return e
