from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

import discord

from dsecbot.verification import Outcome, VerificationResult

_HEX_COLOUR_RE = re.compile(r"[0-9a-fA-F]{1,6}")

PANEL_TITLE = "Verify your DSEC membership"
PANEL_DESCRIPTION = (
    "Click **Verify Here** and enter your **Full name** and **Student ID** "
    "(e.g., s123456789). Your responses are private."
)

# outcome -> (title, description, colour)
_OUTCOME_MESSAGES: Dict[Outcome, Tuple[str, str, discord.Color]] = {
    Outcome.GRANTED: (
        "✅ Verified",
        "Your DSEC membership is confirmed. The member role has been added to your account.",
        discord.Color.green(),
    ),
    Outcome.ALREADY_VERIFIED: (
        "Already verified",
        "You already have the member role. Nothing else to do.",
        discord.Color.blurple(),
    ),
    Outcome.NOT_FOUND: (
        "Membership not found",
        "We couldn't find an active membership for that student ID. "
        "If you signed up recently, check back later.",
        discord.Color.orange(),
    ),
    Outcome.MISMATCH: (
        "Name does not match",
        "That student ID is registered, but the name you entered doesn't match our records. "
        "Use the full name you signed up with and try again.",
        discord.Color.red(),
    ),
    Outcome.REJECTED: (
        "Verification unavailable",
        "Membership verification only works inside the DSEC server.",
        discord.Color.dark_grey(),
    ),
}


def panel_embed() -> discord.Embed:
    return discord.Embed(title=PANEL_TITLE, description=PANEL_DESCRIPTION)


def outcome_embed(result: VerificationResult) -> Optional[discord.Embed]:
    """Embed for a reported outcome; None for outcomes that are never shown."""
    entry = _OUTCOME_MESSAGES.get(result.outcome)
    if entry is None:
        return None
    title, description, color = entry
    e = discord.Embed(title=title, description=description, color=color)
    if result.via_cache:
        e.set_footer(text="Verified via cache")
    return e


def error_embed() -> discord.Embed:
    return discord.Embed(
        title="Something went wrong",
        description="Verification couldn't be completed right now. Please try again in a few minutes.",
        color=discord.Color.red(),
    )


def parse_hex_colour(value: Optional[str]) -> Optional[discord.Color]:
    """'#ff8800' / 'ff8800' -> Color; None when blank or not hex."""
    s = (value or "").strip().lstrip("#")
    # int(s, 16) alone would also take signs, "0x" and underscores.
    if not _HEX_COLOUR_RE.fullmatch(s):
        return None
    return discord.Color(int(s, 16))


def build_custom_embed(
    *,
    title: Optional[str] = None,
    title_url: Optional[str] = None,
    description: Optional[str] = None,
    footer: Optional[str] = None,
    colour: Optional[str] = None,
    thumbnail_url: Optional[str] = None,
    image_url: Optional[str] = None,
    timestamp: bool = False,
) -> discord.Embed:
    e = discord.Embed()
    if title:
        e.title = title
        # Discord ignores a url without a title.
        if title_url:
            e.url = title_url
    if description:
        e.description = description
    if footer:
        e.set_footer(text=footer)
    color = parse_hex_colour(colour)
    if color is not None:
        e.color = color
    if thumbnail_url:
        e.set_thumbnail(url=thumbnail_url)
    if image_url:
        e.set_image(url=image_url)
    if timestamp:
        e.timestamp = datetime.now(timezone.utc)
    return e
