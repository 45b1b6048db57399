from __future__ import annotations

import logging
from typing import Collection, Optional, Tuple

import discord

from dsecbot.embeds import error_embed, outcome_embed
from dsecbot.verification import VerificationFlow, VerificationResult, VerificationSession

log = logging.getLogger("dsec-bot")

VERIFY_BUTTON_ID = "verify"


class VerificationModal(discord.ui.Modal):
    def __init__(self, timeout: float):
        super().__init__(title="Club Verification", timeout=timeout)
        self.submission: Optional[Tuple[str, str]] = None
        self.submitted_interaction: Optional[discord.Interaction] = None

        self.name_in = discord.ui.TextInput(
            label="Full Name",
            required=True,
            max_length=50,
            placeholder="John Doe",
        )
        self.student_id_in = discord.ui.TextInput(
            label="Student ID",
            required=True,
            placeholder="s123456789",
        )
        self.add_item(self.name_in)
        self.add_item(self.student_id_in)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        self.submission = (str(self.name_in.value), str(self.student_id_in.value))
        self.submitted_interaction = interaction
        # Store lookup can outlast Discord's 3s response window.
        await interaction.response.defer(ephemeral=True, thinking=True)
        self.stop()


class DiscordVerificationSession(VerificationSession):
    """Wraps the "Verify Here" button interaction for one verification run."""

    def __init__(self, interaction: discord.Interaction):
        self.interaction = interaction
        self.user_id = interaction.user.id
        self.guild_id = interaction.guild_id
        self._member: Optional[discord.Member] = None
        # Replies go to the modal submission once there is one.
        self._reply_to: discord.Interaction = interaction

    async def _fetch_member(self) -> discord.Member:
        if self._member is None:
            guild = self.interaction.guild
            if guild is None:
                raise RuntimeError("Interaction has no guild")
            self._member = await guild.fetch_member(self.user_id)
        return self._member

    async def fetch_role_ids(self) -> Collection[int]:
        member = await self._fetch_member()
        return {r.id for r in member.roles}

    async def request_identity(self, timeout: float) -> Optional[Tuple[str, str]]:
        modal = VerificationModal(timeout=timeout)
        await self.interaction.response.send_modal(modal)
        timed_out = await modal.wait()
        if timed_out or modal.submission is None or modal.submitted_interaction is None:
            return None
        self._reply_to = modal.submitted_interaction
        return modal.submission

    async def grant_role(self, role_id: int) -> None:
        member = await self._fetch_member()
        await member.add_roles(discord.Object(id=role_id), reason="DSEC membership verified")

    async def _send(self, embed: discord.Embed) -> None:
        target = self._reply_to
        if target.response.is_done():
            await target.followup.send(embed=embed, ephemeral=True)
        else:
            await target.response.send_message(embed=embed, ephemeral=True)

    async def report(self, result: VerificationResult) -> None:
        embed = outcome_embed(result)
        if embed is not None:
            await self._send(embed)

    async def report_failure(self) -> None:
        await self._send(error_embed())


class VerifyPanelView(discord.ui.View):
    """Persistent "Verify Here" button; registered once in setup_hook."""

    def __init__(self, flow: VerificationFlow):
        super().__init__(timeout=None)
        self.flow = flow

    @discord.ui.button(label="Verify Here", style=discord.ButtonStyle.primary, custom_id=VERIFY_BUTTON_ID)
    async def verify_btn(self, interaction: discord.Interaction, _: discord.ui.Button) -> None:
        session = DiscordVerificationSession(interaction)
        try:
            await self.flow.run(session)
        except Exception:
            # One failed interaction must not affect other in-flight verifications.
            log.exception(f"[Verify] user={session.user_id} failed")
            try:
                await session.report_failure()
            except discord.HTTPException as e:
                log.warning(f"[Verify] could not deliver failure notice to user={session.user_id}: {e}")
