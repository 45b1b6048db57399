import discord
import pytest

from dsecbot.embeds import build_custom_embed, error_embed, outcome_embed, panel_embed, parse_hex_colour
from dsecbot.verification import Outcome, VerificationResult


@pytest.mark.parametrize(
    "outcome,title",
    [
        (Outcome.GRANTED, "✅ Verified"),
        (Outcome.ALREADY_VERIFIED, "Already verified"),
        (Outcome.NOT_FOUND, "Membership not found"),
        (Outcome.MISMATCH, "Name does not match"),
        (Outcome.REJECTED, "Verification unavailable"),
    ],
)
def test_reported_outcomes_have_embeds(outcome, title):
    e = outcome_embed(VerificationResult(outcome))
    assert e.title == title
    assert e.description
    assert e.footer.text is None


def test_not_found_tells_user_to_check_back():
    e = outcome_embed(VerificationResult(Outcome.NOT_FOUND))
    assert "check back later" in e.description


def test_abandoned_has_no_embed():
    assert outcome_embed(VerificationResult(Outcome.ABANDONED)) is None


def test_cache_path_is_marked():
    e = outcome_embed(VerificationResult(Outcome.GRANTED, via_cache=True))
    assert e.footer.text == "Verified via cache"


def test_panel_and_error_embeds():
    assert panel_embed().title == "Verify your DSEC membership"
    assert "Student ID" in panel_embed().description
    assert error_embed().title == "Something went wrong"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("#ff8800", 0xFF8800),
        ("5865F2", 0x5865F2),
        ("", None),
        (None, None),
        ("zzz", None),
        ("1000000", None),
        ("-1", None),
        ("-ff", None),
        ("0xff", None),
        ("ff_00", None),
    ],
)
def test_parse_hex_colour(raw, expected):
    color = parse_hex_colour(raw)
    if expected is None:
        assert color is None
    else:
        assert color.value == expected


def test_custom_embed_fields():
    e = build_custom_embed(
        title="Meeting",
        title_url="https://example.com",
        description="Tonight 6pm",
        footer="DSEC",
        colour="#00ff00",
        thumbnail_url="https://example.com/t.png",
        image_url="https://example.com/i.png",
        timestamp=True,
    )
    assert e.title == "Meeting"
    assert e.url == "https://example.com"
    assert e.description == "Tonight 6pm"
    assert e.footer.text == "DSEC"
    assert e.color == discord.Color(0x00FF00)
    assert e.thumbnail.url == "https://example.com/t.png"
    assert e.image.url == "https://example.com/i.png"
    assert e.timestamp is not None


def test_custom_embed_url_needs_title_and_bad_colour_ignored():
    e = build_custom_embed(title_url="https://example.com", description="x", colour="nothex")
    assert e.title is None
    assert e.url is None
    assert e.color is None
    assert e.timestamp is None


def test_custom_embed_signed_colour_is_dropped():
    e = build_custom_embed(title="t", colour="-ff")
    assert e.color is None
    assert "color" not in e.to_dict()
