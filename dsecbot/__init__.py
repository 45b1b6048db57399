"""DSEC Discord bot: club membership verification."""

__version__ = "0.1.0"
