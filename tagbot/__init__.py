"""tagbot — chat bot for community tags and GitHub issue/PR lookups."""

__version__ = "0.1.0"
