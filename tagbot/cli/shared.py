"""Shared utilities for tagbot CLI commands."""

from rich.console import Console

console = Console()
