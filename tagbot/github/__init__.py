"""GitHub lookups: data source, status classification, message assembly."""

from .client import GitHubClient, validate_coordinate, validate_github_name
from .classifier import Classification, classify, classify_status
from .models import EntityKind, Issue, PullRequest, RawEntity, parse_entity
from .render import RenderedMessage, build_message, truncate_message

__all__ = [
    # Data source
    "GitHubClient",
    "validate_coordinate",
    "validate_github_name",
    # Entities
    "EntityKind",
    "Issue",
    "PullRequest",
    "RawEntity",
    "parse_entity",
    # Classification
    "Classification",
    "classify",
    "classify_status",
    # Rendering
    "RenderedMessage",
    "build_message",
    "truncate_message",
]
