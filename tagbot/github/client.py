"""GitHub GraphQL data source: fetch one issue or pull request."""

import logging
import re
from typing import Optional

import httpx

from ..errors import ConfigurationError, ValidationError
from .models import RawEntity, parse_entity

logger = logging.getLogger("tagbot.github.client")

DEFAULT_API_URL = "https://api.github.com/graphql"

_NAME_RE = re.compile(r"[A-Za-z0-9_.-]+")

ISSUE_OR_PR_QUERY = """
query ($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    name
    issueOrPullRequest(number: $number) {
      __typename
      ... on PullRequest {
        author { avatarUrl login url }
        body
        closed
        closedAt
        comments { totalCount }
        headRef { name }
        headRepository { nameWithOwner }
        isDraft
        merged
        mergedAt
        mergedBy { login }
        mergeCommit { abbreviatedOid }
        number
        publishedAt
        reviewDecision
        title
        url
        latestOpinionatedReviews(last: 99) {
          nodes {
            author { login }
            state
            url
          }
        }
      }
      ... on Issue {
        author { avatarUrl login url }
        body
        closed
        closedAt
        comments { totalCount }
        number
        publishedAt
        title
        url
      }
    }
  }
}
"""


def validate_github_name(name: str) -> bool:
    """True if the whole name is made of GitHub owner/repository characters."""
    return bool(name) and _NAME_RE.fullmatch(name) is not None


def parse_issue_number(value: str) -> Optional[int]:
    """Parse an issue number, tolerating a leading '#'. None if not an integer."""
    text = (value or "").strip()
    if text.startswith("#"):
        text = text[1:]
    try:
        return int(text, 10)
    except ValueError:
        return None


def validate_coordinate(owner: str, repository: str, number: str) -> int:
    """Validate an entity coordinate before any request goes out.

    Returns:
        The parsed issue number.

    Raises:
        ValidationError: owner, repository or number is malformed
    """
    if not validate_github_name(owner):
        raise ValidationError("command.issue-pr.invalid_owner", value=owner)
    if not validate_github_name(repository):
        raise ValidationError("command.issue-pr.invalid_repository", value=repository)
    parsed = parse_issue_number(number)
    if parsed is None:
        raise ValidationError("command.issue-pr.invalid_number", value=number)
    return parsed


class GitHubClient:
    """Minimal GitHub GraphQL client for issue/PR lookups.

    Args:
        token: GitHub token. Required before any request is made.
        api_url: GraphQL endpoint
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        token: Optional[str],
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token = token
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._token)

    def __repr__(self) -> str:
        # Never show the token
        return f"GitHubClient(api_url={self.api_url!r}, configured={self.configured})"

    async def fetch_issue_or_pr(self, owner: str, repository: str, number: str) -> Optional[RawEntity]:
        """Fetch one issue or pull request.

        Returns:
            The parsed entity, or None if it does not exist.

        Raises:
            ConfigurationError: no token configured (checked before anything else)
            ValidationError: malformed coordinate (checked before the request)
            httpx.HTTPStatusError: GitHub answered with an HTTP error
        """
        if not self._token:
            raise ConfigurationError("command.issue-pr.no_token")
        issue_number = validate_coordinate(owner, repository, number)

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self._token}",
                "User-Agent": "tagbot",
            },
        ) as client:
            response = await client.post(
                self.api_url,
                json={
                    "query": ISSUE_OR_PR_QUERY,
                    "variables": {"owner": owner, "name": repository, "number": issue_number},
                },
            )
            response.raise_for_status()
            payload = response.json()

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            # NOT_FOUND errors arrive alongside a null node; anything else is worth a look
            types = {e.get("type") for e in errors if isinstance(e, dict)}
            level = logging.DEBUG if types <= {"NOT_FOUND"} else logging.WARNING
            logger.log(level, f"GraphQL errors for {owner}/{repository}#{issue_number}: {errors}")

        node = ((payload or {}).get("data") or {}).get("repository") or {}
        node = node.get("issueOrPullRequest")
        if not node:
            return None
        return parse_entity(node)
