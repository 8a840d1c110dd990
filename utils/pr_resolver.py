#!/usr/bin/env python3
"""Pull request metadata resolver for changelog automation.

This module wraps GithubClient to fetch a pull request once and normalize it
into the PullRequestContext snapshot used by the rest of the pipeline.
"""

import logging
from typing import Any, Dict, Optional

from .github_client import GithubClient, GithubApiError
from .errors import PullRequestNotFoundError
from .pr_models import PullRequestContext, fragment_file_name, safe_extract

# Set up logging
logger = logging.getLogger(__name__)


class PullRequestResolver:
    """Fetches and normalizes pull request data."""

    def __init__(self, client: Optional[GithubClient] = None):
        """Initialize the resolver.

        Args:
            client: Optional GithubClient instance. If None, one is created lazily.
        """
        self._client = client

    @property
    def client(self) -> GithubClient:
        # Lazy-init to avoid requiring a GitHub token until a request is made
        if self._client is None:
            self._client = GithubClient()
        return self._client

    def fetch(self, owner: str, repo: str, pr_number: int) -> PullRequestContext:
        """Fetch and normalize pull request metadata.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Normalized PullRequestContext

        Raises:
            PullRequestNotFoundError: If the PR (or its head repository) does not exist
            GithubApiError: For other API failures
        """
        try:
            pr_data = self.client.get_pull_request(owner, repo, pr_number)
        except GithubApiError as e:
            if e.code == "NOT_FOUND":
                raise PullRequestNotFoundError(
                    f"PR #{pr_number} not found in {owner}/{repo}. Please check repository name and PR number."
                ) from e
            raise

        return self._normalize_pr_data(pr_data, pr_number)

    def _normalize_pr_data(self, pr_data: Dict[str, Any], pr_number: int) -> PullRequestContext:
        head_owner = safe_extract(pr_data, "head", "repo", "owner", "login")
        if not head_owner:
            # The head repository of a PR from a deleted fork is null
            raise PullRequestNotFoundError(f"PR #{pr_number} has no head repository; was the fork deleted?")

        branch = safe_extract(pr_data, "head", "ref", default="")
        head = safe_extract(pr_data, "head", "sha", default="")
        base = safe_extract(pr_data, "base", "sha", default="")
        if not branch or not head or not base:
            raise PullRequestNotFoundError(f"PR #{pr_number} is missing branch or commit information")

        context = PullRequestContext(
            pr_number=pr_data.get("number") or pr_number,
            head_owner=head_owner,
            branch=branch,
            base=base,
            head=head,
            fragment_file_name=fragment_file_name(pr_number, branch),
            body=pr_data.get("body") or "",
        )
        logger.debug(f"✓ Resolved PR #{context.pr_number}: {context.head_owner}:{context.branch}")
        return context

    def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            self._client.close()
