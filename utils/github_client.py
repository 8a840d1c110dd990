#!/usr/bin/env python3
"""GitHub REST API client for pull request metadata and commit comparisons.

This module wraps the two endpoints the changelog automation needs: reading
a pull request by number and listing the files changed between two commits.
"""

import logging
from typing import Dict, List, Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from configs.config import Config

# Set up logging
logger = logging.getLogger(__name__)

# The compare endpoint lists files on its first page only, capped at this many
MAX_COMPARE_FILES = 300


class GithubAuthError(Exception):
    """Raised when GitHub API authentication fails."""
    def __init__(self, message: str, code: str = "UNAUTHORIZED") -> None:
        super().__init__(message)
        self.code = code


class GithubApiError(Exception):
    """Raised when GitHub API operations fail with a typed code."""
    def __init__(self, message: str, code: str = "UNKNOWN", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


class GithubClient:
    """Thin client for the GitHub REST API."""

    def __init__(self, token: Optional[str] = None, timeout_s: Optional[int] = None,
                 base_url: Optional[str] = None):
        """Initialize GitHub client.

        Args:
            token: GitHub Personal Access Token (defaults to Config.GITHUB_TOKEN)
            timeout_s: Request timeout in seconds (defaults to Config.HTTP_TIMEOUT_S)
            base_url: API root (defaults to Config.GITHUB_API_URL)

        Raises:
            GithubAuthError: If no valid token is provided
        """
        github_config = Config.get_github_config()
        self.token = token or github_config["token"]
        self.timeout_s = timeout_s or github_config["timeout_s"]
        self.base_url = (base_url or github_config["api_url"]).rstrip("/")

        if not self.token:
            raise GithubAuthError("GitHub token is required (GITHUB_TOKEN or GITHUB_PAT env var)")

        # Set up session with retries and authentication
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'monorepo-utils-changefile/1.0'
        })

        # Configure retries for transient failures
        retry_strategy = Retry(
            total=github_config["max_retries"],
            status_forcelist=[429, 500, 502, 503, 504],
            backoff_factor=1,
            allowed_methods=["HEAD", "GET", "OPTIONS"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)

        logger.info("GitHub client initialized")

    def _get(self, url: str, *, not_found: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue a GET and map HTTP failures onto typed errors."""
        try:
            response = self.session.get(url, params=params, timeout=self.timeout_s)
        except requests.Timeout as e:
            raise GithubApiError(f"Timeout after {self.timeout_s}s: {url}", code="TIMEOUT") from e
        except requests.RequestException as e:
            raise GithubApiError(f"Network error contacting GitHub: {e}", code="NETWORK") from e

        if response.status_code == 401:
            raise GithubAuthError("Invalid GitHub token or insufficient permissions")
        elif response.status_code == 404:
            raise GithubApiError(not_found, code="NOT_FOUND", status=404)
        elif response.status_code in (403, 429) and response.headers.get("X-RateLimit-Remaining") == "0":
            raise GithubApiError("GitHub API rate limit exceeded", code="RATE_LIMIT", status=response.status_code)
        elif response.status_code != 200:
            raise GithubApiError(f"GitHub API error: HTTP {response.status_code}", status=response.status_code)

        return response.json()

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        """Fetch pull request metadata via GitHub REST API.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number

        Returns:
            Pull request metadata dictionary

        Raises:
            GithubApiError: If API request fails
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/pulls/{number}"
        logger.info(f"Fetching PR metadata: {owner}/{repo}#{number}")
        data = self._get(url, not_found=f"Pull request {owner}/{repo}#{number} not found")
        logger.debug(f"✓ Retrieved PR: #{data.get('number')} - {(data.get('title') or '')[:50]}...")
        return data

    def compare_files(self, owner: str, repo: str, base: str, head: str) -> List[Dict[str, Any]]:
        """List files changed between two commits via the compare endpoint.

        Uses three-dot compare semantics (changes on ``head`` since it diverged
        from ``base``). Only the first page carries ``files``, and GitHub
        truncates that list at ``MAX_COMPARE_FILES`` entries.

        Args:
            owner: Repository owner
            repo: Repository name
            base: Base commit SHA or ref
            head: Head commit SHA or ref

        Returns:
            List of file change dictionaries

        Raises:
            GithubApiError: If API request fails
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/compare/{base}...{head}"
        logger.info(f"Comparing {owner}/{repo} {base[:8]}...{head[:8]}")

        data = self._get(url, not_found=f"Cannot compare {base}...{head} in {owner}/{repo}")
        all_files: List[Dict[str, Any]] = data.get("files") or []
        if len(all_files) >= MAX_COMPARE_FILES:
            logger.warning(
                f"Comparison {base[:8]}...{head[:8]} lists {len(all_files)} files; "
                f"GitHub truncates at {MAX_COMPARE_FILES}, touched projects may be missed"
            )

        logger.debug(f"✓ Retrieved {len(all_files)} changed files")
        return all_files

    def close(self) -> None:
        """Close the GitHub client session."""
        if self.session:
            self.session.close()
            logger.debug("GitHub client session closed")
