#!/usr/bin/env python3
"""Changelog automation for pull requests.

Fetches a pull request, and when its description opts in, writes one
changelog fragment for every touched workspace project that requires one,
then commits and pushes the fragments to the PR branch.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

from configs.config import Config
from utils.directive import AUTOMATION_MARKER, parse_directive
from utils.fragments import generate_all, install_dependencies, reconcile
from utils.git_repo import checkout_remote_branch, commit_and_push, prepare_working_copy
from utils.github_client import GithubClient
from utils.metrics import Timer, incr
from utils.pr_models import CloneFresh, CloneStrategy, CommitResult, GitIdentity, UseExistingClone
from utils.pr_resolver import PullRequestResolver
from utils.projects import list_all_projects, list_touched_requiring_changelog

# Set up logging
logger = logging.getLogger(__name__)

ChangefileStatus = Literal["not_requested", "no_projects", "clean", "pushed"]


@dataclass
class ChangefileResult:
	status: ChangefileStatus
	created: List[str] = field(default_factory=list)
	failed: List[str] = field(default_factory=list)
	repo_path: Optional[Path] = None
	commit: Optional[CommitResult] = None


def clone_strategy(dev_repo_path: Optional[str]) -> CloneStrategy:
	"""Map the --dev-repo-path option onto a clone strategy."""
	if dev_repo_path:
		return UseExistingClone(path=Path(dev_repo_path).expanduser().resolve())
	return CloneFresh()


class ChangefilePipeline:
	"""Runs the changelog automation once for a single pull request."""

	def __init__(self, client: Optional[GithubClient] = None, identity: Optional[GitIdentity] = None):
		"""Initialize the pipeline.

		Args:
			client: Optional GithubClient instance. If None, one is created on first use.
			identity: Commit identity. If None, the bot identity is used in GitHub CI
				and the clone's own git configuration otherwise.
		"""
		self._client = client
		self._identity = identity

	@property
	def client(self) -> GithubClient:
		if self._client is None:
			self._client = GithubClient()
		return self._client

	def commit_identity(self) -> Optional[GitIdentity]:
		if self._identity is not None:
			return self._identity
		if Config.is_github_ci():
			return GitIdentity.bot(Config.get_bot_identity_config())
		return None

	def run(self, pr_number: int, owner: str, name: str, strategy: Optional[CloneStrategy] = None) -> ChangefileResult:
		"""Run every step for ``owner/name#pr_number``.

		Args:
			pr_number: Pull request number
			owner: Owner of the base repository
			name: Repository name
			strategy: Clone strategy (defaults to a fresh clone)

		Returns:
			ChangefileResult describing what happened

		Raises:
			ChangefileError: For any fatal step failure
			GithubApiError: If the hosting API fails
		"""
		strategy = strategy or CloneFresh()

		logger.info(f"Getting pull request data for PR number {pr_number}")
		with Timer("changefile.fetch_pr", pr=pr_number):
			context = PullRequestResolver(self.client).fetch(owner, name, pr_number)

		directive = parse_directive(context.body)
		if not directive.automation_requested:
			logger.info(
				f'PR #{pr_number} does not have the "{AUTOMATION_MARKER}" checkbox checked. '
				f"No changelog will be created."
			)
			incr("changefile.outcome", status="not_requested")
			return ChangefileResult(status="not_requested")

		logger.info(f"Making a temporary clone of '{context.head_owner}/{name}'")
		working_copy = prepare_working_copy(strategy, context.head_owner, name)
		logger.info(f"Temporary clone of '{context.head_owner}/{name}' created at {working_copy.path}")

		logger.info(f"Checking out remote branch {context.branch}")
		checkout_remote_branch(working_copy.path, context.branch, context.head)

		logger.info("Getting all touched projects requiring a changelog")
		with Timer("changefile.discover", pr=pr_number):
			all_projects = list_all_projects(working_copy)
			touched = list_touched_requiring_changelog(
				working_copy,
				context.base,
				context.head,
				context.fragment_file_name,
				owner,
				name,
				self.client,
				all_projects=all_projects,
			)

		logger.info("Removing existing changelog files in case a change is reverted and the entry is no longer needed")
		reconcile(working_copy, all_projects, context.fragment_file_name)

		if not touched:
			logger.info("No projects require a changelog")
			incr("changefile.outcome", status="no_projects")
			return ChangefileResult(status="no_projects", repo_path=working_copy.path)

		install_dependencies(working_copy)

		with Timer("changefile.generate", pr=pr_number, projects=len(touched)):
			report = generate_all(working_copy, touched, directive, context.fragment_file_name)

		if report.succeeded:
			logger.info(f"Changelogs created for {', '.join(report.succeeded)}")
		if report.failed:
			logger.warning(f"Changelog generation failed for {', '.join(report.failed)}")

		with Timer("changefile.push", pr=pr_number):
			commit = commit_and_push(working_copy, context.branch, self.commit_identity())

		incr("changefile.outcome", status=commit.status)
		return ChangefileResult(
			status=commit.status,
			created=report.succeeded,
			failed=report.failed,
			repo_path=working_copy.path,
			commit=commit,
		)

	def close(self) -> None:
		"""Close the pipeline and cleanup resources."""
		if self._client is not None:
			self._client.close()
