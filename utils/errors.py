#!/usr/bin/env python3
"""Typed errors raised by the changelog automation pipeline.

Every error carries a short ``code`` so the CLI can map failures to
friendly messages, mirroring the GitHub client errors.
"""

from __future__ import annotations


class ChangefileError(Exception):
    """Base class for pipeline failures."""

    default_code = "UNKNOWN"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code


class PullRequestNotFoundError(ChangefileError):
    """Raised when the hosting service has no such pull request."""

    default_code = "NOT_FOUND"


class DirectiveParseError(ChangefileError):
    """Raised when automation is requested but the changelog fields are unusable."""

    default_code = "DIRECTIVE"


class CloneError(ChangefileError):
    default_code = "CLONE"


class RemoteBranchError(ChangefileError):
    """Raised when the PR branch does not exist on the remote."""

    default_code = "BRANCH"

    def __init__(self, message: str, *, branch: str) -> None:
        super().__init__(message)
        self.branch = branch


class DependencyInstallError(ChangefileError):
    default_code = "INSTALL"


class FragmentGenerationError(ChangefileError):
    """Raised when a project's changelog command fails. Recovered per project."""

    default_code = "GENERATION"

    def __init__(self, message: str, *, project: str) -> None:
        super().__init__(message)
        self.project = project


class GitCommandError(ChangefileError):
    default_code = "GIT"

    def __init__(self, message: str, *, args: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.git_args = list(args or [])
        self.stderr = stderr


class PushError(GitCommandError):
    """Raised when the final push is rejected. Never retried."""

    default_code = "PUSH"
