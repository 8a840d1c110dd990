#!/usr/bin/env python3
"""Pydantic models for the changelog automation pipeline.

This module defines the pull request snapshot, the changelog directive parsed
from the PR description, the monorepo project descriptors, and the results
reported by the generation and commit steps.
"""

from pathlib import Path
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


# Type aliases for better readability
Significance = Literal["patch", "minor", "major"]

ChangeType = Literal[
    "fix",
    "add",
    "update",
    "dev",
    "tweak",
    "performance",
    "enhancement",
]

CommitStatus = Literal["clean", "pushed"]


class PullRequestContext(BaseModel):
    """Immutable snapshot of a pull request, fetched once per run."""

    pr_number: int = Field(..., description="Pull request number")
    head_owner: str = Field(..., description="Owner of the PR head repository")
    branch: str = Field(..., description="PR head branch name")
    base: str = Field(..., description="Base commit SHA")
    head: str = Field(..., description="Head commit SHA")
    fragment_file_name: str = Field(..., description="Changelog fragment file name for this PR")
    body: str = Field("", description="Raw pull request description")

    model_config = {"extra": "ignore", "frozen": True}


class ChangelogDirective(BaseModel):
    """Changelog fields requested through the PR description."""

    automation_requested: bool = Field(False, description="Whether the automation checkbox is checked")
    significance: Optional[Significance] = Field(None, description="Version bump significance")
    type: Optional[ChangeType] = Field(None, description="Kind of change")
    message: Optional[str] = Field(None, description="Changelog entry message")
    comment: Optional[str] = Field(None, description="Comment used when the entry has no message")

    model_config = {"extra": "ignore", "frozen": True}


class ProjectDescriptor(BaseModel):
    """A workspace project and whether it opts in to changelog automation."""

    path: str = Field(..., description="POSIX path relative to the repository root")
    requires_changelog: bool = Field(False, description="Declared by the project's manifest")

    model_config = {"extra": "ignore", "frozen": True}


class CloneFresh(BaseModel):
    """Clone the head repository into a new temporary directory."""

    kind: Literal["clone"] = "clone"

    model_config = {"frozen": True}


class UseExistingClone(BaseModel):
    """Reuse a local checkout. Dependencies are assumed to be installed."""

    kind: Literal["existing"] = "existing"
    path: Path

    model_config = {"frozen": True}


CloneStrategy = Union[CloneFresh, UseExistingClone]


class WorkingCopy(BaseModel):
    """A checkout owned by a single pipeline run."""

    path: Path = Field(..., description="Root of the checkout")
    preinstalled: bool = Field(False, description="Skip dependency installation")

    model_config = {"frozen": True}

    @classmethod
    def from_strategy(cls, strategy: CloneStrategy, cloned_path: Optional[Path] = None) -> "WorkingCopy":
        """Build a working copy from the chosen clone strategy.

        Args:
            strategy: How the checkout was obtained
            cloned_path: Path of the fresh clone (required for CloneFresh)

        Returns:
            WorkingCopy whose ``preinstalled`` flag follows the strategy
        """
        if isinstance(strategy, UseExistingClone):
            return cls(path=strategy.path, preinstalled=True)
        if cloned_path is None:
            raise ValueError("cloned_path is required for a fresh clone")
        return cls(path=cloned_path, preinstalled=False)


class GitIdentity(BaseModel):
    """Author identity applied to a single repository's git invocations."""

    name: str
    email: str

    model_config = {"frozen": True}

    @classmethod
    def bot(cls, config: Dict[str, str]) -> "GitIdentity":
        return cls(name=config["name"], email=config["email"])


class GenerationReport(BaseModel):
    """Outcome of running the changelog command across projects."""

    succeeded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)


class CommitResult(BaseModel):
    """Outcome of the commit and push step."""

    status: CommitStatus
    branch: str
    changed_paths: List[str] = Field(default_factory=list)


def fragment_file_name(pr_number: int, branch: str) -> str:
    """Build the changelog fragment file name for a PR.

    Example:
        fragment_file_name(1234, "fix/cart-totals") -> "1234-fix-cart-totals"
    """
    return f"{pr_number}-{branch.replace('/', '-')}"


def safe_extract(data: Dict, *keys, default=None):
    """Safely extract nested dictionary values.

    Args:
        data: Dictionary to extract from
        *keys: Sequence of keys to traverse
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default

    Example:
        safe_extract(pr_data, "head", "repo", "owner", "login")
    """
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current
