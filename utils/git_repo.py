#!/usr/bin/env python3
"""Git operations on the pipeline's working copy.

Clones the PR head repository, checks out the PR branch, and commits and
pushes generated changelog fragments. Every invocation is an argument list
with repository hooks disabled, and author identity is passed per call with
``-c`` so no global or user configuration is ever written.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Type

from configs.config import Config
from utils.errors import (
    CloneError,
    GitCommandError,
    PushError,
    RemoteBranchError,
)
from utils.pr_models import (
    CloneFresh,
    CloneStrategy,
    CommitResult,
    GitIdentity,
    UseExistingClone,
    WorkingCopy,
)

logger = logging.getLogger(__name__)

HOOKS_DISABLED = ["-c", "core.hooksPath=/dev/null"]


def git_command(args: Sequence[str], identity: Optional[GitIdentity] = None) -> List[str]:
    """Build the argv for a git call with hooks disabled and optional identity."""
    cmd = [Config.GIT_BIN, *HOOKS_DISABLED]
    if identity is not None:
        cmd += ["-c", f"user.name={identity.name}", "-c", f"user.email={identity.email}"]
    cmd.extend(args)
    return cmd


def run_git(
    args: Sequence[str],
    *,
    cwd: Path,
    identity: Optional[GitIdentity] = None,
    capture: bool = True,
    error_cls: Type[GitCommandError] = GitCommandError,
) -> str:
    """Run a git command in ``cwd`` and return its stdout.

    With ``capture=False`` the command inherits stdio so its progress and
    errors are visible to the operator; an empty string is returned.

    Raises:
        GitCommandError (or ``error_cls``): git could not be run or exited non-zero
    """
    cmd = git_command(args, identity)
    logger.debug(f"Running git {' '.join(args)} in {cwd}")
    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=capture, text=True)
    except OSError as e:
        raise error_cls(f"Could not run {Config.GIT_BIN}: {e}", args=list(args)) from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip() if capture else ""
        detail = f": {stderr}" if stderr else ""
        raise error_cls(
            f"git {' '.join(args)} failed with exit code {result.returncode}{detail}",
            args=list(args),
            stderr=stderr,
        )
    return result.stdout if capture else ""


def authenticated_url(owner: str, name: str, token: str) -> str:
    host = Config.get_github_config()["host"]
    return f"https://x-access-token:{token}@{host}/{owner}/{name}.git"


def clone_authenticated_repo(
    owner: str,
    name: str,
    shallow: bool = False,
    *,
    token: Optional[str] = None,
    dest: Optional[Path] = None,
) -> Path:
    """Clone ``owner/name`` into a fresh temporary directory.

    Args:
        owner: Owner of the repository to clone (the PR head owner)
        name: Repository name
        shallow: Fetch only the tip of each branch
        token: GitHub token (defaults to Config.GITHUB_TOKEN)
        dest: Target directory (defaults to a new temp dir)

    Returns:
        Path to the clone

    Raises:
        CloneError: If no token is configured or git clone fails
    """
    token = token or Config.get_github_config()["token"]
    if not token:
        raise CloneError("GitHub token is required to clone (GITHUB_TOKEN or GITHUB_PAT env var)")

    target = dest or Path(tempfile.mkdtemp(prefix=f"{name}-"))
    args = ["clone"]
    if shallow:
        args += ["--depth=1", "--no-single-branch"]
    args += [authenticated_url(owner, name, token), str(target)]

    try:
        result = subprocess.run(git_command(args), capture_output=True, text=True)
    except OSError as e:
        raise CloneError(f"Could not run {Config.GIT_BIN}: {e}") from e
    if result.returncode != 0:
        # stderr may echo the remote URL; keep the token out of logs
        stderr = (result.stderr or "").replace(token, "***").strip()
        raise CloneError(f"Failed to clone {owner}/{name}: {stderr}")

    logger.debug(f"✓ Cloned {owner}/{name} into {target}")
    return target


def prepare_working_copy(strategy: CloneStrategy, owner: str, name: str) -> WorkingCopy:
    """Obtain the working copy for a run according to the clone strategy."""
    if isinstance(strategy, UseExistingClone):
        if not strategy.path.is_dir():
            raise CloneError(f"Existing repository path {strategy.path} does not exist")
        logger.info(f"Using existing repository at {strategy.path}; assuming dependencies are installed")
        return WorkingCopy.from_strategy(strategy)

    cloned = clone_authenticated_repo(owner, name, shallow=False)
    return WorkingCopy.from_strategy(CloneFresh(), cloned_path=cloned)


def checkout_remote_branch(repo_path: Path, branch: str, head: Optional[str] = None) -> None:
    """Check out ``branch`` from origin, tracking the remote branch.

    When ``head`` is given it must name a commit present in the clone.

    Raises:
        RemoteBranchError: If origin has no such branch or ``head`` is unknown
        GitCommandError: If fetching or checking out fails
    """
    heads = run_git(["ls-remote", "--heads", "origin", branch], cwd=repo_path)
    if not heads.strip():
        raise RemoteBranchError(f"No branch named {branch} exists on origin", branch=branch)

    run_git(
        ["fetch", "origin", f"refs/heads/{branch}:refs/remotes/origin/{branch}"],
        cwd=repo_path,
        capture=False,
    )
    run_git(["checkout", "-B", branch, f"origin/{branch}"], cwd=repo_path, capture=False)

    if head:
        try:
            run_git(["rev-parse", "--verify", "--quiet", f"{head}^{{commit}}"], cwd=repo_path)
        except GitCommandError as e:
            raise RemoteBranchError(
                f"Head commit {head} of {branch} is not present in the clone", branch=branch
            ) from e


def short_status(repo_path: Path) -> List[str]:
    """Return the non-empty lines of ``git status --short``."""
    output = run_git(["status", "--short"], cwd=repo_path)
    return [line for line in output.splitlines() if line.strip()]


def commit_and_push(
    working_copy: WorkingCopy,
    branch: str,
    identity: Optional[GitIdentity] = None,
) -> CommitResult:
    """Stage, commit and push the working copy's changes to ``branch``.

    Returns a ``clean`` result without committing when nothing changed.

    Raises:
        GitCommandError: If staging or committing fails
        PushError: If the push is rejected
    """
    repo_path = working_copy.path
    status_lines = short_status(repo_path)
    if not status_lines:
        logger.info("No changes in changelog files. Skipping commit and push.")
        return CommitResult(status="clean", branch=branch)

    changed = [line[3:].strip() for line in status_lines]
    logger.info("Adding and committing changes")
    run_git(["add", "."], cwd=repo_path, identity=identity)
    run_git(["commit", "-m", Config.COMMIT_MESSAGE], cwd=repo_path, identity=identity)
    run_git(["push", "origin", branch], cwd=repo_path, identity=identity, capture=False, error_cls=PushError)
    logger.info(f"Pushed changes to {branch}")
    return CommitResult(status="pushed", branch=branch, changed_paths=changed)
