#!/usr/bin/env python3
"""Changelog fragment reconciliation and generation.

Stale fragments for the PR are removed from every project before the
project's own changelog command writes a fresh one. Commands are built as
argument lists because message and comment come from untrusted PR text.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterable, List

from configs.config import Config
from utils.errors import DependencyInstallError, FragmentGenerationError
from utils.metrics import incr
from utils.pr_models import ChangelogDirective, GenerationReport, ProjectDescriptor, WorkingCopy

logger = logging.getLogger(__name__)


def fragment_path(working_copy: WorkingCopy, project: str, fragment_file_name: str) -> Path:
    return working_copy.path / project / Config.CHANGELOG_DIR / fragment_file_name


def reconcile(
    working_copy: WorkingCopy,
    all_projects: Iterable[ProjectDescriptor],
    fragment_file_name: str,
) -> List[Path]:
    """Remove an existing fragment named ``fragment_file_name`` from every project.

    Runs for all projects, touched or not, so a reverted change or a new
    significance never leaves a stale entry behind.

    Returns:
        Paths that were removed
    """
    removed: List[Path] = []
    for project in all_projects:
        path = fragment_path(working_copy, project.path, fragment_file_name)
        if path.is_file():
            logger.info(f"Remove existing changelog file {path}")
            path.unlink()
            removed.append(path)
    return removed


def install_dependencies(working_copy: WorkingCopy) -> None:
    """Install workspace dependencies once, unless the copy came preinstalled."""
    if working_copy.preinstalled:
        logger.debug("Working copy is preinstalled; skipping dependency installation")
        return

    logger.info(f"Installing dependencies in {working_copy.path}")
    try:
        result = subprocess.run([Config.PNPM_BIN, "install"], cwd=working_copy.path)
    except OSError as e:
        raise DependencyInstallError(f"Could not run {Config.PNPM_BIN}: {e}") from e
    if result.returncode != 0:
        raise DependencyInstallError(f"{Config.PNPM_BIN} install failed with exit code {result.returncode}")


def changelog_command(project: str, directive: ChangelogDirective, fragment_file_name: str) -> List[str]:
    """Build the argv for a project's ``changelog add`` script."""
    cmd = [
        Config.PNPM_BIN,
        f"--filter=./{project}",
        "run",
        "changelog",
        "add",
        "-f", fragment_file_name,
        "-s", directive.significance,
        "-t", directive.type,
    ]
    if directive.message:
        cmd += ["-e", directive.message]
    if directive.comment:
        cmd += ["-c", directive.comment]
    cmd.append("-n")
    return cmd


def generate(
    working_copy: WorkingCopy,
    project: str,
    directive: ChangelogDirective,
    fragment_file_name: str,
) -> None:
    """Write a changelog fragment for one project.

    Raises:
        FragmentGenerationError: The command could not be launched or exited non-zero
    """
    logger.info(f"Running changelog command for {project}")
    cmd = changelog_command(project, directive, fragment_file_name)
    try:
        result = subprocess.run(cmd, cwd=working_copy.path)
    except OSError as e:
        raise FragmentGenerationError(f"Could not run changelog command for {project}: {e}", project=project) from e
    if result.returncode != 0:
        raise FragmentGenerationError(
            f"Changelog command for {project} failed with exit code {result.returncode}",
            project=project,
        )


def generate_all(
    working_copy: WorkingCopy,
    projects: Iterable[str],
    directive: ChangelogDirective,
    fragment_file_name: str,
) -> GenerationReport:
    """Generate fragments for each project in order, isolating failures."""
    report = GenerationReport()
    for project in projects:
        try:
            generate(working_copy, project, directive, fragment_file_name)
        except FragmentGenerationError as e:
            logger.error(str(e))
            incr("changefile.generation_failure", project=project)
            # A failed command may leave a partial fragment behind
            partial = fragment_path(working_copy, project, fragment_file_name)
            if partial.is_file():
                partial.unlink()
            report.failed.append(project)
            continue
        report.succeeded.append(project)
    return report
