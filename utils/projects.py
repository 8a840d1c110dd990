#!/usr/bin/env python3
"""Workspace project discovery for changelog automation.

Enumerates the projects declared by ``pnpm-workspace.yaml``, reads each
project's ``composer.json`` for a changelogger declaration, and maps the
files changed by a pull request onto those projects.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Set

import yaml

from configs.config import Config
from utils.github_client import GithubClient
from utils.pr_models import ProjectDescriptor, WorkingCopy

logger = logging.getLogger(__name__)

PROJECT_MANIFEST = "package.json"
CHANGELOG_MANIFEST = "composer.json"
IGNORED_PARTS = {"node_modules", ".git"}


def _workspace_globs(repo_path: Path) -> List[str]:
    workspace_file = repo_path / Config.WORKSPACE_FILE
    if not workspace_file.is_file():
        logger.warning(f"No {Config.WORKSPACE_FILE} found in {repo_path}; no projects discovered")
        return []
    with open(workspace_file, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    packages = data.get("packages") or []
    return [str(p).strip() for p in packages if str(p).strip()]


def _expand(repo_path: Path, pattern: str) -> Set[str]:
    pattern = pattern.strip("/")
    if pattern in ("", "."):
        candidates: Iterable[Path] = [repo_path]
    else:
        candidates = repo_path.glob(pattern)
    found = set()
    for candidate in candidates:
        if not candidate.is_dir():
            continue
        rel = candidate.relative_to(repo_path)
        if IGNORED_PARTS.intersection(rel.parts):
            continue
        if (candidate / PROJECT_MANIFEST).is_file():
            found.add(rel.as_posix())
    return found


def read_requires_changelog(project_dir: Path) -> bool:
    """Return True if the project's composer.json declares a changelogger.

    Projects without the manifest or the declaration do not require one.
    """
    manifest = project_dir / CHANGELOG_MANIFEST
    if not manifest.is_file():
        return False
    try:
        with open(manifest, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {manifest}: {e}")
        return False
    extra = data.get("extra") if isinstance(data, dict) else None
    if not isinstance(extra, dict):
        return False
    declaration = extra.get("changelogger")
    # An empty settings block still declares the changelogger
    return isinstance(declaration, (dict, list)) or bool(declaration)


def list_all_projects(working_copy: WorkingCopy) -> List[ProjectDescriptor]:
    """Enumerate every workspace project, sorted by path."""
    repo_path = working_copy.path
    included: Set[str] = set()
    excluded: Set[str] = set()
    for pattern in _workspace_globs(repo_path):
        if pattern.startswith("!"):
            excluded |= _expand(repo_path, pattern[1:])
        else:
            included |= _expand(repo_path, pattern)

    projects = [
        ProjectDescriptor(path=path, requires_changelog=read_requires_changelog(repo_path / path))
        for path in sorted(included - excluded)
    ]
    logger.debug(f"Discovered {len(projects)} projects")
    return projects


def is_fragment_file(file_path: str, fragment_file_name: str) -> bool:
    """True for ``<anything>/changelog/<fragment_file_name>``."""
    parts = PurePosixPath(file_path).parts
    return len(parts) >= 2 and parts[-1] == fragment_file_name and parts[-2] == Config.CHANGELOG_DIR


def get_touched_file_paths(
    client: GithubClient,
    owner: str,
    name: str,
    base: str,
    head: str,
    fragment_file_name: str,
) -> List[str]:
    """List files changed between ``base`` and ``head``.

    Renamed files count at both their old and new location. The PR's own
    changelog fragments are ignored so earlier automation runs do not count
    as touches.
    """
    paths: List[str] = []
    seen: Set[str] = set()
    for entry in client.compare_files(owner, name, base, head):
        for key in ("filename", "previous_filename"):
            file_path = entry.get(key)
            if not file_path or file_path in seen:
                continue
            seen.add(file_path)
            if is_fragment_file(file_path, fragment_file_name):
                continue
            paths.append(file_path)
    return paths


def project_for_file(file_path: str, project_paths: Iterable[str]) -> Optional[str]:
    """Return the deepest project containing ``file_path``, if any."""
    best: Optional[str] = None
    for project in project_paths:
        if project == ".":
            matches = True
        else:
            matches = file_path == project or file_path.startswith(project + "/")
        if not matches:
            continue
        if best is None or best == "." or (project != "." and len(project) > len(best)):
            best = project
    return best


def list_touched_requiring_changelog(
    working_copy: WorkingCopy,
    base: str,
    head: str,
    fragment_file_name: str,
    owner: str,
    name: str,
    client: GithubClient,
    all_projects: Optional[List[ProjectDescriptor]] = None,
) -> List[str]:
    """Return the touched projects that require a changelog.

    The result follows the all-projects enumeration order, which is also the
    order generation runs in.
    """
    projects = all_projects if all_projects is not None else list_all_projects(working_copy)
    touched_files = get_touched_file_paths(client, owner, name, base, head, fragment_file_name)

    by_path: Dict[str, ProjectDescriptor] = {p.path: p for p in projects}
    touched: Set[str] = set()
    for file_path in touched_files:
        project = project_for_file(file_path, by_path)
        if project is not None:
            touched.add(project)

    skipped = sorted(p for p in touched if not by_path[p].requires_changelog)
    if skipped:
        logger.debug(f"Touched projects without changelog requirement: {', '.join(skipped)}")

    return [p.path for p in projects if p.path in touched and p.requires_changelog]
