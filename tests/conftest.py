"""Shared fixtures for the monorepo-utils test suite."""

import json
import shutil
import subprocess
from pathlib import Path

import pytest

from utils.pr_models import WorkingCopy


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

TEST_IDENTITY = ["-c", "user.name=Test User", "-c", "user.email=test@example.com"]


def git(*args, cwd):
    """Run git for test setup with a throwaway identity."""
    result = subprocess.run(
        ["git", *TEST_IDENTITY, *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def write_project(root: Path, rel: str, requires_changelog: bool = False, composer: bool = True) -> Path:
    project = root / rel
    project.mkdir(parents=True, exist_ok=True)
    (project / "package.json").write_text(json.dumps({"name": rel.replace("/", "-")}))
    if composer:
        extra = {"changelogger": {"link-template": "https://example.com/pull/${1}"}} if requires_changelog else {}
        (project / "composer.json").write_text(json.dumps({"name": rel, "extra": extra}))
    (project / "changelog").mkdir(exist_ok=True)
    (project / "changelog" / ".gitkeep").write_text("")
    return project


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at an empty directory so global git config is observable."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    return home


@pytest.fixture
def monorepo(tmp_path):
    """A pnpm workspace with projects that do and do not require changelogs."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "pnpm-workspace.yaml").write_text(
        "packages:\n"
        "  - 'packages/*'\n"
        "  - 'plugins/*'\n"
        "  - 'docs'\n"
        "  - '!plugins/legacy'\n"
    )
    write_project(root, "packages/core", requires_changelog=True)
    write_project(root, "packages/a", requires_changelog=True)
    write_project(root, "packages/b", requires_changelog=True)
    write_project(root, "plugins/shop", requires_changelog=True)
    write_project(root, "plugins/legacy", requires_changelog=True)
    write_project(root, "docs", requires_changelog=False, composer=False)
    (root / "packages" / "not-a-project").mkdir()
    return root


@pytest.fixture
def working_copy(monorepo):
    return WorkingCopy(path=monorepo, preinstalled=True)


@pytest.fixture
def git_remote(tmp_path, monorepo, isolated_home):
    """Turn the monorepo into a clone of a bare remote with a ``feature/x`` branch."""
    remote = tmp_path / "remote.git"
    git("init", "--bare", str(remote), cwd=tmp_path)
    git("init", cwd=monorepo)
    git("add", ".", cwd=monorepo)
    git("commit", "-m", "Initial commit", cwd=monorepo)
    git("checkout", "-b", "feature/x", cwd=monorepo)
    git("remote", "add", "origin", str(remote), cwd=monorepo)
    git("push", "origin", "feature/x", cwd=monorepo)
    return remote
