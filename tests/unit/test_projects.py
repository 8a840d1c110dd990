"""Unit tests for workspace project discovery."""

import json

import pytest
from unittest.mock import Mock

from utils.pr_models import ProjectDescriptor, WorkingCopy
from utils.projects import (
    get_touched_file_paths,
    is_fragment_file,
    list_all_projects,
    list_touched_requiring_changelog,
    project_for_file,
    read_requires_changelog,
)

FRAGMENT = "1234-fix-cart-totals"


def compare_client(*filenames, renamed=None):
    client = Mock()
    files = [{"filename": name, "status": "modified"} for name in filenames]
    for new, old in (renamed or {}).items():
        files.append({"filename": new, "previous_filename": old, "status": "renamed"})
    client.compare_files.return_value = files
    return client


class TestListAllProjects:

    def test_enumerates_workspace_globs(self, working_copy):
        projects = list_all_projects(working_copy)

        assert [p.path for p in projects] == [
            "docs",
            "packages/a",
            "packages/b",
            "packages/core",
            "plugins/shop",
        ]

    def test_negated_globs_are_excluded(self, working_copy):
        paths = {p.path for p in list_all_projects(working_copy)}

        assert "plugins/legacy" not in paths

    def test_directories_without_package_json_are_skipped(self, working_copy):
        paths = {p.path for p in list_all_projects(working_copy)}

        assert "packages/not-a-project" not in paths

    def test_requires_changelog_flags(self, working_copy):
        flags = {p.path: p.requires_changelog for p in list_all_projects(working_copy)}

        assert flags["packages/core"] is True
        assert flags["docs"] is False

    def test_missing_workspace_file(self, tmp_path):
        assert list_all_projects(WorkingCopy(path=tmp_path)) == []

    def test_node_modules_are_ignored(self, monorepo, working_copy):
        nested = monorepo / "packages" / "core" / "node_modules" / "dep"
        nested.mkdir(parents=True)
        (nested / "package.json").write_text("{}")
        (monorepo / "pnpm-workspace.yaml").write_text("packages:\n  - 'packages/**'\n")

        paths = {p.path for p in list_all_projects(working_copy)}

        assert not any("node_modules" in p for p in paths)
        assert "packages/core" in paths


class TestReadRequiresChangelog:

    def test_empty_block_is_a_declaration(self, tmp_path):
        (tmp_path / "composer.json").write_text(json.dumps({"extra": {"changelogger": {}}}))

        assert read_requires_changelog(tmp_path) is True

    def test_explicitly_disabled(self, tmp_path):
        (tmp_path / "composer.json").write_text(json.dumps({"extra": {"changelogger": None}}))

        assert read_requires_changelog(tmp_path) is False

    def test_declared_with_settings(self, tmp_path):
        (tmp_path / "composer.json").write_text(json.dumps({"extra": {"changelogger": {"formatter": "keepachangelog"}}}))

        assert read_requires_changelog(tmp_path) is True

    def test_no_manifest_defaults_to_not_required(self, tmp_path):
        assert read_requires_changelog(tmp_path) is False

    def test_invalid_json_defaults_to_not_required(self, tmp_path):
        (tmp_path / "composer.json").write_text("{not json")

        assert read_requires_changelog(tmp_path) is False


class TestTouchedFiles:

    def test_fragment_files_are_ignored(self):
        client = compare_client(
            "packages/core/src/x.ts",
            f"packages/core/changelog/{FRAGMENT}",
            "packages/core/changelog/other-fragment",
        )

        paths = get_touched_file_paths(client, "o", "r", "base", "head", FRAGMENT)

        assert paths == ["packages/core/src/x.ts", "packages/core/changelog/other-fragment"]
        client.compare_files.assert_called_once_with("o", "r", "base", "head")

    def test_renames_count_at_both_locations(self):
        client = compare_client(renamed={"packages/b/src/moved.ts": "packages/a/src/moved.ts"})

        paths = get_touched_file_paths(client, "o", "r", "base", "head", FRAGMENT)

        assert paths == ["packages/b/src/moved.ts", "packages/a/src/moved.ts"]

    def test_is_fragment_file(self):
        assert is_fragment_file(f"plugins/shop/changelog/{FRAGMENT}", FRAGMENT)
        assert not is_fragment_file(f"plugins/shop/src/{FRAGMENT}", FRAGMENT)
        assert not is_fragment_file(FRAGMENT, FRAGMENT)


class TestProjectForFile:

    def test_prefix_must_match_whole_segment(self):
        assert project_for_file("packages/core-extra/x.ts", ["packages/core"]) is None

    def test_deepest_project_wins(self):
        projects = [".", "plugins/shop", "plugins/shop/client/admin"]

        assert project_for_file("plugins/shop/client/admin/index.js", projects) == "plugins/shop/client/admin"
        assert project_for_file("plugins/shop/src/a.php", projects) == "plugins/shop"
        assert project_for_file("README.md", projects) == "."


class TestListTouchedRequiringChangelog:

    def test_scenario_core_only(self, working_copy):
        client = compare_client("packages/core/src/x.ts")

        touched = list_touched_requiring_changelog(working_copy, "base", "head", FRAGMENT, "o", "r", client)

        assert touched == ["packages/core"]

    def test_docs_only_yields_empty_set(self, working_copy):
        client = compare_client("docs/getting-started.md")

        touched = list_touched_requiring_changelog(working_copy, "base", "head", FRAGMENT, "o", "r", client)

        assert touched == []

    def test_files_outside_projects_are_ignored(self, working_copy):
        client = compare_client(".github/workflows/ci.yml", "pnpm-workspace.yaml")

        assert list_touched_requiring_changelog(working_copy, "b", "h", FRAGMENT, "o", "r", client) == []

    def test_order_follows_enumeration(self, working_copy):
        client = compare_client("plugins/shop/a.php", "packages/b/x.ts", "packages/a/y.ts", "docs/z.md")

        touched = list_touched_requiring_changelog(working_copy, "b", "h", FRAGMENT, "o", "r", client)

        assert touched == ["packages/a", "packages/b", "plugins/shop"]

    def test_only_previous_fragment_touched(self, working_copy):
        client = compare_client(f"packages/core/changelog/{FRAGMENT}")

        assert list_touched_requiring_changelog(working_copy, "b", "h", FRAGMENT, "o", "r", client) == []

    def test_accepts_precomputed_projects(self, working_copy):
        client = compare_client("custom/x.ts")
        projects = [ProjectDescriptor(path="custom", requires_changelog=True)]

        touched = list_touched_requiring_changelog(
            working_copy, "b", "h", FRAGMENT, "o", "r", client, all_projects=projects
        )

        assert touched == ["custom"]
