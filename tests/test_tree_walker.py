"""Tests for candidate file enumeration."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from git.exc import GitCommandNotFound

from workbench_core.exceptions import ProjectRootError
from workbench_core.tree_walker import TreeWalker


def _relative(files: list[Path], root: Path) -> set[str]:
    return {path.relative_to(root).as_posix() for path in files}


class TestExhaustiveWalk:
    """Test the walk that includes every regular file."""

    def test_lists_every_file(self, project_dir):
        """All files are returned, including vendored and binary ones."""
        files = TreeWalker().walk(project_dir, include_ignored=True)

        assert _relative(files, project_dir) == {
            "README.md",
            "broken.txt",
            "assets/logo.png",
            "node_modules/lib/index.js",
            "src/main.py",
            "src/pets.txt",
            "src/windows.txt",
        }

    def test_paths_are_joined_onto_root(self, project_dir):
        """Candidates are full paths below the root."""
        files = TreeWalker().walk(project_dir, include_ignored=True)
        assert all(path.is_relative_to(project_dir) for path in files)

    def test_includes_ignored_and_git_files(self, git_project):
        """Ignored files and repository metadata are both enumerated."""
        files = _relative(TreeWalker().walk(git_project, include_ignored=True), git_project)

        assert "build/out.txt" in files
        assert "debug.log" in files
        assert "generated.txt" in files
        assert any(path.startswith(".git/") for path in files)

    def test_exclude_patterns(self, project_dir):
        """Paths containing an exclusion substring are dropped."""
        files = TreeWalker().walk(
            project_dir, include_ignored=True, exclude_patterns={"node_modules", "assets"}
        )
        relative = _relative(files, project_dir)

        assert not any("node_modules" in path for path in relative)
        assert not any("assets" in path for path in relative)
        assert "src/main.py" in relative

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlinks_are_skipped(self, project_dir):
        """Symlinks to files and directories are never returned or followed."""
        (project_dir / "link.py").symlink_to(project_dir / "src" / "main.py")
        (project_dir / "src_link").symlink_to(project_dir / "src", target_is_directory=True)

        relative = _relative(TreeWalker().walk(project_dir, include_ignored=True), project_dir)

        assert "link.py" not in relative
        assert not any(path.startswith("src_link/") for path in relative)


class TestIgnoreAwareWalk:
    """Test the walk honouring git ignore rules."""

    def test_respects_gitignore(self, git_project):
        """Ignored directories, patterns and tracked-but-ignored files are dropped."""
        relative = _relative(TreeWalker().walk(git_project), git_project)

        assert "build/out.txt" not in relative
        assert "debug.log" not in relative
        assert "generated.txt" not in relative

    def test_keeps_tracked_untracked_and_hidden_files(self, git_project):
        """Tracked, untracked and hidden files are all visible."""
        relative = _relative(TreeWalker().walk(git_project), git_project)

        assert "README.md" in relative
        assert "src/pets.txt" in relative
        assert ".gitignore" in relative
        assert ".config/settings.ini" in relative

    def test_skips_repository_metadata(self, git_project):
        """Nothing inside .git is enumerated."""
        relative = _relative(TreeWalker().walk(git_project), git_project)
        assert not any(path.startswith(".git/") for path in relative)

    def test_deleted_tracked_file_is_skipped(self, git_project):
        """A tracked file missing from disk is not a candidate."""
        (git_project / "src" / "main.py").unlink()

        relative = _relative(TreeWalker().walk(git_project), git_project)
        assert "src/main.py" not in relative

    def test_subdirectory_of_repository(self, git_project):
        """Searching below the repository root still applies the ignore rules."""
        (git_project / "src" / "trace.log").write_text("hello\n")
        src = git_project / "src"

        relative = _relative(TreeWalker().walk(src), src)

        assert "main.py" in relative
        assert "trace.log" not in relative

    def test_exclude_patterns_apply(self, git_project):
        """Exclusion substrings apply in ignore-aware mode too."""
        files = TreeWalker().walk(git_project, exclude_patterns={"node_modules"})
        assert not any("node_modules" in str(path) for path in files)

    def test_outside_repository_lists_everything_but_git_dirs(self, project_dir):
        """Outside a work tree no ignore files are consulted."""
        (project_dir / ".gitignore").write_text("*.md\n")
        (project_dir / "vendor" / ".git").mkdir(parents=True)
        (project_dir / "vendor" / ".git" / "HEAD").write_text("ref: refs/heads/main\n")

        relative = _relative(TreeWalker().walk(project_dir), project_dir)

        assert "README.md" in relative
        assert ".gitignore" in relative
        assert "vendor/.git/HEAD" not in relative

    def test_git_missing_falls_back(self, project_dir):
        """When git cannot be run the unfiltered walk is used."""
        with patch("workbench_core.tree_walker.Git") as mock_git:
            mock_git.return_value.ls_files.side_effect = GitCommandNotFound("git", "not found")
            relative = _relative(TreeWalker().walk(project_dir), project_dir)

        assert "src/main.py" in relative


class TestRootValidation:
    """Test failures of the project root itself."""

    @pytest.mark.parametrize("include_ignored", [True, False])
    def test_missing_root(self, temp_dir, include_ignored):
        """A missing root aborts the walk."""
        with pytest.raises(ProjectRootError, match="does not exist"):
            TreeWalker().walk(temp_dir / "missing", include_ignored=include_ignored)

    def test_root_is_a_file(self, project_dir):
        """A file is not a valid root."""
        with pytest.raises(ProjectRootError, match="not a directory"):
            TreeWalker().walk(project_dir / "README.md")

    def test_error_details(self, temp_dir):
        """The error carries the root and a 404 status."""
        with pytest.raises(ProjectRootError) as exc_info:
            TreeWalker().walk(temp_dir / "missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["project_path"] == str(temp_dir / "missing")
