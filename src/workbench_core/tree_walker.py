"""Candidate file enumeration for project search."""

import logging
import os
from pathlib import Path

from git import Git
from git.exc import GitCommandError, GitCommandNotFound

from .exceptions import ProjectRootError
from .path_utils import path_contains_any

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"


class TreeWalker:
    """
    Enumerates regular files under a project root.

    Two policies are supported: an ignore-aware walk that honours git ignore
    rules while keeping hidden files visible, and an exhaustive walk that
    returns every regular file. Symlinks are never followed or returned.
    """

    def walk(
        self,
        root: Path,
        include_ignored: bool = False,
        exclude_patterns: frozenset[str] | set[str] = frozenset(),
    ) -> list[Path]:
        """
        List candidate files under a project root.

        Args:
            root: Project root directory
            include_ignored: Return files hidden by ignore rules too
            exclude_patterns: Raw substrings; paths containing one are dropped

        Returns:
            Candidate file paths, each joined onto ``root``

        Raises:
            ProjectRootError: If the root is missing or cannot be listed
        """
        self._ensure_readable_root(root)

        if include_ignored:
            candidates = self._walk_all(root)
        else:
            candidates = self._walk_respecting_ignores(root)

        files = [
            path
            for path in candidates
            if not path_contains_any(path, exclude_patterns) and _is_regular_file(path)
        ]
        logger.debug(
            f"Walked {root} (include_ignored={include_ignored}): {len(files)} candidate files"
        )
        return files

    def _ensure_readable_root(self, root: Path) -> None:
        """Fail fast when the root cannot be traversed."""
        if not root.exists():
            raise ProjectRootError(str(root), "directory does not exist")
        if not root.is_dir():
            raise ProjectRootError(str(root), "not a directory")
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise ProjectRootError(str(root), str(e)) from e

    def _walk_all(self, root: Path, skip_git_dirs: bool = False) -> list[Path]:
        """Enumerate every file below the root without consulting ignore files."""
        files = []
        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            if skip_git_dirs and GIT_DIR_NAME in dirnames:
                dirnames.remove(GIT_DIR_NAME)
            dirnames.sort()
            current = Path(dirpath)
            for filename in sorted(filenames):
                files.append(current / filename)
        return files

    def _walk_respecting_ignores(self, root: Path) -> list[Path]:
        """Enumerate files git would not ignore, falling back outside a work tree."""
        try:
            return self._list_git_files(root)
        except GitCommandNotFound as e:
            logger.warning(f"git not available, ignore rules not applied: {e}")
        except GitCommandError as e:
            logger.debug(f"{root} is not inside a git work tree, ignore rules not applied: {e}")

        return self._walk_all(root, skip_git_dirs=True)

    def _list_git_files(self, root: Path) -> list[Path]:
        """
        Ask git for tracked and untracked files that are not ignored.

        Tracked files matching an ignore rule are removed as well, so a file is
        excluded whenever the ignore rules cover it.
        """
        git = Git(str(root))
        listed = _split_nul(git.ls_files("--cached", "--others", "--exclude-standard", "-z"))
        ignored = set(
            _split_nul(git.ls_files("--cached", "--ignored", "--exclude-standard", "-z"))
        )
        return [root / entry for entry in listed if entry not in ignored]


def _split_nul(output: str) -> list[str]:
    # Unmerged paths are listed once per stage
    return list(dict.fromkeys(entry for entry in output.split("\0") if entry))


def _is_regular_file(path: Path) -> bool:
    return not path.is_symlink() and path.is_file()
